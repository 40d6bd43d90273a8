"""
artdid.core - Foundation Layer
================================

Building blocks every other package depends on:

    - config:      RegistryConfig, LedgerConfig, ContentStoreConfig
    - enums:       ErrorKind, LedgerBackend, ContentBackend
    - exceptions:  ArtDIDError hierarchy
    - models:      Record, workflow results, Outcome
    - did:         DID Codec (parse_did / format_did)
    - logging:     structlog setup

Dependency Rule:
    core/ depends on NOTHING else in the artdid package.
"""

from artdid.core.config import (
    ContentStoreConfig,
    LedgerConfig,
    RegistryConfig,
    load_config,
)
from artdid.core.did import DID_PREFIX, ParsedDID, format_did, parse_did
from artdid.core.enums import ContentBackend, ErrorKind, LedgerBackend
from artdid.core.exceptions import (
    ArtDIDError,
    ConfigurationError,
    ContentFetchExhaustedError,
    ContentStoreUnavailableError,
    DuplicateOwnerError,
    InvalidFormatError,
    InvalidInputError,
    LedgerUnavailableError,
    OwnerAuthorizationDeniedError,
    RecordNotFoundError,
    StaleRecordError,
)
from artdid.core.models import (
    BlockchainData,
    CheckResult,
    Outcome,
    Record,
    RegisterResult,
    ResolveResult,
    TransferResult,
    UpdateResult,
)

__all__ = [
    # Config
    "RegistryConfig",
    "LedgerConfig",
    "ContentStoreConfig",
    "load_config",
    # DID Codec
    "DID_PREFIX",
    "ParsedDID",
    "parse_did",
    "format_did",
    # Enums
    "ErrorKind",
    "LedgerBackend",
    "ContentBackend",
    # Models
    "Record",
    "RegisterResult",
    "BlockchainData",
    "ResolveResult",
    "UpdateResult",
    "TransferResult",
    "CheckResult",
    "Outcome",
    # Exceptions
    "ArtDIDError",
    "InvalidInputError",
    "InvalidFormatError",
    "RecordNotFoundError",
    "OwnerAuthorizationDeniedError",
    "DuplicateOwnerError",
    "StaleRecordError",
    "LedgerUnavailableError",
    "ContentStoreUnavailableError",
    "ContentFetchExhaustedError",
    "ConfigurationError",
]
