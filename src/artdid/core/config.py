"""
artdid.core.config - Configuration Management
===============================================

Configuration for the ArtDID registry. Values are loaded with the following
priority (highest first):

    1. Explicit constructor arguments (load_config passes YAML values this way)
    2. Environment variables (prefixed with ARTDID_)
    3. Default values defined in the models below

Architecture Context:
    RegistryConfig is created once at startup and handed to ArtDIDRegistry,
    which builds the process-wide handles from it exactly once:

        RegistryConfig
            ├── LedgerConfig        → Ledger Gateway (memory / web3)
            ├── ContentStoreConfig  → Content Store (memory / ipfs)
            └── (other settings)    → logging, metadata enrichment

Environment Variables:
    ARTDID_LOG_LEVEL=DEBUG
    ARTDID_LEDGER__BACKEND=web3
    ARTDID_LEDGER__RPC_URL=http://besu-node:8545
    ARTDID_LEDGER__CONTRACT_ADDRESS=0x...
    ARTDID_LEDGER__PRIVATE_KEY=0x...
    ARTDID_CONTENT_STORE__BACKEND=ipfs
    ARTDID_CONTENT_STORE__API_URL=http://ipfs-node:5001
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from artdid.core.enums import ContentBackend, LedgerBackend
from artdid.core.exceptions import ConfigurationError


_PRIVATE_KEY_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")

DEFAULT_FALLBACK_GATEWAYS = [
    "https://ipfs.io",
    "https://cloudflare-ipfs.com",
    "https://gateway.pinata.cloud",
    "https://dweb.link",
]


# =============================================================================
# Ledger Configuration
# =============================================================================
class LedgerConfig(BaseModel):
    """Configuration for the Ledger Gateway.

    Attributes:
        backend: Which gateway implementation to build.
        rpc_url: JSON-RPC endpoint of the ledger node (web3 backend).
        contract_address: Address of the deployed ArtDID registry contract.
        private_key: Signing key for transactions, 0x + 64 hex digits.
        account: Signer address used by the in-memory backend.
        request_timeout_seconds: Timeout for each JSON-RPC request.
        confirmation_timeout_seconds: How long a commit waits for its receipt
            before failing with LedgerUnavailable. Never resubmitted.
        poll_interval_seconds: Receipt polling interval while waiting.
    """

    backend: LedgerBackend = Field(
        default=LedgerBackend.MEMORY,
        description="Ledger backend: 'memory' or 'web3'",
    )
    rpc_url: Optional[str] = Field(
        default=None,
        description="JSON-RPC URL of the ledger node",
    )
    contract_address: Optional[str] = Field(
        default=None,
        description="Deployed registry contract address",
    )
    private_key: Optional[str] = Field(
        default=None,
        description="Transaction signing key (0x + 64 hex digits)",
    )
    account: str = Field(
        default="0x0000000000000000000000000000000000000001",
        description="Signer address for the in-memory backend",
    )
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    confirmation_timeout_seconds: float = Field(default=120.0, gt=0)
    poll_interval_seconds: float = Field(default=0.5, gt=0)

    @field_validator("private_key")
    @classmethod
    def _check_private_key(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not _PRIVATE_KEY_PATTERN.match(value):
            raise ValueError("Invalid private key configuration")
        return value


# =============================================================================
# Content Store Configuration
# =============================================================================
class ContentStoreConfig(BaseModel):
    """Configuration for the Content Store Client.

    Uploads go only to the caller-operated node (`api_url`). Retrieval tries
    the node's own gateway first, then each of `fallback_gateways` in order.

    Attributes:
        backend: Which store implementation to build.
        api_url: Caller-operated IPFS node HTTP API.
        gateway_url: Caller-operated IPFS node gateway (first retrieval source).
        primary_timeout_seconds: Bound for the first retrieval source.
        fallback_timeout_seconds: Bound for each fallback gateway.
        upload_timeout_seconds: Bound for the upload call.
        fallback_gateways: Priority-ordered public gateways.
        public_gateway_url: Base used to build the public content URL.
    """

    backend: ContentBackend = Field(
        default=ContentBackend.MEMORY,
        description="Content store backend: 'memory' or 'ipfs'",
    )
    api_url: str = Field(default="http://127.0.0.1:5001")
    gateway_url: str = Field(default="http://127.0.0.1:8080")
    primary_timeout_seconds: float = Field(default=5.0, gt=0)
    fallback_timeout_seconds: float = Field(default=3.0, gt=0)
    upload_timeout_seconds: float = Field(default=30.0, gt=0)
    fallback_gateways: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FALLBACK_GATEWAYS),
        description="Public gateways tried in order after the primary",
    )
    public_gateway_url: str = Field(default="https://ipfs.io")


# =============================================================================
# Main Configuration
# =============================================================================
# Environment Variable Mapping:
#   ARTDID_LOG_LEVEL                 → config.log_level
#   ARTDID_LEDGER__RPC_URL           → config.ledger.rpc_url
#   ARTDID_CONTENT_STORE__API_URL    → config.content_store.api_url
# =============================================================================
class RegistryConfig(BaseSettings):
    """Top-level configuration for the ArtDID registry.

    Attributes:
        environment: Deployment environment.
        log_level: Logging level for structlog output.
        json_logs: Render logs as JSON lines instead of console output.
        service_name: Reported by the health endpoint.
        metadata_standard: Value of the `standard` field stamped on metadata.
        ledger: Ledger Gateway configuration.
        content_store: Content Store configuration.
    """

    environment: Literal["dev", "staging", "prod"] = Field(default="dev")
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)
    service_name: str = Field(default="ArtDID Registry API")
    metadata_standard: str = Field(default="Karen 1.0")

    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    content_store: ContentStoreConfig = Field(default_factory=ContentStoreConfig)

    model_config = {
        "env_prefix": "ARTDID_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }


# =============================================================================
# Configuration Loader
# =============================================================================
def load_config(path: Optional[str] = None) -> RegistryConfig:
    """Load registry configuration from a YAML file and/or environment variables.

    Args:
        path: Path to a YAML file. If None, 'artdid.yaml' in the current
            directory is used when present; otherwise defaults + environment.

    Returns:
        A fully validated RegistryConfig.

    Raises:
        FileNotFoundError: If an explicit path is given but doesn't exist.
        ConfigurationError: If the YAML is malformed or not a mapping.
    """
    if path is None:
        default_path = Path("artdid.yaml")
        if default_path.exists():
            path = str(default_path)

    yaml_data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(config_path) as f:
            try:
                raw_data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigurationError(
                    message=f"Invalid YAML in {path}: {exc}",
                    error_code="INVALID_CONFIG_FILE",
                    details={"path": path},
                ) from exc

        if raw_data is None:
            raw_data = {}
        if not isinstance(raw_data, dict):
            raise ConfigurationError(
                message=f"Configuration file {path} must contain a mapping",
                error_code="INVALID_CONFIG_FILE",
                details={"path": path},
            )
        yaml_data = raw_data

    return RegistryConfig(**yaml_data)
