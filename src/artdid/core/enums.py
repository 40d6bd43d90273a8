"""
artdid.core.enums - Type-Safe Enumerations
============================================

Enumerations used throughout the ArtDID registry. All enums inherit from
both `str` and `Enum`, so they serialize to plain strings in JSON/YAML and
compare equal to their string values:

    >>> ErrorKind.RECORD_NOT_FOUND == "record_not_found"
    True

Mapping:
    ErrorKind       → every failure category a workflow can report
    LedgerBackend   → which Ledger Gateway implementation to build
    ContentBackend  → which Content Store implementation to build
"""

from enum import Enum


# =============================================================================
# Error Kind Enumeration
# =============================================================================
# Every workflow failure is reported as exactly one of these kinds. The HTTP
# boundary maps kinds to status codes (see artdid.api.handlers):
#
#   INVALID_INPUT / INVALID_FORMAT / DUPLICATE_OWNER → 400
#   OWNER_AUTHORIZATION_DENIED                       → 403
#   RECORD_NOT_FOUND                                 → 404
#   STALE_RECORD                                     → 409
#   LEDGER_UNAVAILABLE / CONTENT_STORE_UNAVAILABLE /
#   CONTENT_FETCH_EXHAUSTED / CONFIGURATION          → 500
# =============================================================================
class ErrorKind(str, Enum):
    """Failure categories surfaced by the registry workflows.

    Client-caused kinds are detected before any network call; the rest
    come from the ledger or the content network.
    """

    # --- Client-caused (no side effects) ---
    INVALID_INPUT = "invalid_input"
    INVALID_FORMAT = "invalid_format"

    # --- Ledger-enforced rules ---
    RECORD_NOT_FOUND = "record_not_found"
    OWNER_AUTHORIZATION_DENIED = "owner_authorization_denied"
    DUPLICATE_OWNER = "duplicate_owner"
    STALE_RECORD = "stale_record"

    # --- Infrastructure faults ---
    LEDGER_UNAVAILABLE = "ledger_unavailable"
    CONTENT_STORE_UNAVAILABLE = "content_store_unavailable"
    CONTENT_FETCH_EXHAUSTED = "content_fetch_exhausted"
    CONFIGURATION = "configuration"


class LedgerBackend(str, Enum):
    """Ledger Gateway implementations selectable from configuration."""

    MEMORY = "memory"   # In-process ledger (development, tests)
    WEB3 = "web3"       # ArtDID registry contract over JSON-RPC


class ContentBackend(str, Enum):
    """Content Store implementations selectable from configuration."""

    MEMORY = "memory"   # In-process content-addressed dict
    IPFS = "ipfs"       # Caller-operated IPFS node + public gateways
