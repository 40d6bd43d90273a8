"""
artdid.core.models - Core Data Models
=======================================

Pydantic models that flow between the registry layers.

Model Hierarchy:
    Record            → Ledger-owned state of one DID (histories + timestamps)
    RegisterResult    → What Register produced (DID, CID, tx)
    ResolveResult     → Ledger-derived fields + best-effort metadata
    UpdateResult      → New version details
    TransferResult    → Post-transfer ownership as confirmed by the ledger
    CheckResult       → Existence flag
    Outcome[T]        → Either a result value or an error kind (never both)

Data Flow:
    ┌──────────────┐   Record    ┌────────────────────┐   Outcome[T]   ┌──────────┐
    │ LedgerGateway│ ──────────→ │ RecordOrchestrator │ ─────────────→ │ HTTP     │
    └──────────────┘             └────────────────────┘                │ handlers │
                                                                       └──────────┘

Result models use snake_case attributes and camelCase aliases; the HTTP
boundary serializes them with ``model_dump(by_alias=True, mode="json")``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from artdid.core.enums import ErrorKind
from artdid.core.exceptions import ArtDIDError


T = TypeVar("T")


def _now() -> datetime:
    """Current UTC timestamp. Every timestamp in the registry is UTC."""
    return datetime.now(timezone.utc)


# =============================================================================
# Record Model
# =============================================================================
# The ledger's view of one DID. Both histories are append-only and
# oldest-first; the last entry of each is the current value.
# =============================================================================
class Record(BaseModel):
    """Ledger-owned state of a registered artwork.

    Attributes:
        record_id: The ledger-assigned identifier (4th DID segment).
        content_address_history: Every CID the record has pointed to,
            oldest first. Never empty for an existing record.
        owner_history: Every address that has owned the record, oldest first.
        created_at: Set once at registration.
        updated_at: Set on every mutation.
    """

    model_config = ConfigDict(frozen=True)

    record_id: str
    content_address_history: list[str] = Field(default_factory=list)
    owner_history: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @property
    def current_content_address(self) -> Optional[str]:
        return self.content_address_history[-1] if self.content_address_history else None

    @property
    def current_owner(self) -> str:
        return self.owner_history[-1] if self.owner_history else ""

    @property
    def version(self) -> int:
        """Number of content versions committed so far."""
        return len(self.content_address_history)


# =============================================================================
# Workflow Results
# =============================================================================
class _ResultModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterResult(_ResultModel):
    """Result of Register: the new DID and where its metadata lives."""

    did: str
    tx_id: str
    content_address: str
    content_url: str
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="The caller's metadata, as submitted",
    )


class BlockchainData(_ResultModel):
    """Ledger-derived part of a resolution."""

    record_id: str
    cid: str
    content_address_history: list[str]
    owners: list[str]
    current_owner: str
    created_at: datetime
    updated_at: datetime
    service_endpoint: str
    resolved_at: datetime = Field(default_factory=_now)


class ResolveResult(_ResultModel):
    """Result of Resolve.

    A failed content fetch is not a failed resolution: `content_metadata`
    is None and `content_fetch_error` says why.
    """

    did: str
    blockchain_data: BlockchainData
    content_metadata: Optional[Any] = None
    content_fetch_error: Optional[str] = None


class UpdateResult(_ResultModel):
    """Result of Update: the committed version and both addresses."""

    did: str
    tx_id: str
    new_address: str
    previous_address: str
    version: int
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="The stored metadata, including version fields",
    )


class TransferResult(_ResultModel):
    """Result of Transfer, read back from the ledger after the commit."""

    did: str
    tx_id: str
    previous_owner: str
    new_owner: str
    current_owner: str
    total_owners: int


class CheckResult(_ResultModel):
    """Result of an existence check."""

    did: str
    exists: bool


# =============================================================================
# Outcome Model
# =============================================================================
# Workflows return an Outcome instead of raising. Callers branch on
# `outcome.ok`; on failure `error_kind` says which category of failure
# happened and the HTTP boundary maps it to a status code.
# =============================================================================
class Outcome(BaseModel, Generic[T]):
    """Either a workflow value or an error kind.

    Example:
        >>> outcome = orchestrator.resolve("did:art:hkust:0xabc")
        >>> if outcome.ok:
        ...     print(outcome.value.blockchain_data.cid)
        ... else:
        ...     print(outcome.error_kind, outcome.error_message)
    """

    value: Optional[T] = None
    error_kind: Optional[ErrorKind] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    error_details: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ArtDIDError) -> "Outcome[T]":
        return cls(
            error_kind=error.kind,
            error_message=error.message,
            error_code=error.error_code,
            error_details=error.details,
        )

    def unwrap(self) -> T:
        """Return the value, or raise RuntimeError if this is a failure."""
        if not self.ok:
            raise RuntimeError(
                f"Outcome is a failure: [{self.error_kind.value}] {self.error_message}"
            )
        return self.value  # type: ignore[return-value]
