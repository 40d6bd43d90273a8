"""
artdid.integrations.ledger.base - Abstract Ledger Gateway
===========================================================

The typed seam between the registry and the append-only ledger that holds
canonical record state. The Orchestrator never talks to a ledger client
directly; it calls this interface.

Architecture Context:
    ┌────────────────────┐   register()/update()/...   ┌─────────────────────┐
    │ RecordOrchestrator │ ──────────────────────────→ │  BaseLedgerGateway  │
    │                    │ ←── Record / receipts ───── │  (abstract)         │
    └────────────────────┘                             └──────────┬──────────┘
                                                                  │
                                                      ┌───────────┴──────────┐
                                                      │                      │
                                               ┌──────▼──────┐      ┌────────▼───────┐
                                               │  InMemory   │      │  Web3 (ArtDID  │
                                               │  Ledger     │      │  contract)     │
                                               └─────────────┘      └────────────────┘

Contract every implementation honors:
    - Commits block until the ledger confirms them. A receipt is only
      returned for a confirmed transaction; anything else raises.
    - The record id returned by register() comes from the ledger's own
      confirmation, never recomputed locally.
    - Ownership rules (current-owner authorization, no duplicate owners)
      and record existence on update are enforced by the ledger at commit
      time, not pre-checked here.
    - Every transport or decoding fault surfaces as LedgerUnavailableError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, Field

from artdid.core.config import LedgerConfig
from artdid.core.models import Record


# =============================================================================
# Receipts
# =============================================================================
class TransactionReceipt(BaseModel):
    """A confirmed ledger transaction.

    Attributes:
        tx_id: Transaction hash/identifier assigned by the ledger.
        block_number: Block that included the transaction, when known.
    """

    tx_id: str
    block_number: Optional[int] = None


class RegistrationReceipt(TransactionReceipt):
    """A confirmed registration, carrying the ledger-assigned record id."""

    record_id: str = Field(description="Record id from the confirmation event")


# =============================================================================
# Abstract Base Ledger Gateway
# =============================================================================
class BaseLedgerGateway(ABC):
    """Abstract base class for all ledger gateways.

    What subclasses must implement:
        - exists(), get_full(), current_owner(), is_owner(): reads
        - register(), update(), transfer_ownership(): confirmed commits
        - caller_address: the account commits are signed as

    Attributes:
        _config: The ledger configuration.
    """

    def __init__(self, config: LedgerConfig) -> None:
        self._config = config

    @property
    def backend_name(self) -> str:
        return self._config.backend.value

    @property
    @abstractmethod
    def caller_address(self) -> str:
        """Address of the account this gateway commits transactions as."""
        ...

    # =========================================================================
    # Reads
    # =========================================================================

    @abstractmethod
    def exists(self, record_id: str) -> bool:
        """Check whether the ledger holds a record.

        Raises:
            LedgerUnavailableError: On transport fault.
        """
        ...

    @abstractmethod
    def get_full(self, record_id: str) -> Record:
        """Read the full record: both histories and timestamps.

        Raises:
            RecordNotFoundError: If the content-address history is empty.
            LedgerUnavailableError: On transport or decoding fault.
        """
        ...

    @abstractmethod
    def current_owner(self, record_id: str) -> str:
        """Last entry of the owner history, or "" if there is none."""
        ...

    @abstractmethod
    def is_owner(self, record_id: str, address: str) -> bool:
        """True if `address` appears anywhere in the owner history.

        This is history membership, not a current-owner check.
        """
        ...

    # =========================================================================
    # Commits
    # =========================================================================

    @abstractmethod
    def register(self, content_address: str) -> RegistrationReceipt:
        """Create a record pointing at `content_address`, owned by the caller.

        Blocks until the ledger confirms the transaction.

        Raises:
            LedgerUnavailableError: On transport fault, revert, or
                confirmation timeout.
        """
        ...

    @abstractmethod
    def update(
        self,
        record_id: str,
        new_content_address: str,
        expected_length: Optional[int] = None,
    ) -> TransactionReceipt:
        """Append `new_content_address` to the record's content history.

        Args:
            record_id: Record to update. Not pre-checked; an unknown id is
                rejected by the ledger at commit time.
            new_content_address: CID of the new metadata version.
            expected_length: History length the caller read before building
                this version. When given, the ledger rejects the commit if
                the history has changed since.

        Raises:
            RecordNotFoundError: If the ledger rejects an unknown record id.
            StaleRecordError: If `expected_length` no longer matches.
            LedgerUnavailableError: On transport fault or timeout.
        """
        ...

    @abstractmethod
    def transfer_ownership(self, record_id: str, new_owner: str) -> TransactionReceipt:
        """Append `new_owner` to the record's owner history.

        Raises:
            OwnerAuthorizationDeniedError: If the caller is not the current owner.
            DuplicateOwnerError: If `new_owner` is already in the owner history.
            RecordNotFoundError: If the record does not exist.
            LedgerUnavailableError: On transport fault or timeout.
        """
        ...

    def close(self) -> None:
        """Release any connection resources. No-op by default."""
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(backend={self.backend_name!r})"
