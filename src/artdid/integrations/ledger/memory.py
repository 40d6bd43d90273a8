"""
artdid.integrations.ledger.memory - In-Process Ledger
=======================================================

An in-memory stand-in for the ArtDID registry contract, used for local
development and tests. No network, no gas, but the same rules.

Two objects:
    InMemoryLedger          The shared "chain": records, tx counter, lock.
                            One instance is shared by every gateway.
    InMemoryLedgerGateway   A BaseLedgerGateway bound to one signer account.
                            Several gateways with different accounts can
                            share one ledger to model several callers.

Every commit runs under the ledger lock, so observers never see a state
between the pre- and post-transaction record. Rule checks happen inside the
commit, the same place the contract enforces them.

Usage:
    >>> ledger = InMemoryLedger()
    >>> alice = InMemoryLedgerGateway(ledger=ledger, account="0xA")
    >>> bob = InMemoryLedgerGateway(ledger=ledger, account="0xB")
    >>> receipt = alice.register("Qm123")
    >>> alice.transfer_ownership(receipt.record_id, "0xB")
    >>> bob.current_owner(receipt.record_id)
    '0xB'
"""

from __future__ import annotations

import hashlib
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from artdid.core.config import LedgerConfig
from artdid.core.enums import LedgerBackend
from artdid.core.exceptions import (
    DuplicateOwnerError,
    LedgerUnavailableError,
    OwnerAuthorizationDeniedError,
    RecordNotFoundError,
    StaleRecordError,
)
from artdid.core.models import Record
from artdid.integrations.ledger.base import (
    BaseLedgerGateway,
    RegistrationReceipt,
    TransactionReceipt,
)


# =============================================================================
# Logger
# =============================================================================
logger = structlog.get_logger()


RecordIdFactory = Callable[[str, str, int], str]


def _default_record_id(content_address: str, owner: str, sequence: int) -> str:
    """Derive a 20-byte hex record id from the registration inputs."""
    digest = hashlib.sha256(f"{owner}:{content_address}:{sequence}".encode()).hexdigest()
    return f"0x{digest[:40]}"


def _same_address(a: str, b: str) -> bool:
    return a.lower() == b.lower()


class _MutableRecord:
    __slots__ = ("content_address_history", "owner_history", "created_at", "updated_at")

    def __init__(self, content_address: str, owner: str, now: datetime) -> None:
        self.content_address_history = [content_address]
        self.owner_history = [owner]
        self.created_at = now
        self.updated_at = now


# =============================================================================
# The Shared Ledger
# =============================================================================
class InMemoryLedger:
    """Process-local append-only ledger.

    Attributes:
        _records: record_id → mutable record, only touched under `_lock`.
        _record_id_factory: Computes the id assigned at registration.
        _clock: Timestamp source (injectable for tests).
    """

    def __init__(
        self,
        record_id_factory: Optional[RecordIdFactory] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._records: dict[str, _MutableRecord] = {}
        self._lock = threading.Lock()
        self._tx_counter = 0
        self._record_id_factory = record_id_factory or _default_record_id
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._unavailable = False
        self._logger = logger.bind(component="in_memory_ledger")

    # =========================================================================
    # Fault Injection
    # =========================================================================

    def set_unavailable(self, unavailable: bool = True) -> None:
        """Make every subsequent call fail with LedgerUnavailableError."""
        self._unavailable = unavailable

    def _check_available(self) -> None:
        if self._unavailable:
            raise LedgerUnavailableError(
                message="Ledger node unreachable",
                error_code="LEDGER_CONNECTION_FAILED",
            )

    def _next_tx_id(self) -> str:
        self._tx_counter += 1
        return "0x" + hashlib.sha256(f"tx:{self._tx_counter}".encode()).hexdigest()

    # =========================================================================
    # Reads
    # =========================================================================

    def snapshot(self, record_id: str) -> Optional[Record]:
        self._check_available()
        with self._lock:
            rec = self._records.get(record_id)
            if rec is None:
                return None
            return Record(
                record_id=record_id,
                content_address_history=list(rec.content_address_history),
                owner_history=list(rec.owner_history),
                created_at=rec.created_at,
                updated_at=rec.updated_at,
            )

    # =========================================================================
    # Transactions
    # =========================================================================

    def set_record(self, sender: str, content_address: str) -> RegistrationReceipt:
        self._check_available()
        with self._lock:
            sequence = len(self._records)
            record_id = self._record_id_factory(content_address, sender, sequence)
            if record_id in self._records:
                raise LedgerUnavailableError(
                    message=f"Transaction reverted: record '{record_id}' already exists",
                    error_code="TRANSACTION_REVERTED",
                    details={"record_id": record_id},
                )
            self._records[record_id] = _MutableRecord(content_address, sender, self._clock())
            tx_id = self._next_tx_id()
            block_number = self._tx_counter

        self._logger.debug("record_created", record_id=record_id, cid=content_address)
        return RegistrationReceipt(tx_id=tx_id, record_id=record_id, block_number=block_number)

    def update_record(
        self,
        sender: str,
        record_id: str,
        content_address: str,
        expected_length: Optional[int],
    ) -> TransactionReceipt:
        self._check_available()
        with self._lock:
            rec = self._records.get(record_id)
            if rec is None:
                raise RecordNotFoundError(record_id=record_id)
            actual = len(rec.content_address_history)
            if expected_length is not None and expected_length != actual:
                raise StaleRecordError(
                    record_id=record_id,
                    expected_length=expected_length,
                    actual_length=actual,
                )
            rec.content_address_history.append(content_address)
            rec.updated_at = self._clock()
            tx_id = self._next_tx_id()
            block_number = self._tx_counter

        self._logger.debug("record_updated", record_id=record_id, cid=content_address)
        return TransactionReceipt(tx_id=tx_id, block_number=block_number)

    def transfer(self, sender: str, record_id: str, new_owner: str) -> TransactionReceipt:
        self._check_available()
        with self._lock:
            rec = self._records.get(record_id)
            if rec is None:
                raise RecordNotFoundError(record_id=record_id)
            if not _same_address(rec.owner_history[-1], sender):
                raise OwnerAuthorizationDeniedError(record_id=record_id, caller=sender)
            if any(_same_address(owner, new_owner) for owner in rec.owner_history):
                raise DuplicateOwnerError(record_id=record_id, new_owner=new_owner)
            rec.owner_history.append(new_owner)
            rec.updated_at = self._clock()
            tx_id = self._next_tx_id()
            block_number = self._tx_counter

        self._logger.debug("record_transferred", record_id=record_id, new_owner=new_owner)
        return TransactionReceipt(tx_id=tx_id, block_number=block_number)


# =============================================================================
# Gateway
# =============================================================================
class InMemoryLedgerGateway(BaseLedgerGateway):
    """BaseLedgerGateway over an InMemoryLedger, signing as one account.

    Example:
        >>> gateway = InMemoryLedgerGateway(account="0xA")
        >>> receipt = gateway.register("Qm123")
        >>> gateway.get_full(receipt.record_id).owner_history
        ['0xA']
    """

    def __init__(
        self,
        config: Optional[LedgerConfig] = None,
        ledger: Optional[InMemoryLedger] = None,
        account: Optional[str] = None,
    ) -> None:
        if config is None:
            config = LedgerConfig(backend=LedgerBackend.MEMORY)
        super().__init__(config)

        self._ledger = ledger or InMemoryLedger()
        self._account = account or config.account
        self._logger = logger.bind(component="in_memory_ledger_gateway", account=self._account)

    @property
    def ledger(self) -> InMemoryLedger:
        return self._ledger

    @property
    def caller_address(self) -> str:
        return self._account

    def exists(self, record_id: str) -> bool:
        return self._ledger.snapshot(record_id) is not None

    def get_full(self, record_id: str) -> Record:
        record = self._ledger.snapshot(record_id)
        if record is None or not record.content_address_history:
            raise RecordNotFoundError(record_id=record_id)
        return record

    def current_owner(self, record_id: str) -> str:
        record = self._ledger.snapshot(record_id)
        return record.current_owner if record else ""

    def is_owner(self, record_id: str, address: str) -> bool:
        record = self._ledger.snapshot(record_id)
        if record is None:
            return False
        return any(_same_address(owner, address) for owner in record.owner_history)

    def register(self, content_address: str) -> RegistrationReceipt:
        receipt = self._ledger.set_record(self._account, content_address)
        self._logger.info(
            "ledger_transaction_confirmed",
            operation="register",
            record_id=receipt.record_id,
            tx_id=receipt.tx_id,
        )
        return receipt

    def update(
        self,
        record_id: str,
        new_content_address: str,
        expected_length: Optional[int] = None,
    ) -> TransactionReceipt:
        receipt = self._ledger.update_record(
            self._account, record_id, new_content_address, expected_length
        )
        self._logger.info(
            "ledger_transaction_confirmed",
            operation="update",
            record_id=record_id,
            tx_id=receipt.tx_id,
        )
        return receipt

    def transfer_ownership(self, record_id: str, new_owner: str) -> TransactionReceipt:
        receipt = self._ledger.transfer(self._account, record_id, new_owner)
        self._logger.info(
            "ledger_transaction_confirmed",
            operation="transfer_ownership",
            record_id=record_id,
            tx_id=receipt.tx_id,
        )
        return receipt
