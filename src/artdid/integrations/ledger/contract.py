"""
artdid.integrations.ledger.contract - ArtDID Registry Contract Gateway
========================================================================

BaseLedgerGateway backed by the ArtDID registry smart contract, reached over
JSON-RPC with web3.py. Reads are `.call()`s; commits are built, signed
locally with the configured key, sent raw, and then awaited until the node
returns a receipt.

Commit Lifecycle:
    build_transaction()  ── reverts here are rule violations (no tx sent)
          │
    sign + send_raw_transaction()
          │
    wait_for_transaction_receipt(timeout)
          │
    status == 1 ?  ── no → LedgerUnavailableError (reverted on chain)
          │
    receipt → TransactionReceipt / RegistrationReceipt

A receipt timeout raises LedgerUnavailableError carrying the tx hash. The
transaction is never resubmitted, so a slow confirmation cannot turn into a
double registration.

Revert Mapping (by reason string):
    "not found" / "does not exist"   → RecordNotFoundError
    "not an owner" / "not the owner" → OwnerAuthorizationDeniedError
    "already an owner"               → DuplicateOwnerError
    "stale"                          → StaleRecordError
    anything else                    → LedgerUnavailableError
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import datetime, timezone
from importlib import resources
from typing import Any, Iterator, Optional

import structlog
from eth_account import Account
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted
from web3.logs import DISCARD

from artdid.core.config import LedgerConfig
from artdid.core.exceptions import (
    ArtDIDError,
    ConfigurationError,
    DuplicateOwnerError,
    InvalidInputError,
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


# Contract convention: expectedLength == 0 disables the staleness check.
_UNCHECKED_LENGTH = 0
_ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def _checksum(address: str, field: str) -> str:
    """Checksum `address`, treating a malformed value as bad caller input."""
    try:
        return Web3.to_checksum_address(address)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(
            message=f"Invalid {field} address: {address!r}",
            error_code="INVALID_ADDRESS",
            details={"field": field, "value": address},
        ) from exc


def load_registry_abi() -> list[dict[str, Any]]:
    """Load the ArtDID registry ABI shipped with the package."""
    abi_file = resources.files("artdid.integrations.ledger").joinpath(
        "abi/art_did_registry.json"
    )
    return json.loads(abi_file.read_text(encoding="utf-8"))


def _timestamp(value: int) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


class Web3LedgerGateway(BaseLedgerGateway):
    """Ledger Gateway over the ArtDID registry contract.

    Attributes:
        _web3: Connected Web3 instance (one per process).
        _contract: Bound contract object.
        _account: Local signing account derived from the private key.

    Example:
        >>> config = LedgerConfig(
        ...     backend="web3",
        ...     rpc_url="http://besu:8545",
        ...     contract_address="0x...",
        ...     private_key="0x...",
        ... )
        >>> gateway = Web3LedgerGateway(config)
        >>> receipt = gateway.register("QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG")
    """

    def __init__(
        self,
        config: LedgerConfig,
        *,
        web3: Optional[Web3] = None,
        contract: Any = None,
        account: Any = None,
    ) -> None:
        super().__init__(config)

        missing = [
            name
            for name in ("rpc_url", "contract_address", "private_key")
            if getattr(config, name) is None
        ]
        if web3 is None and missing:
            raise ConfigurationError(
                message=f"web3 ledger backend requires: {', '.join(missing)}",
                error_code="MISSING_LEDGER_CONFIG",
                details={"missing": missing},
            )

        self._web3 = web3 or Web3(
            Web3.HTTPProvider(
                config.rpc_url,
                request_kwargs={"timeout": config.request_timeout_seconds},
            )
        )
        if contract is None:
            contract = self._web3.eth.contract(
                address=Web3.to_checksum_address(config.contract_address),
                abi=load_registry_abi(),
            )
        self._contract = contract
        self._account = account or Account.from_key(config.private_key)
        self._logger = logger.bind(
            component="web3_ledger_gateway",
            account=self._account.address,
        )

    @property
    def caller_address(self) -> str:
        return self._account.address

    # =========================================================================
    # Error Translation
    # =========================================================================

    @contextmanager
    def _ledger_call(self, operation: str, **context: Any) -> Iterator[None]:
        """Translate anything a ledger call raises into the gateway taxonomy."""
        try:
            yield
        except ArtDIDError:
            raise
        except ContractLogicError as exc:
            raise self._map_revert(exc, operation, context) from exc
        except Exception as exc:
            self._logger.warning(
                "ledger_call_failed",
                operation=operation,
                error=str(exc),
                **context,
            )
            raise LedgerUnavailableError(
                message=f"Ledger {operation} failed: {exc}",
                details={"operation": operation, **context},
            ) from exc

    def _map_revert(
        self,
        exc: ContractLogicError,
        operation: str,
        context: dict[str, Any],
    ) -> ArtDIDError:
        reason = str(getattr(exc, "message", None) or exc)
        lowered = reason.lower()
        record_id = context.get("record_id", "")

        if "not found" in lowered or "does not exist" in lowered:
            return RecordNotFoundError(record_id=record_id)
        if "not an owner" in lowered or "not the owner" in lowered or "only owner" in lowered:
            return OwnerAuthorizationDeniedError(
                record_id=record_id,
                caller=self.caller_address,
            )
        if "already an owner" in lowered or "duplicate" in lowered:
            return DuplicateOwnerError(
                record_id=record_id,
                new_owner=context.get("new_owner", ""),
            )
        if "stale" in lowered:
            return StaleRecordError(
                record_id=record_id,
                expected_length=context.get("expected_length") or 0,
            )
        return LedgerUnavailableError(
            message=f"Transaction reverted: {reason}",
            error_code="TRANSACTION_REVERTED",
            details={"operation": operation, **context},
        )

    # =========================================================================
    # Reads
    # =========================================================================

    def exists(self, record_id: str) -> bool:
        with self._ledger_call("exists", record_id=record_id):
            return bool(self._contract.functions.hasRecord(record_id).call())

    def get_full(self, record_id: str) -> Record:
        with self._ledger_call("get_full", record_id=record_id):
            cids, owners, created_at, updated_at = (
                self._contract.functions.getFullRecord(record_id).call()
            )
            if not cids:
                raise RecordNotFoundError(record_id=record_id)
            return Record(
                record_id=record_id,
                content_address_history=list(cids),
                owner_history=[str(owner) for owner in owners],
                created_at=_timestamp(created_at),
                updated_at=_timestamp(updated_at),
            )

    def current_owner(self, record_id: str) -> str:
        with self._ledger_call("current_owner", record_id=record_id):
            owner = str(self._contract.functions.getCurrentOwner(record_id).call())
            return "" if owner == _ZERO_ADDRESS else owner

    def is_owner(self, record_id: str, address: str) -> bool:
        checksummed = _checksum(address, "address")
        with self._ledger_call("is_owner", record_id=record_id, address=address):
            return bool(self._contract.functions.isOwner(record_id, checksummed).call())

    # =========================================================================
    # Commits
    # =========================================================================

    def _commit(self, function: Any, operation: str, **context: Any) -> dict[str, Any]:
        """Sign, send, and wait for one contract transaction.

        Returns:
            The mined receipt (status already checked).
        """
        with self._ledger_call(operation, **context):
            nonce = self._web3.eth.get_transaction_count(self.caller_address, "pending")
            tx = function.build_transaction({"from": self.caller_address, "nonce": nonce})
            signed = self._account.sign_transaction(tx)
            tx_hash = self._web3.eth.send_raw_transaction(signed.raw_transaction)
            tx_id = Web3.to_hex(tx_hash)
            self._logger.info("ledger_transaction_sent", operation=operation, tx_id=tx_id, **context)

        try:
            receipt = self._web3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self._config.confirmation_timeout_seconds,
                poll_latency=self._config.poll_interval_seconds,
            )
        except TimeExhausted as exc:
            self._logger.error("ledger_confirmation_timeout", operation=operation, tx_id=tx_id)
            raise LedgerUnavailableError(
                message=f"Transaction {tx_id} was not confirmed in time",
                error_code="CONFIRMATION_TIMEOUT",
                details={"operation": operation, "tx_id": tx_id, **context},
            ) from exc
        except Exception as exc:
            raise LedgerUnavailableError(
                message=f"Waiting for transaction {tx_id} failed: {exc}",
                details={"operation": operation, "tx_id": tx_id, **context},
            ) from exc

        if receipt["status"] != 1:
            raise LedgerUnavailableError(
                message=f"Transaction {tx_id} reverted on chain",
                error_code="TRANSACTION_REVERTED",
                details={"operation": operation, "tx_id": tx_id, **context},
            )

        self._logger.info(
            "ledger_transaction_confirmed",
            operation=operation,
            tx_id=tx_id,
            block_number=receipt.get("blockNumber"),
        )
        return receipt

    @staticmethod
    def _tx_id(receipt: dict[str, Any]) -> str:
        return Web3.to_hex(receipt["transactionHash"])

    def register(self, content_address: str) -> RegistrationReceipt:
        receipt = self._commit(
            self._contract.functions.setRecord(content_address),
            "register",
            cid=content_address,
        )
        with self._ledger_call("register", cid=content_address):
            events = self._contract.events.RecordRegistered().process_receipt(
                receipt, errors=DISCARD
            )
        if not events:
            raise LedgerUnavailableError(
                message="Registration confirmed without a RecordRegistered event",
                error_code="MISSING_CONFIRMATION_EVENT",
                details={"tx_id": self._tx_id(receipt), "cid": content_address},
            )

        return RegistrationReceipt(
            tx_id=self._tx_id(receipt),
            record_id=str(events[0]["args"]["recordId"]),
            block_number=receipt.get("blockNumber"),
        )

    def update(
        self,
        record_id: str,
        new_content_address: str,
        expected_length: Optional[int] = None,
    ) -> TransactionReceipt:
        expected = _UNCHECKED_LENGTH if expected_length is None else expected_length
        receipt = self._commit(
            self._contract.functions.updateRecord(record_id, new_content_address, expected),
            "update",
            record_id=record_id,
            cid=new_content_address,
            expected_length=expected_length,
        )
        return TransactionReceipt(
            tx_id=self._tx_id(receipt),
            block_number=receipt.get("blockNumber"),
        )

    def transfer_ownership(self, record_id: str, new_owner: str) -> TransactionReceipt:
        checksummed = _checksum(new_owner, "newOwner")
        receipt = self._commit(
            self._contract.functions.transferOwnership(record_id, checksummed),
            "transfer_ownership",
            record_id=record_id,
            new_owner=new_owner,
        )
        return TransactionReceipt(
            tx_id=self._tx_id(receipt),
            block_number=receipt.get("blockNumber"),
        )

    def close(self) -> None:
        provider = getattr(self._web3, "provider", None)
        disconnect = getattr(provider, "disconnect", None)
        if callable(disconnect):
            disconnect()
