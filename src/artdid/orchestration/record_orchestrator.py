"""
artdid.orchestration.record_orchestrator - Record Workflows
=============================================================

Composes the DID Codec, the Content Store and the Ledger Gateway into the
registry's workflows. Each workflow is a straight line (validate → act →
reshape) with no state kept beyond the single call.

Workflow Sequences:
    Register(metadata)
        validate metadata → put(enriched metadata) → ledger.register(cid)
        → format_did(record_id)
    Resolve(did)
        parse_did → ledger.get_full → derive current cid/owner
        → best-effort get(cid)   (a failed fetch does NOT fail Resolve)
    Update(did, metadata)
        parse_did → validate metadata → ledger.get_full (n = versions)
        → put(metadata + version n+1) → ledger.update(record_id, cid, n)
    Transfer(did, new_owner)
        parse_did → validate address → ledger.transfer_ownership
        → re-read get_full + current_owner AFTER the commit
    Check(did)
        parse_did → ledger.exists

Content upload always completes (and its address is known) before the
ledger commit that references it is issued. Nothing is retried here.

Error Flow:
    Every workflow returns an Outcome. ArtDIDError raised by any stage is
    converted to Outcome.failure(...) at this boundary; validation failures
    are raised before any network call, so they have no side effects.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import structlog

from artdid.core.config import RegistryConfig
from artdid.core.did import format_did, parse_did
from artdid.core.exceptions import ArtDIDError, InvalidInputError
from artdid.core.models import (
    BlockchainData,
    CheckResult,
    Outcome,
    RegisterResult,
    ResolveResult,
    TransferResult,
    UpdateResult,
)
from artdid.infrastructure.content_store import ContentStore
from artdid.integrations.ledger.base import BaseLedgerGateway


# =============================================================================
# Logger
# =============================================================================
logger = structlog.get_logger()


ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
NO_PREVIOUS_OWNER = "N/A"


def _iso(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


class RecordOrchestrator:
    """Runs the Register / Resolve / Update / Transfer / Check workflows.

    The gateway and store are process-wide handles built once at startup;
    the orchestrator only reads them and keeps no per-request state, so a
    single instance serves concurrent requests.

    Attributes:
        _ledger: Ledger Gateway.
        _content_store: Content Store Client.
        _config: Registry configuration (metadata standard, public gateway).
        _clock: Source of metadata timestamps.

    Example:
        >>> orchestrator = RecordOrchestrator(ledger, store, config)
        >>> outcome = orchestrator.register({"title": "X"})
        >>> outcome.value.did
        'did:art:hkust:0x...'
    """

    def __init__(
        self,
        ledger: BaseLedgerGateway,
        content_store: ContentStore,
        config: Optional[RegistryConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._ledger = ledger
        self._content_store = content_store
        self._config = config or RegistryConfig()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._logger = logger.bind(component="record_orchestrator")

    # =========================================================================
    # Public Workflows
    # =========================================================================

    def register(self, metadata: Any) -> Outcome[RegisterResult]:
        """Upload metadata and create a ledger record pointing at it."""
        return self._run("register", self._register, metadata)

    def resolve(self, did: str) -> Outcome[ResolveResult]:
        """Read a record from the ledger and fetch its current metadata."""
        return self._run("resolve", self._resolve, did)

    def update(self, did: str, metadata: Any) -> Outcome[UpdateResult]:
        """Store a new metadata version and append it to the record."""
        return self._run("update", self._update, did, metadata)

    def transfer(self, did: str, new_owner: str) -> Outcome[TransferResult]:
        """Transfer ownership of a record to `new_owner`."""
        return self._run("transfer", self._transfer, did, new_owner)

    def check(self, did: str) -> Outcome[CheckResult]:
        """Report whether the ledger holds the record named by `did`."""
        return self._run("check", self._check, did)

    def content_url(self, cid: str) -> str:
        return f"{self._config.content_store.public_gateway_url.rstrip('/')}/ipfs/{cid}"

    # =========================================================================
    # Workflow Bodies
    # =========================================================================

    def _register(self, metadata: Any) -> RegisterResult:
        submitted = self._require_metadata(metadata)

        now = _iso(self._clock())
        stored = {
            **submitted,
            "standard": self._config.metadata_standard,
            "created": now,
            "updated": now,
        }
        cid = self._content_store.put(self._serialize(stored))
        self._logger.info("metadata_uploaded", cid=cid)

        receipt = self._ledger.register(cid)
        did = format_did(receipt.record_id)
        self._logger.info(
            "record_registered",
            did=did,
            record_id=receipt.record_id,
            cid=cid,
            tx_id=receipt.tx_id,
        )

        return RegisterResult(
            did=did,
            tx_id=receipt.tx_id,
            content_address=cid,
            content_url=self.content_url(cid),
            metadata=submitted,
        )

    def _resolve(self, did: str) -> ResolveResult:
        record_id = parse_did(did).record_id
        record = self._ledger.get_full(record_id)
        cid = record.current_content_address

        blockchain_data = BlockchainData(
            record_id=record_id,
            cid=cid,
            content_address_history=record.content_address_history,
            owners=record.owner_history,
            current_owner=record.current_owner,
            created_at=record.created_at,
            updated_at=record.updated_at,
            service_endpoint=f"ipfs://{cid}",
            resolved_at=self._clock(),
        )

        content_metadata: Any = None
        content_fetch_error: Optional[str] = None
        try:
            content_metadata = json.loads(self._content_store.get(cid))
        except ArtDIDError as exc:
            content_fetch_error = exc.message
        except ValueError as exc:
            content_fetch_error = f"Content at {cid} is not valid JSON: {exc}"

        if content_fetch_error is not None:
            self._logger.warning(
                "content_fetch_degraded",
                did=did,
                cid=cid,
                error=content_fetch_error,
            )

        return ResolveResult(
            did=did,
            blockchain_data=blockchain_data,
            content_metadata=content_metadata,
            content_fetch_error=content_fetch_error,
        )

    def _update(self, did: str, metadata: Any) -> UpdateResult:
        record_id = parse_did(did).record_id
        submitted = self._require_metadata(metadata)

        record = self._ledger.get_full(record_id)
        current_version = record.version
        previous_address = record.current_content_address

        stored = {
            **submitted,
            "standard": self._config.metadata_standard,
            "updated": _iso(self._clock()),
            "version": current_version + 1,
            "previousVersion": current_version,
        }
        new_address = self._content_store.put(self._serialize(stored))
        self._logger.info("metadata_uploaded", cid=new_address, version=current_version + 1)

        receipt = self._ledger.update(record_id, new_address, expected_length=current_version)
        self._logger.info(
            "record_updated",
            did=did,
            cid=new_address,
            previous_cid=previous_address,
            version=current_version + 1,
            tx_id=receipt.tx_id,
        )

        return UpdateResult(
            did=did,
            tx_id=receipt.tx_id,
            new_address=new_address,
            previous_address=previous_address,
            version=current_version + 1,
            metadata=stored,
        )

    def _transfer(self, did: str, new_owner: str) -> TransferResult:
        record_id = parse_did(did).record_id
        if not isinstance(new_owner, str) or not ADDRESS_PATTERN.match(new_owner):
            raise InvalidInputError(
                message="Invalid newOwner address. Expected 0x followed by 40 hex characters",
                error_code="INVALID_ADDRESS",
                details={"field": "newOwner", "value": new_owner},
            )

        receipt = self._ledger.transfer_ownership(record_id, new_owner)

        # Read back what the ledger now says, not what we sent.
        record = self._ledger.get_full(record_id)
        current_owner = self._ledger.current_owner(record_id)
        owners = record.owner_history
        previous_owner = owners[-2] if len(owners) >= 2 else NO_PREVIOUS_OWNER

        self._logger.info(
            "ownership_transferred",
            did=did,
            previous_owner=previous_owner,
            new_owner=new_owner,
            tx_id=receipt.tx_id,
        )

        return TransferResult(
            did=did,
            tx_id=receipt.tx_id,
            previous_owner=previous_owner,
            new_owner=new_owner,
            current_owner=current_owner,
            total_owners=len(owners),
        )

    def _check(self, did: str) -> CheckResult:
        record_id = parse_did(did).record_id
        return CheckResult(did=did, exists=self._ledger.exists(record_id))

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _run(self, workflow: str, body: Callable[..., Any], *args: Any) -> Outcome[Any]:
        try:
            return Outcome.success(body(*args))
        except ArtDIDError as exc:
            self._logger.warning(
                "workflow_failed",
                workflow=workflow,
                error_kind=exc.kind.value,
                error_code=exc.error_code,
                error=exc.message,
            )
            return Outcome.failure(exc)

    @staticmethod
    def _require_metadata(metadata: Any) -> dict[str, Any]:
        if not isinstance(metadata, Mapping) or not metadata:
            raise InvalidInputError(
                message="Artwork metadata is required",
                error_code="MISSING_METADATA",
                details={"field": "metadata"},
            )
        return dict(metadata)

    @staticmethod
    def _serialize(metadata: dict[str, Any]) -> bytes:
        try:
            return json.dumps(metadata, indent=2, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(
                message=f"Artwork metadata is not JSON-serializable: {exc}",
                error_code="INVALID_METADATA",
                details={"field": "metadata"},
            ) from exc
