"""
artdid.api.handlers - HTTP Boundary
=====================================

Framework-agnostic request handlers. Each handler takes the already-parsed
query parameters or JSON body, runs one workflow, and returns an
HTTPResponse (status code + JSON-serializable body). Any web framework can
mount these by forwarding the request and writing the response back.

Routes:
    GET  /health     → 200 {status, timeStamp, service}
    GET  /resolve    → 200 {did, blockchainData, contentMetadata, contentFetchError}
    GET  /check      → 200 {success, data: {exists}}
    POST /register   → 200 {did, txId, contentAddress, contentUrl, metadata}
    PUT  /update     → 200 {did, txId, newAddress, previousAddress, version, metadata}
    POST /transfer   → 200 {did, txId, previousOwner, newOwner, currentOwner, totalOwners}

Error bodies are {success: false, error, errorCode}; the status comes from
the Outcome's ErrorKind (see STATUS_BY_KIND).
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import structlog
from pydantic import BaseModel, Field

from artdid.core.config import RegistryConfig
from artdid.core.enums import ErrorKind
from artdid.core.models import Outcome
from artdid.orchestration.record_orchestrator import RecordOrchestrator


# =============================================================================
# Logger
# =============================================================================
logger = structlog.get_logger()


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.INVALID_FORMAT: 400,
    ErrorKind.DUPLICATE_OWNER: 400,
    ErrorKind.OWNER_AUTHORIZATION_DENIED: 403,
    ErrorKind.RECORD_NOT_FOUND: 404,
    ErrorKind.STALE_RECORD: 409,
    ErrorKind.LEDGER_UNAVAILABLE: 500,
    ErrorKind.CONTENT_STORE_UNAVAILABLE: 500,
    ErrorKind.CONTENT_FETCH_EXHAUSTED: 500,
    ErrorKind.CONFIGURATION: 500,
}


class HTTPResponse(BaseModel):
    """Status code and JSON body produced by a handler."""

    status_code: int = 200
    body: dict[str, Any] = Field(default_factory=dict)


def error_response(status_code: int, message: str, error_code: str = "ERROR") -> HTTPResponse:
    return HTTPResponse(
        status_code=status_code,
        body={"success": False, "error": message, "errorCode": error_code},
    )


def _failure(outcome: Outcome[Any]) -> HTTPResponse:
    status = STATUS_BY_KIND.get(outcome.error_kind, 500)
    return error_response(status, outcome.error_message or "Unknown error", outcome.error_code or "ERROR")


def _dump(outcome: Outcome[Any]) -> dict[str, Any]:
    return outcome.value.model_dump(by_alias=True, mode="json")


class RegistryHTTPHandlers:
    """Maps HTTP requests onto RecordOrchestrator workflows.

    Example:
        >>> handlers = RegistryHTTPHandlers(orchestrator, config)
        >>> response = handlers.handle("GET", "/resolve", query={"did": did})
        >>> response.status_code
        200
    """

    def __init__(
        self,
        orchestrator: RecordOrchestrator,
        config: Optional[RegistryConfig] = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._config = config or RegistryConfig()
        self._routes: dict[tuple[str, str], Callable[[Mapping[str, Any], Any], HTTPResponse]] = {
            ("GET", "/health"): lambda query, body: self.health(),
            ("GET", "/resolve"): lambda query, body: self.resolve(query),
            ("GET", "/check"): lambda query, body: self.check(query),
            ("POST", "/register"): lambda query, body: self.register(body),
            ("PUT", "/update"): lambda query, body: self.update(body),
            ("POST", "/transfer"): lambda query, body: self.transfer(body),
        }
        self._logger = logger.bind(component="http_handlers")

    # =========================================================================
    # Dispatch
    # =========================================================================

    def handle(
        self,
        method: str,
        path: str,
        query: Optional[Mapping[str, Any]] = None,
        body: Any = None,
    ) -> HTTPResponse:
        """Route one request. Unexpected exceptions become a logged 500."""
        route = self._routes.get((method.upper(), path.rstrip("/") or "/"))
        if route is None:
            return error_response(404, f"Route not found: {method.upper()} {path}", "ROUTE_NOT_FOUND")

        try:
            return route(query or {}, body)
        except Exception as exc:
            self._logger.exception("request_failed", method=method, path=path)
            return error_response(500, str(exc) or "Unknown error", "INTERNAL_ERROR")

    # =========================================================================
    # Handlers
    # =========================================================================

    def health(self) -> HTTPResponse:
        return HTTPResponse(
            body={
                "status": "healthy",
                "timeStamp": datetime.now(timezone.utc).isoformat(),
                "service": self._config.service_name,
            }
        )

    def resolve(self, query: Mapping[str, Any]) -> HTTPResponse:
        did = query.get("did")
        if not did:
            return error_response(400, "DID parameter is required", "MISSING_DID")

        outcome = self._orchestrator.resolve(did)
        if not outcome.ok:
            return _failure(outcome)
        return HTTPResponse(body=_dump(outcome))

    def check(self, query: Mapping[str, Any]) -> HTTPResponse:
        did = query.get("did")
        if not did:
            return error_response(400, "DID parameter is required", "MISSING_DID")

        outcome = self._orchestrator.check(did)
        if not outcome.ok:
            return _failure(outcome)
        return HTTPResponse(body={"success": True, "data": {"exists": outcome.value.exists}})

    def register(self, body: Any) -> HTTPResponse:
        if not isinstance(body, Mapping) or not body.get("metadata"):
            return error_response(400, "Artwork metadata is required", "MISSING_METADATA")

        outcome = self._orchestrator.register(body["metadata"])
        if not outcome.ok:
            return _failure(outcome)
        return HTTPResponse(body=_dump(outcome))

    def update(self, body: Any) -> HTTPResponse:
        if not isinstance(body, Mapping) or not body.get("did") or not body.get("metadata"):
            return error_response(400, "DID and metadata are required", "MISSING_FIELDS")

        outcome = self._orchestrator.update(body["did"], body["metadata"])
        if not outcome.ok:
            return _failure(outcome)
        return HTTPResponse(body=_dump(outcome))

    def transfer(self, body: Any) -> HTTPResponse:
        if not isinstance(body, Mapping) or not body.get("did") or not body.get("newOwner"):
            return error_response(400, "DID and newOwner are required", "MISSING_FIELDS")

        outcome = self._orchestrator.transfer(body["did"], body["newOwner"])
        if not outcome.ok:
            return _failure(outcome)
        return HTTPResponse(body=_dump(outcome))
