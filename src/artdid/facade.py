"""
artdid.facade - ArtDID Registry Facade
========================================

The single entry point that wires configuration, the two external seams,
the orchestrator and the HTTP handlers together.

Architecture Context:
    ┌───────────────────────────────────────────────────┐
    │                ArtDIDRegistry (Facade)             │
    │                                                    │
    │  ┌──────────────────────────────────────────────┐ │
    │  │  API Layer: RegistryHTTPHandlers              │ │
    │  └─────────────────────┬────────────────────────┘ │
    │  ┌─────────────────────▼────────────────────────┐ │
    │  │  Orchestration Layer: RecordOrchestrator      │ │
    │  └──────────┬─────────────────────────┬─────────┘ │
    │  ┌──────────▼──────────┐   ┌──────────▼─────────┐ │
    │  │ Integration Layer:  │   │ Infrastructure:     │ │
    │  │ Ledger Gateway      │   │ Content Store       │ │
    │  └─────────────────────┘   └─────────────────────┘ │
    └───────────────────────────────────────────────────┘

The ledger gateway and content store are process-wide handles: built once
here from static configuration and shared read-only by every request.

Usage:
    >>> from artdid import ArtDIDRegistry
    >>> with ArtDIDRegistry() as registry:
    ...     outcome = registry.register({"title": "X"})
    ...     resolved = registry.resolve(outcome.value.did)
"""

from __future__ import annotations

from typing import Any, Optional

import structlog

from artdid.api.handlers import HTTPResponse, RegistryHTTPHandlers
from artdid.core.config import RegistryConfig
from artdid.core.logging import configure_logging
from artdid.core.models import (
    CheckResult,
    Outcome,
    RegisterResult,
    ResolveResult,
    TransferResult,
    UpdateResult,
)
from artdid.infrastructure.content_store import ContentStore, create_content_store
from artdid.integrations.ledger.base import BaseLedgerGateway
from artdid.integrations.ledger.factory import create_ledger_gateway
from artdid.orchestration.record_orchestrator import RecordOrchestrator


# =============================================================================
# Logger
# =============================================================================
logger = structlog.get_logger()


class ArtDIDRegistry:
    """Top-level facade for the ArtDID registry.

    Lifecycle:
        1. ``ArtDIDRegistry(config)``: build handles from configuration
        2. ``register() / resolve() / update() / transfer() / check()``
           or ``handle(method, path, ...)`` for HTTP requests
        3. ``close()``: release connections (or use ``with``)

    Attributes:
        _config: Registry configuration.
        _ledger: Ledger Gateway (shared handle).
        _content_store: Content Store (shared handle).
        _orchestrator: Workflow runner.
        _http: HTTP boundary handlers.
    """

    def __init__(
        self,
        config: Optional[RegistryConfig] = None,
        *,
        ledger: Optional[BaseLedgerGateway] = None,
        content_store: Optional[ContentStore] = None,
        setup_logging: bool = False,
    ) -> None:
        """Build the registry.

        Args:
            config: Registry configuration. Defaults to RegistryConfig(),
                which reads ARTDID_* environment variables.
            ledger: Optional pre-built gateway. Defaults to the configured backend.
            content_store: Optional pre-built store. Defaults to the configured backend.
            setup_logging: Configure structlog from config.log_level.
        """
        self._config = config or RegistryConfig()
        if setup_logging:
            configure_logging(
                self._config.log_level,
                json=self._config.json_logs or self._config.environment == "prod",
            )

        self._ledger = ledger if ledger is not None else create_ledger_gateway(self._config.ledger)
        self._content_store = (
            content_store
            if content_store is not None
            else create_content_store(self._config.content_store)
        )

        self._orchestrator = RecordOrchestrator(
            ledger=self._ledger,
            content_store=self._content_store,
            config=self._config,
        )
        self._http = RegistryHTTPHandlers(self._orchestrator, self._config)

        self._closed = False
        self._logger = logger.bind(component="artdid_registry")
        self._logger.info(
            "registry_initialized",
            ledger_backend=self._ledger.backend_name,
            content_backend=self._config.content_store.backend.value,
            environment=self._config.environment,
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> RegistryConfig:
        return self._config

    @property
    def ledger(self) -> BaseLedgerGateway:
        return self._ledger

    @property
    def content_store(self) -> ContentStore:
        return self._content_store

    @property
    def orchestrator(self) -> RecordOrchestrator:
        return self._orchestrator

    @property
    def http(self) -> RegistryHTTPHandlers:
        return self._http

    # =========================================================================
    # Workflows
    # =========================================================================

    def register(self, metadata: Any) -> Outcome[RegisterResult]:
        return self._orchestrator.register(metadata)

    def resolve(self, did: str) -> Outcome[ResolveResult]:
        return self._orchestrator.resolve(did)

    def update(self, did: str, metadata: Any) -> Outcome[UpdateResult]:
        return self._orchestrator.update(did, metadata)

    def transfer(self, did: str, new_owner: str) -> Outcome[TransferResult]:
        return self._orchestrator.transfer(did, new_owner)

    def check(self, did: str) -> Outcome[CheckResult]:
        return self._orchestrator.check(did)

    def handle(
        self,
        method: str,
        path: str,
        query: Optional[dict[str, Any]] = None,
        body: Any = None,
    ) -> HTTPResponse:
        """Handle one HTTP request (see artdid.api.handlers for routes)."""
        return self._http.handle(method, path, query=query, body=body)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Release ledger and content-store connections. Idempotent."""
        if self._closed:
            return
        self._content_store.close()
        self._ledger.close()
        self._closed = True
        self._logger.info("registry_closed")

    def __enter__(self) -> ArtDIDRegistry:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"ArtDIDRegistry("
            f"ledger={self._ledger.backend_name!r}, "
            f"content_store={self._config.content_store.backend.value!r}, "
            f"closed={self._closed})"
        )
