"""
Shared Test Fixtures for the ArtDID Registry
==============================================

Reusable pytest fixtures used across the test suite, organized by layer:

    1. Configuration fixtures
    2. Ledger fixtures (one shared InMemoryLedger, one gateway per signer)
    3. Content store fixtures
    4. Orchestration and API fixtures
    5. Logging fixtures
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
import structlog

from artdid.api.handlers import RegistryHTTPHandlers
from artdid.core.config import RegistryConfig
from artdid.infrastructure.content_store import InMemoryContentStore
from artdid.integrations.ledger.memory import InMemoryLedger, InMemoryLedgerGateway
from artdid.orchestration.record_orchestrator import RecordOrchestrator


OWNER_A = "0x" + "a" * 40
OWNER_B = "0x" + "b" * 40
OWNER_C = "0x" + "c" * 40


class TickingClock:
    """Deterministic clock: every call returns a time one second later."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def config():
    """Registry configuration with defaults (in-memory backends)."""
    return RegistryConfig()


# =============================================================================
# Ledger
# =============================================================================

@pytest.fixture
def ledger():
    """Fresh shared InMemoryLedger with a deterministic clock."""
    return InMemoryLedger(clock=TickingClock())


@pytest.fixture
def gateway_a(ledger):
    """Ledger gateway signing as OWNER_A."""
    return InMemoryLedgerGateway(ledger=ledger, account=OWNER_A)


@pytest.fixture
def gateway_b(ledger):
    """Ledger gateway signing as OWNER_B on the same ledger."""
    return InMemoryLedgerGateway(ledger=ledger, account=OWNER_B)


# =============================================================================
# Content Store
# =============================================================================

@pytest.fixture
def content_store():
    """Fresh InMemoryContentStore."""
    return InMemoryContentStore()


# =============================================================================
# Orchestration / API
# =============================================================================

@pytest.fixture
def orchestrator(gateway_a, content_store, config):
    """RecordOrchestrator committing as OWNER_A."""
    return RecordOrchestrator(gateway_a, content_store, config, clock=TickingClock())


@pytest.fixture
def orchestrator_b(gateway_b, content_store, config):
    """RecordOrchestrator committing as OWNER_B, sharing ledger and store."""
    return RecordOrchestrator(gateway_b, content_store, config, clock=TickingClock())


@pytest.fixture
def handlers(orchestrator, config):
    """HTTP handlers over the OWNER_A orchestrator."""
    return RegistryHTTPHandlers(orchestrator, config)


# =============================================================================
# Logging Fixtures
# =============================================================================

@pytest.fixture
def restore_logging():
    """Undo configure_logging(): drop its root handler and reset structlog."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler.get_name() == "artdid":
            root.removeHandler(handler)
    root.setLevel(level)
    structlog.reset_defaults()
