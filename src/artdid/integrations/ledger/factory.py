"""
artdid.integrations.ledger.factory - Ledger Gateway Factory
=============================================================

Maps the configured backend name to a concrete BaseLedgerGateway:
    - "memory" → InMemoryLedgerGateway (development/testing, no node needed)
    - "web3"   → Web3LedgerGateway (ArtDID registry contract over JSON-RPC)

Usage:
    >>> from artdid.integrations.ledger import create_ledger_gateway
    >>> gateway = create_ledger_gateway(LedgerConfig(backend="memory"))
"""

from __future__ import annotations

from artdid.core.config import LedgerConfig
from artdid.core.enums import LedgerBackend
from artdid.core.exceptions import ConfigurationError
from artdid.integrations.ledger.base import BaseLedgerGateway


def create_ledger_gateway(config: LedgerConfig) -> BaseLedgerGateway:
    """Create the Ledger Gateway selected by configuration.

    Called once at startup; the returned gateway is shared by every request.

    Raises:
        ConfigurationError: If the backend is unknown or the web3 backend
            is missing its RPC URL, contract address, or private key.
    """
    try:
        backend = LedgerBackend(config.backend)
    except ValueError as exc:
        raise ConfigurationError(
            message=f"Unknown ledger backend: '{config.backend}'",
            error_code="UNKNOWN_LEDGER_BACKEND",
        ) from exc

    if backend is LedgerBackend.WEB3:
        from artdid.integrations.ledger.contract import Web3LedgerGateway
        return Web3LedgerGateway(config)

    from artdid.integrations.ledger.memory import InMemoryLedgerGateway
    return InMemoryLedgerGateway(config)
