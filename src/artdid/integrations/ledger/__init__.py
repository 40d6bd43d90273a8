"""
artdid.integrations.ledger - Ledger Gateway
=============================================

The registry's seam to the append-only ledger. The Orchestrator calls the
BaseLedgerGateway interface; the backend is chosen by configuration.

Available Gateways:
    - BaseLedgerGateway:      Abstract contract (reads + confirmed commits).
    - InMemoryLedgerGateway:  Process-local ledger for development/testing.
    - Web3LedgerGateway:      ArtDID registry contract (import from
                              artdid.integrations.ledger.contract).

Usage:
    >>> from artdid.integrations.ledger import create_ledger_gateway
    >>> gateway = create_ledger_gateway(config.ledger)
    >>> receipt = gateway.register(cid)
"""

from artdid.integrations.ledger.base import (
    BaseLedgerGateway,
    RegistrationReceipt,
    TransactionReceipt,
)
from artdid.integrations.ledger.factory import create_ledger_gateway
from artdid.integrations.ledger.memory import InMemoryLedger, InMemoryLedgerGateway

__all__ = [
    "BaseLedgerGateway",
    "RegistrationReceipt",
    "TransactionReceipt",
    "InMemoryLedger",
    "InMemoryLedgerGateway",
    "create_ledger_gateway",
]
