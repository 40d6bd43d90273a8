"""
Record Lifecycle Example: Register, Resolve, Update, Transfer
===============================================================

Runs one artwork record through its whole life against the in-memory
ledger and content store, so no chain or IPFS node is needed. Two
gateways share one ledger to play the original artist and the buyer.

Usage:
    python examples/record_lifecycle.py
"""

from __future__ import annotations

import json

from artdid import ArtDIDRegistry
from artdid.core.config import RegistryConfig
from artdid.infrastructure.content_store import InMemoryContentStore
from artdid.integrations.ledger.memory import InMemoryLedger, InMemoryLedgerGateway
from artdid.orchestration.record_orchestrator import RecordOrchestrator


ARTIST = "0x1111111111111111111111111111111111111111"
BUYER = "0x2222222222222222222222222222222222222222"
COLLECTOR = "0x3333333333333333333333333333333333333333"


def main() -> None:
    """Walk one record through every workflow and print each response."""
    config = RegistryConfig()
    ledger = InMemoryLedger()
    store = InMemoryContentStore()

    with ArtDIDRegistry(
        config,
        ledger=InMemoryLedgerGateway(ledger=ledger, account=ARTIST),
        content_store=store,
        setup_logging=True,
    ) as artist:
        # The buyer signs with their own account on the same ledger
        buyer = RecordOrchestrator(
            InMemoryLedgerGateway(ledger=ledger, account=BUYER), store, config
        )

        registered = artist.handle(
            "POST",
            "/register",
            body={"metadata": {"title": "Harbour at Dusk", "artist": "K. Lau", "year": 2023}},
        )
        print("register:", json.dumps(registered.body, indent=2))
        did = registered.body["did"]

        updated = artist.handle(
            "PUT",
            "/update",
            body={"did": did, "metadata": {"title": "Harbour at Dusk (restored)"}},
        )
        print("update:", json.dumps(updated.body, indent=2))

        transferred = artist.handle("POST", "/transfer", body={"did": did, "newOwner": BUYER})
        print("transfer:", json.dumps(transferred.body, indent=2))

        # The artist no longer owns the record
        refused = artist.handle("POST", "/transfer", body={"did": did, "newOwner": COLLECTOR})
        print("second transfer by artist:", refused.status_code, refused.body["error"])

        resale = buyer.transfer(did, COLLECTOR)
        print("resale by buyer:", resale.unwrap().model_dump(by_alias=True))

        resolved = artist.handle("GET", "/resolve", query={"did": did})
        print("resolve:", json.dumps(resolved.body, indent=2))


if __name__ == "__main__":
    main()
