"""
artdid.integrations - External Service Integration Layer
==========================================================

Adapters for external systems the registry depends on, each behind an
interface so implementations can be swapped (in-memory ↔ real).

Sub-packages:
    ledger/   - Ledger Gateway (in-memory ledger, ArtDID registry contract)
"""

__all__: list[str] = []
