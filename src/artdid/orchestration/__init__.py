"""
artdid.orchestration - Record Workflows
=========================================

The RecordOrchestrator composes the DID Codec, Content Store and Ledger
Gateway into the Register, Resolve, Update, Transfer and Check workflows.

Usage:
    from artdid.orchestration import RecordOrchestrator
"""

from artdid.orchestration.record_orchestrator import (
    ADDRESS_PATTERN,
    NO_PREVIOUS_OWNER,
    RecordOrchestrator,
)

__all__ = [
    "ADDRESS_PATTERN",
    "NO_PREVIOUS_OWNER",
    "RecordOrchestrator",
]
