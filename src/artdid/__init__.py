"""
ArtDID Registry
================

Resolves and mutates `did:art:hkust:<recordId>` records that bind a digital
artwork to versioned, content-addressed metadata and an append-only
ownership history. Canonical state lives on an external ledger; metadata
bytes live in a content-addressed store (IPFS).

Layers (top to bottom):
    1. API            - Framework-agnostic HTTP handlers
    2. Orchestration  - Register / Resolve / Update / Transfer / Check
    3. Integrations   - Ledger Gateway (in-memory, web3 contract)
    4. Infrastructure - Content Store (in-memory, IPFS with fallback gateways)
    5. Core           - Config, DID Codec, models, exceptions, logging

Quick Start:
    >>> from artdid import ArtDIDRegistry
    >>> with ArtDIDRegistry() as registry:
    ...     outcome = registry.register({"title": "Starry Night"})
"""

__version__ = "0.1.0"

from artdid.facade import ArtDIDRegistry

__all__ = ["ArtDIDRegistry", "__version__"]
