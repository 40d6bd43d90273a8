"""
artdid.infrastructure - Content Storage Layer
===============================================

Content-addressed storage for artwork metadata.

Components:
    - compute_cid:           CIDv0 address of a byte payload
    - ContentStore (ABC):    put(bytes) → CID, get(CID) → bytes
    - InMemoryContentStore:  Dict-backed, for development/testing
    - IPFSContentStore:      Caller-operated IPFS node + fallback gateways
    - create_content_store:  Builds the configured store

Usage:
    from artdid.infrastructure import create_content_store
"""

from artdid.infrastructure.cid import compute_cid, is_cid_v0
from artdid.infrastructure.content_store import (
    ContentStore,
    InMemoryContentStore,
    IPFSContentStore,
    create_content_store,
)

__all__ = [
    "compute_cid",
    "is_cid_v0",
    "ContentStore",
    "InMemoryContentStore",
    "IPFSContentStore",
    "create_content_store",
]
