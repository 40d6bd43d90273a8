"""
artdid.infrastructure.cid - Content Address Computation
=========================================================

CIDv0 for a byte payload: base58btc of the sha2-256 multihash

    0x12 (sha2-256) | 0x20 (32-byte digest) | sha256(data)

which always starts with "Qm". Identical bytes give the identical address.
The in-memory store uses compute_cid directly. A real IPFS node wraps content
in UnixFS before hashing, so its addresses differ for the same bytes, but
they are equally deterministic and still CIDv0; the IPFS store checks the
node's reply with is_cid_v0.
"""

from __future__ import annotations

import hashlib

import base58


_SHA2_256 = 0x12
_DIGEST_LENGTH = 0x20


def compute_cid(data: bytes) -> str:
    """Return the CIDv0 ("Qm...") address of `data`."""
    digest = hashlib.sha256(data).digest()
    multihash = bytes([_SHA2_256, _DIGEST_LENGTH]) + digest
    return base58.b58encode(multihash).decode("ascii")


def is_cid_v0(value: str) -> bool:
    """Check that `value` decodes to a sha2-256 multihash."""
    if not value.startswith("Qm") or len(value) != 46:
        return False
    try:
        raw = base58.b58decode(value)
    except ValueError:
        return False
    return len(raw) == 34 and raw[0] == _SHA2_256 and raw[1] == _DIGEST_LENGTH
