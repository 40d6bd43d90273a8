"""
artdid.core.did - DID Codec
=============================

Parsing and formatting of artwork identifiers:

    did:art:hkust:<recordId>

Exactly four colon-separated segments. The first three are fixed literals;
the fourth is the opaque, non-empty record id assigned by the ledger. The
codec is pure: no I/O, no logging, and `format_did(parse_did(d).record_id)`
returns `d` for every valid DID.

Usage:
    >>> parse_did("did:art:hkust:0xabc").record_id
    '0xabc'
    >>> format_did("0xabc")
    'did:art:hkust:0xabc'
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from artdid.core.exceptions import InvalidFormatError


DID_SCHEME = "did"
DID_METHOD = "art"
DID_NAMESPACE = "hkust"
DID_PREFIX = f"{DID_SCHEME}:{DID_METHOD}:{DID_NAMESPACE}:"

_SEGMENT_COUNT = 4
_EXPECTED_FORMAT = "Invalid DID format. Expected: did:art:hkust:<recordId>"


class ParsedDID(BaseModel):
    """The decoded parts of a DID. Only the record id varies."""

    model_config = ConfigDict(frozen=True)

    record_id: str

    @property
    def did(self) -> str:
        return format_did(self.record_id)


def parse_did(did: str) -> ParsedDID:
    """Decode a DID string into its record id.

    Args:
        did: A string of the form ``did:art:hkust:<recordId>``.

    Returns:
        ParsedDID carrying the record id.

    Raises:
        InvalidFormatError: If the segment count is not 4, a fixed segment
            does not match, or the record id is empty.
    """
    if not isinstance(did, str) or not did:
        raise InvalidFormatError(message="DID parameter is required", did=did or None)

    parts = did.split(":")
    if len(parts) != _SEGMENT_COUNT:
        raise InvalidFormatError(
            message=_EXPECTED_FORMAT,
            did=did,
            details={"segments": len(parts)},
        )

    scheme, method, namespace, record_id = parts
    if (scheme, method, namespace) != (DID_SCHEME, DID_METHOD, DID_NAMESPACE):
        raise InvalidFormatError(message=_EXPECTED_FORMAT, did=did)
    if not record_id:
        raise InvalidFormatError(
            message="Invalid DID format: record id is empty",
            did=did,
        )

    return ParsedDID(record_id=record_id)


def format_did(record_id: str) -> str:
    """Encode a record id as a DID string.

    Raises:
        InvalidFormatError: If the record id is empty or contains ':'
            (it would not parse back to itself).
    """
    if not record_id or ":" in record_id:
        raise InvalidFormatError(
            message=f"Invalid record id for DID: {record_id!r}",
            details={"record_id": record_id},
        )
    return f"{DID_PREFIX}{record_id}"
