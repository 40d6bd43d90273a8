"""
artdid.core.exceptions - Custom Exception Hierarchy
=====================================================

Structured exceptions for the ArtDID registry. Components raise and catch
these specific types instead of generic Exception; each one carries a
machine-readable error code, a `details` dict, and the ErrorKind the HTTP
boundary uses to pick a status code.

Exception Hierarchy:
    ArtDIDError (base)
        ├── InvalidInputError                - Missing/empty/malformed request data
        │     └── InvalidFormatError         - DID string does not parse
        ├── RecordNotFoundError              - Ledger has no such record
        ├── OwnerAuthorizationDeniedError    - Caller is not the current owner
        ├── DuplicateOwnerError              - New owner already in owner history
        ├── StaleRecordError                 - Update based on an outdated history length
        ├── LedgerUnavailableError           - Ledger transport/decoding fault
        ├── ContentStoreUnavailableError     - Upload to the content node failed
        ├── ContentFetchExhaustedError       - Every retrieval source failed
        └── ConfigurationError               - Invalid or incomplete configuration

Error Handling Flow:
    DID Codec / Ledger Gateway / Content Store raise ArtDIDError subclasses
        → RecordOrchestrator converts them into an Outcome (error_kind + message)
        → HTTP handlers map the ErrorKind to a status code

Usage:
    >>> from artdid.core.exceptions import RecordNotFoundError
    >>> raise RecordNotFoundError(record_id="0xabc")
"""

from __future__ import annotations

from typing import Any, Optional

from artdid.core.enums import ErrorKind


# =============================================================================
# Base Exception
# =============================================================================
# All registry exceptions inherit from this base class so a single
# `except ArtDIDError` clause catches every domain failure:
#
#   try:
#       gateway.get_full(record_id)
#   except ArtDIDError as e:
#       logger.error(e.message, error_code=e.error_code, details=e.details)
# =============================================================================
class ArtDIDError(Exception):
    """Base exception for all ArtDID registry errors.

    Attributes:
        kind: The ErrorKind this exception class reports. Set per subclass.
        message: Human-readable error description.
        error_code: Machine-readable code, UPPER_SNAKE_CASE.
        details: Additional debugging context (record ids, CIDs, URLs, ...).
    """

    kind: ErrorKind = ErrorKind.LEDGER_UNAVAILABLE

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize this exception for logs and API responses.

        Returns:
            Dictionary with error_type, kind, message, error_code, and details.
        """
        return {
            "error_type": self.__class__.__name__,
            "kind": self.kind.value,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


# =============================================================================
# Client-Caused Errors
# =============================================================================
# Detected before any network call. Raising one of these means nothing was
# uploaded and nothing was committed.
# =============================================================================
class InvalidInputError(ArtDIDError):
    """Raised when request data is missing, empty, or malformed.

    Example:
        >>> raise InvalidInputError(
        ...     message="Artwork metadata is required",
        ...     details={"field": "metadata"},
        ... )
    """

    kind = ErrorKind.INVALID_INPUT

    def __init__(
        self,
        message: str,
        error_code: str = "INVALID_INPUT",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class InvalidFormatError(InvalidInputError):
    """Raised when a DID string does not match `did:art:<namespace>:<recordId>`."""

    kind = ErrorKind.INVALID_FORMAT

    def __init__(
        self,
        message: str,
        did: Optional[str] = None,
        error_code: str = "INVALID_DID_FORMAT",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        if did is not None:
            enriched_details["did"] = did

        super().__init__(message=message, error_code=error_code, details=enriched_details)

        self.did = did


# =============================================================================
# Ledger-Enforced Rule Violations
# =============================================================================
# The ledger is authoritative for record existence and ownership; the
# gateway only translates its rejections into these types.
# =============================================================================
class RecordNotFoundError(ArtDIDError):
    """Raised when the ledger holds no record (empty content-address history)."""

    kind = ErrorKind.RECORD_NOT_FOUND

    def __init__(
        self,
        record_id: str,
        message: Optional[str] = None,
        error_code: str = "RECORD_NOT_FOUND",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["record_id"] = record_id

        super().__init__(
            message=message or f"DID not found: record '{record_id}' does not exist",
            error_code=error_code,
            details=enriched_details,
        )

        self.record_id = record_id


class OwnerAuthorizationDeniedError(ArtDIDError):
    """Raised when the caller is not the current owner of the record.

    Attributes:
        record_id: The record whose ownership change was refused.
        caller: Address of the account that attempted the transfer.
    """

    kind = ErrorKind.OWNER_AUTHORIZATION_DENIED

    def __init__(
        self,
        record_id: str,
        caller: Optional[str] = None,
        message: Optional[str] = None,
        error_code: str = "OWNER_AUTHORIZATION_DENIED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["record_id"] = record_id
        if caller is not None:
            enriched_details["caller"] = caller

        super().__init__(
            message=message or "Only the current owner can transfer ownership",
            error_code=error_code,
            details=enriched_details,
        )

        self.record_id = record_id
        self.caller = caller


class DuplicateOwnerError(ArtDIDError):
    """Raised when the new owner already appears in the owner history."""

    kind = ErrorKind.DUPLICATE_OWNER

    def __init__(
        self,
        record_id: str,
        new_owner: str,
        message: Optional[str] = None,
        error_code: str = "DUPLICATE_OWNER",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["record_id"] = record_id
        enriched_details["new_owner"] = new_owner

        super().__init__(
            message=message or f"Address {new_owner} is already an owner of this record",
            error_code=error_code,
            details=enriched_details,
        )

        self.record_id = record_id
        self.new_owner = new_owner


class StaleRecordError(ArtDIDError):
    """Raised when an update was computed against an outdated history length.

    Two concurrent updates can read the same history length; the ledger
    commits the first and rejects the second with this error.

    Attributes:
        expected_length: History length the caller based its update on.
        actual_length: History length on the ledger at commit time
            (None when the ledger does not report it).
    """

    kind = ErrorKind.STALE_RECORD

    def __init__(
        self,
        record_id: str,
        expected_length: int,
        actual_length: Optional[int] = None,
        message: Optional[str] = None,
        error_code: str = "STALE_RECORD",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["record_id"] = record_id
        enriched_details["expected_length"] = expected_length
        if actual_length is not None:
            enriched_details["actual_length"] = actual_length

        super().__init__(
            message=message or (
                f"Record '{record_id}' changed since it was read "
                f"(expected {expected_length} versions)"
            ),
            error_code=error_code,
            details=enriched_details,
        )

        self.record_id = record_id
        self.expected_length = expected_length
        self.actual_length = actual_length


# =============================================================================
# Infrastructure Faults
# =============================================================================
class LedgerUnavailableError(ArtDIDError):
    """Raised on any ledger transport or decoding fault.

    Also raised when a submitted transaction is not confirmed in time; the
    transaction hash (if known) is carried in `details` so an operator can
    check it. The gateway never resubmits.
    """

    kind = ErrorKind.LEDGER_UNAVAILABLE

    def __init__(
        self,
        message: str,
        error_code: str = "LEDGER_UNAVAILABLE",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class ContentStoreUnavailableError(ArtDIDError):
    """Raised when uploading to the caller-operated content node fails."""

    kind = ErrorKind.CONTENT_STORE_UNAVAILABLE

    def __init__(
        self,
        message: str,
        error_code: str = "CONTENT_STORE_UNAVAILABLE",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class ContentFetchExhaustedError(ArtDIDError):
    """Raised once every retrieval source has failed for a content address.

    Attributes:
        cid: The content address that could not be fetched.
        attempts: One entry per source tried, in order: {"source", "error"}.
    """

    kind = ErrorKind.CONTENT_FETCH_EXHAUSTED

    def __init__(
        self,
        cid: str,
        attempts: Optional[list[dict[str, str]]] = None,
        message: Optional[str] = None,
        error_code: str = "CONTENT_FETCH_EXHAUSTED",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        enriched_details = details or {}
        enriched_details["cid"] = cid
        enriched_details["attempts"] = attempts or []

        super().__init__(
            message=message or f"All IPFS gateways failed for CID: {cid}",
            error_code=error_code,
            details=enriched_details,
        )

        self.cid = cid
        self.attempts = attempts or []


class ConfigurationError(ArtDIDError):
    """Raised during startup when configuration is invalid or incomplete.

    Should cause the application to fail fast.

    Example:
        >>> raise ConfigurationError(
        ...     message="Invalid private key configuration",
        ...     error_code="INVALID_PRIVATE_KEY",
        ... )
    """

    kind = ErrorKind.CONFIGURATION

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)
