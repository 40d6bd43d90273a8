"""
artdid.infrastructure.content_store - Content Store Client
============================================================

Content-addressed storage for artwork metadata. `put` uploads bytes and
returns their content address; `get` retrieves bytes by address.

Architecture Context:
    ┌────────────────────┐   put(bytes) → CID   ┌──────────────────────────┐
    │ RecordOrchestrator │ ───────────────────→ │  ContentStore (ABC)      │
    │                    │ ←── get(CID) bytes ─ │                          │
    └────────────────────┘                      └────────────┬─────────────┘
                                                             │
                                              ┌──────────────┴─────────────┐
                                              │                            │
                                     ┌────────▼─────────┐      ┌───────────▼──────────┐
                                     │ InMemoryContent  │      │ IPFSContentStore     │
                                     │ Store            │      │ (node + gateways)    │
                                     └──────────────────┘      └──────────────────────┘

Retrieval Policy (IPFSContentStore.get):
    1. The caller-operated node's gateway, bounded by primary_timeout_seconds.
    2. Each fallback gateway in priority order, each bounded by
       fallback_timeout_seconds.
    Each bound is an overall deadline covering redirects and the full body,
    not a per-read timeout. Strictly sequential; the first success wins and
    no further source is contacted. Worst-case latency is the sum of the
    per-source bounds.
    ContentFetchExhaustedError only after every source failed.

Upload Policy (put):
    Only the caller-operated node. Nothing is pushed to public gateways.
    Identical bytes map to the identical address, so a repeated put is a
    storage-level no-op.

Usage:
    >>> store = InMemoryContentStore()
    >>> cid = store.put(b'{"title": "X"}')
    >>> store.get(cid)
    b'{"title": "X"}'
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Optional

import httpx
import structlog

from artdid.core.config import ContentStoreConfig
from artdid.core.enums import ContentBackend
from artdid.core.exceptions import (
    ConfigurationError,
    ContentFetchExhaustedError,
    ContentStoreUnavailableError,
    InvalidInputError,
)
from artdid.infrastructure.cid import compute_cid, is_cid_v0


# =============================================================================
# Logger
# =============================================================================
logger = structlog.get_logger()

_MAX_REDIRECTS = 5


class _DeadlineExceeded(Exception):
    """A retrieval source used up its time budget."""


def _require_payload(data: bytes) -> None:
    if not data:
        raise InvalidInputError(
            message="Content payload must not be empty",
            details={"field": "content"},
        )


# =============================================================================
# Abstract Base Class
# =============================================================================
class ContentStore(ABC):
    """Abstract interface for content-addressed storage.

    Methods:
        put(data): Store bytes, return their content address.
        get(cid): Retrieve bytes by content address.
        close(): Release connection resources.
    """

    @abstractmethod
    def put(self, data: bytes) -> str:
        """Store `data` and return its content address.

        Raises:
            InvalidInputError: If `data` is empty.
            ContentStoreUnavailableError: If the upload fails.
        """
        ...

    @abstractmethod
    def get(self, cid: str) -> bytes:
        """Retrieve the bytes stored under `cid`.

        Always safe to retry.

        Raises:
            ContentFetchExhaustedError: If no source could supply the content.
        """
        ...

    def close(self) -> None:
        """Release connection resources. No-op by default."""
        return None


# =============================================================================
# In-Memory Implementation
# =============================================================================
class InMemoryContentStore(ContentStore):
    """In-memory content store for development and testing.

    Addresses are CIDv0 values computed from the bytes (see
    artdid.infrastructure.cid).

    Attributes:
        _blobs: content address → bytes.
        _unavailable: When True, put() fails as if the node were down.
        _unreachable: Addresses get() pretends it cannot fetch.
    """

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}
        self._unavailable = False
        self._unreachable: set[str] = set()
        self._logger = logger.bind(component="in_memory_content_store")

    def set_unavailable(self, unavailable: bool = True) -> None:
        """Make put() fail with ContentStoreUnavailableError."""
        self._unavailable = unavailable

    def make_unreachable(self, cid: str) -> None:
        """Make get(cid) fail as though every gateway were down."""
        self._unreachable.add(cid)

    def put(self, data: bytes) -> str:
        _require_payload(data)
        if self._unavailable:
            raise ContentStoreUnavailableError(
                message="IPFS upload failed: content node unreachable",
                error_code="UPLOAD_FAILED",
            )

        cid = compute_cid(data)
        self._blobs[cid] = data
        self._logger.debug("content_stored", cid=cid, size=len(data))
        return cid

    def get(self, cid: str) -> bytes:
        data = self._blobs.get(cid)
        if data is None or cid in self._unreachable:
            raise ContentFetchExhaustedError(
                cid=cid,
                attempts=[{"source": "memory", "error": "content not available"}],
            )
        return data

    def count(self) -> int:
        """Number of distinct blobs stored."""
        return len(self._blobs)


# =============================================================================
# IPFS Implementation
# =============================================================================
class IPFSContentStore(ContentStore):
    """Content store backed by a caller-operated IPFS node and public gateways.

    Uploads use the node's HTTP API (`POST /api/v0/add`); retrieval uses
    `GET <gateway>/ipfs/<cid>` against the node's gateway and then each
    fallback gateway in order.

    Attributes:
        _config: Endpoints and per-source timeouts.
        _client: Shared httpx.Client (one per process).
        _owns_client: Whether close() should close the client.

    Example:
        >>> store = IPFSContentStore(ContentStoreConfig(backend="ipfs"))
        >>> cid = store.put(b'{"title": "X"}')
        >>> data = store.get(cid)
    """

    def __init__(
        self,
        config: Optional[ContentStoreConfig] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._config = config or ContentStoreConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(follow_redirects=True)
        self._logger = logger.bind(component="ipfs_content_store")

    @property
    def sources(self) -> list[tuple[str, float]]:
        """Retrieval sources in priority order, each with its timeout."""
        primary = [(self._config.gateway_url, self._config.primary_timeout_seconds)]
        fallbacks = [
            (gateway, self._config.fallback_timeout_seconds)
            for gateway in self._config.fallback_gateways
        ]
        return primary + fallbacks

    def put(self, data: bytes) -> str:
        _require_payload(data)
        url = f"{self._config.api_url.rstrip('/')}/api/v0/add"

        try:
            response = self._client.post(
                url,
                files={"file": ("metadata.json", data, "application/json")},
                timeout=self._config.upload_timeout_seconds,
            )
        except httpx.HTTPError as exc:
            self._logger.error("content_upload_failed", url=url, error=str(exc))
            raise ContentStoreUnavailableError(
                message=f"IPFS upload failed: {exc}",
                error_code="UPLOAD_FAILED",
                details={"url": url},
            ) from exc

        if not response.is_success:
            self._logger.error("content_upload_failed", url=url, status=response.status_code)
            raise ContentStoreUnavailableError(
                message=f"IPFS upload failed: {response.status_code} - {response.text}",
                error_code="UPLOAD_FAILED",
                details={"url": url, "status_code": response.status_code},
            )

        try:
            result = response.json()
        except ValueError as exc:
            raise ContentStoreUnavailableError(
                message=f"Unexpected IPFS response: {response.text}",
                error_code="UNEXPECTED_UPLOAD_RESPONSE",
                details={"url": url},
            ) from exc

        cid = result.get("Hash") if isinstance(result, dict) else None
        if not isinstance(cid, str) or not is_cid_v0(cid):
            raise ContentStoreUnavailableError(
                message=f"Unexpected IPFS response: {result!r}",
                error_code="UNEXPECTED_UPLOAD_RESPONSE",
                details={"url": url},
            )

        self._logger.info("content_uploaded", cid=cid, size=len(data))
        return cid

    def get(self, cid: str) -> bytes:
        attempts: list[dict[str, str]] = []

        for base_url, timeout in self.sources:
            url = f"{base_url.rstrip('/')}/ipfs/{cid}"
            try:
                data = self._fetch(url, timeout)
            except _DeadlineExceeded:
                error = f"Timeout: exceeded {timeout:g}s budget"
            except httpx.HTTPStatusError as exc:
                error = f"HTTP {exc.response.status_code}"
            except httpx.HTTPError as exc:
                error = f"{type(exc).__name__}: {exc}"
            else:
                self._logger.debug("content_fetched", cid=cid, source=base_url)
                return data

            attempts.append({"source": base_url, "error": error})
            self._logger.warning(
                "content_fetch_failed",
                cid=cid,
                source=base_url,
                timeout=timeout,
                error=error,
            )

        self._logger.error("content_fetch_exhausted", cid=cid, attempts=len(attempts))
        raise ContentFetchExhaustedError(cid=cid, attempts=attempts)

    def _fetch(self, url: str, budget: float) -> bytes:
        """GET `url` within an overall deadline of `budget` seconds.

        The deadline spans redirect hops and the whole body read. httpx
        timeouts only bound each individual connect or read, so the body is
        streamed and the clock is checked after every chunk. Every hop's
        own timeouts are capped at the budget left when it starts.

        Raises:
            _DeadlineExceeded: The budget ran out.
            httpx.HTTPStatusError: The source answered with a non-2xx status.
            httpx.HTTPError: Any transport failure.
        """
        deadline = time.monotonic() + budget

        for _ in range(_MAX_REDIRECTS + 1):
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise _DeadlineExceeded(url)

            with self._client.stream(
                "GET",
                url,
                headers={"Accept": "application/json"},
                timeout=remaining,
                follow_redirects=False,
            ) as response:
                if response.is_redirect and response.next_request is not None:
                    url = str(response.next_request.url)
                    continue
                response.raise_for_status()

                chunks: list[bytes] = []
                for chunk in response.iter_bytes():
                    chunks.append(chunk)
                    if time.monotonic() > deadline:
                        raise _DeadlineExceeded(url)
                return b"".join(chunks)

        raise httpx.TooManyRedirects(
            f"Exceeded {_MAX_REDIRECTS} redirects", request=response.request
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


# =============================================================================
# Factory
# =============================================================================
def create_content_store(config: ContentStoreConfig) -> ContentStore:
    """Create the Content Store selected by configuration.

    Raises:
        ConfigurationError: If the backend is unknown.
    """
    try:
        backend = ContentBackend(config.backend)
    except ValueError as exc:
        raise ConfigurationError(
            message=f"Unknown content store backend: '{config.backend}'",
            error_code="UNKNOWN_CONTENT_BACKEND",
        ) from exc

    if backend is ContentBackend.IPFS:
        return IPFSContentStore(config)
    return InMemoryContentStore()
