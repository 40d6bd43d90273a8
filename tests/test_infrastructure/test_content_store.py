"""
Tests for artdid.infrastructure.content_store
===============================================

The IPFS store is exercised through httpx.MockTransport, so every request
it makes is observed and answered in-process:
    - Upload goes only to the node API and returns the reply's Hash
    - Retrieval tries the node gateway, then each fallback in order
    - The first success short-circuits the remaining sources
    - Each source gets its own overall deadline (primary 5s, fallbacks 3s)
    - Exhaustion reports every attempt
"""

from __future__ import annotations

import json
import time
from typing import Callable, Iterator

import httpx
import pytest

from artdid.core.config import ContentStoreConfig
from artdid.core.exceptions import (
    ConfigurationError,
    ContentFetchExhaustedError,
    ContentStoreUnavailableError,
    InvalidInputError,
)
from artdid.infrastructure.cid import compute_cid
from artdid.infrastructure.content_store import (
    ContentStore,
    InMemoryContentStore,
    IPFSContentStore,
    create_content_store,
)


CID = "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"
PAYLOAD = b'{"title": "X"}'

NODE_API = "http://ipfs-node:5001"
NODE_GATEWAY = "http://ipfs-node:8080"
FALLBACKS = ["https://gw-one.example", "https://gw-two.example", "https://gw-three.example"]


class RecordingTransport:
    """Routes requests by host and records them in order."""

    def __init__(self, routes: dict[str, Callable[[httpx.Request], httpx.Response]]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.routes[request.url.host](request)

    @property
    def hosts(self) -> list[str]:
        return [request.url.host for request in self.requests]


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, content=PAYLOAD)


def _not_found(request: httpx.Request) -> httpx.Response:
    return httpx.Response(404, text="not found")


def _timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("timed out", request=request)


def _drip(interval: float, size: int = 20) -> Callable[[httpx.Request], httpx.Response]:
    """A source that answers at once, then sends one body byte per `interval`."""

    def handler(request: httpx.Request) -> httpx.Response:
        def body() -> Iterator[bytes]:
            for _ in range(size):
                time.sleep(interval)
                yield b"x"

        return httpx.Response(200, headers={"Content-Length": str(size)}, content=body())

    return handler


def _make_store(routes, **overrides) -> tuple[IPFSContentStore, RecordingTransport]:
    transport = RecordingTransport(routes)
    settings = {
        "backend": "ipfs",
        "api_url": NODE_API,
        "gateway_url": NODE_GATEWAY,
        "fallback_gateways": FALLBACKS,
        **overrides,
    }
    config = ContentStoreConfig(**settings)
    client = httpx.Client(transport=httpx.MockTransport(transport))
    return IPFSContentStore(config, client=client), transport


# =============================================================================
# Test: In-Memory Store
# =============================================================================
class TestInMemoryContentStore:
    """Tests for InMemoryContentStore."""

    def test_implements_interface(self, content_store) -> None:
        assert isinstance(content_store, ContentStore)

    def test_put_then_get(self, content_store) -> None:
        cid = content_store.put(PAYLOAD)
        assert cid == compute_cid(PAYLOAD)
        assert content_store.get(cid) == PAYLOAD

    def test_put_is_idempotent(self, content_store) -> None:
        """Identical bytes are stored once under one address."""
        assert content_store.put(PAYLOAD) == content_store.put(PAYLOAD)
        assert content_store.count() == 1

    def test_empty_payload_rejected(self, content_store) -> None:
        with pytest.raises(InvalidInputError):
            content_store.put(b"")

    def test_get_unknown_is_exhausted(self, content_store) -> None:
        with pytest.raises(ContentFetchExhaustedError) as exc_info:
            content_store.get(CID)
        assert exc_info.value.cid == CID

    def test_unavailable_put(self, content_store) -> None:
        content_store.set_unavailable()
        with pytest.raises(ContentStoreUnavailableError):
            content_store.put(PAYLOAD)
        assert content_store.count() == 0

    def test_unreachable_get(self, content_store) -> None:
        cid = content_store.put(PAYLOAD)
        content_store.make_unreachable(cid)
        with pytest.raises(ContentFetchExhaustedError):
            content_store.get(cid)


# =============================================================================
# Test: IPFS Upload
# =============================================================================
class TestIPFSPut:
    """Tests for IPFSContentStore.put()."""

    def test_upload_returns_hash(self) -> None:
        def add(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"Name": "metadata.json", "Hash": CID, "Size": "22"})

        store, transport = _make_store({"ipfs-node": add})

        assert store.put(PAYLOAD) == CID
        request = transport.requests[0]
        assert request.method == "POST"
        assert request.url.port == 5001
        assert request.url.path == "/api/v0/add"
        assert b'filename="metadata.json"' in request.content
        assert PAYLOAD in request.content

    def test_upload_uses_only_the_node(self) -> None:
        """Writes are never pushed to fallback gateways."""
        store, transport = _make_store(
            {"ipfs-node": lambda r: httpx.Response(200, json={"Hash": CID})}
        )
        store.put(PAYLOAD)
        assert transport.hosts == ["ipfs-node"]

    def test_upload_error_status(self) -> None:
        store, _ = _make_store({"ipfs-node": lambda r: httpx.Response(500, text="boom")})
        with pytest.raises(ContentStoreUnavailableError) as exc_info:
            store.put(PAYLOAD)
        assert exc_info.value.error_code == "UPLOAD_FAILED"
        assert exc_info.value.details["status_code"] == 500

    def test_upload_transport_error(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        store, _ = _make_store({"ipfs-node": refuse})
        with pytest.raises(ContentStoreUnavailableError) as exc_info:
            store.put(PAYLOAD)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_reply_without_hash(self) -> None:
        store, _ = _make_store({"ipfs-node": lambda r: httpx.Response(200, json={"Name": "x"})})
        with pytest.raises(ContentStoreUnavailableError) as exc_info:
            store.put(PAYLOAD)
        assert exc_info.value.error_code == "UNEXPECTED_UPLOAD_RESPONSE"

    def test_reply_hash_not_a_content_address(self) -> None:
        store, _ = _make_store({"ipfs-node": lambda r: httpx.Response(200, json={"Hash": "Qm123"})})
        with pytest.raises(ContentStoreUnavailableError) as exc_info:
            store.put(PAYLOAD)
        assert exc_info.value.error_code == "UNEXPECTED_UPLOAD_RESPONSE"

    def test_reply_not_json(self) -> None:
        store, _ = _make_store({"ipfs-node": lambda r: httpx.Response(200, text="<html>")})
        with pytest.raises(ContentStoreUnavailableError):
            store.put(PAYLOAD)

    def test_empty_payload_not_sent(self) -> None:
        store, transport = _make_store({})
        with pytest.raises(InvalidInputError):
            store.put(b"")
        assert transport.requests == []


# =============================================================================
# Test: IPFS Retrieval with Fallback
# =============================================================================
class TestIPFSGet:
    """Tests for IPFSContentStore.get()."""

    def test_primary_success_contacts_nothing_else(self) -> None:
        store, transport = _make_store({"ipfs-node": _ok})

        assert store.get(CID) == PAYLOAD
        assert transport.hosts == ["ipfs-node"]
        request = transport.requests[0]
        assert request.url.port == 8080
        assert request.url.path == f"/ipfs/{CID}"
        assert request.headers["accept"] == "application/json"

    def test_fallback_short_circuits(self) -> None:
        """Primary fails, first fallback succeeds, later fallbacks untouched."""
        store, transport = _make_store(
            {
                "ipfs-node": _timeout,
                "gw-one.example": _ok,
                "gw-two.example": _ok,
                "gw-three.example": _ok,
            }
        )

        assert store.get(CID) == PAYLOAD
        assert transport.hosts == ["ipfs-node", "gw-one.example"]

    def test_fallbacks_tried_in_priority_order(self) -> None:
        store, transport = _make_store(
            {
                "ipfs-node": _not_found,
                "gw-one.example": _timeout,
                "gw-two.example": _not_found,
                "gw-three.example": _ok,
            }
        )

        assert store.get(CID) == PAYLOAD
        assert transport.hosts == [
            "ipfs-node",
            "gw-one.example",
            "gw-two.example",
            "gw-three.example",
        ]

    def test_per_source_timeouts(self) -> None:
        """Primary is capped at 5s, each fallback at the tighter 3s."""
        store, transport = _make_store(
            {
                "ipfs-node": _not_found,
                "gw-one.example": _not_found,
                "gw-two.example": _ok,
            }
        )
        store.get(CID)

        read_timeouts = [request.extensions["timeout"]["read"] for request in transport.requests]
        assert read_timeouts == pytest.approx([5.0, 3.0, 3.0], abs=0.5)
        assert all(timeout <= cap for timeout, cap in zip(read_timeouts, [5.0, 3.0, 3.0]))

    def test_all_sources_fail(self) -> None:
        store, transport = _make_store(
            {
                "ipfs-node": _timeout,
                "gw-one.example": _not_found,
                "gw-two.example": _timeout,
                "gw-three.example": lambda r: httpx.Response(502),
            }
        )

        with pytest.raises(ContentFetchExhaustedError) as exc_info:
            store.get(CID)

        attempts = exc_info.value.attempts
        assert [attempt["source"] for attempt in attempts] == [NODE_GATEWAY, *FALLBACKS]
        assert attempts[0]["error"].startswith("ReadTimeout")
        assert attempts[1]["error"] == "HTTP 404"
        assert attempts[3]["error"] == "HTTP 502"
        assert len(transport.requests) == 4

    def test_slow_body_is_cut_off_at_the_deadline(self) -> None:
        """A source that keeps trickling bytes cannot outlive its budget."""
        store, transport = _make_store(
            {"ipfs-node": _drip(0.3), "gw-one.example": _ok},
            primary_timeout_seconds=0.5,
        )

        started = time.monotonic()
        assert store.get(CID) == PAYLOAD
        elapsed = time.monotonic() - started

        assert elapsed < 1.2
        assert transport.hosts == ["ipfs-node", "gw-one.example"]

    def test_deadline_overrun_is_reported(self) -> None:
        store, _ = _make_store(
            {"ipfs-node": _drip(0.2), "gw-one.example": _drip(0.2)},
            fallback_gateways=["https://gw-one.example"],
            primary_timeout_seconds=0.3,
            fallback_timeout_seconds=0.3,
        )

        started = time.monotonic()
        with pytest.raises(ContentFetchExhaustedError) as exc_info:
            store.get(CID)
        elapsed = time.monotonic() - started

        errors = [attempt["error"] for attempt in exc_info.value.attempts]
        assert errors == ["Timeout: exceeded 0.3s budget"] * 2
        assert elapsed < 1.5

    def test_redirect_is_followed_within_the_budget(self) -> None:
        def moved(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"Location": f"https://gw-two.example/ipfs/{CID}"})

        store, transport = _make_store(
            {"ipfs-node": _not_found, "gw-one.example": moved, "gw-two.example": _ok}
        )

        assert store.get(CID) == PAYLOAD
        assert transport.hosts == ["ipfs-node", "gw-one.example", "gw-two.example"]
        assert transport.requests[2].extensions["timeout"]["read"] <= 3.0

    def test_redirect_loop_is_a_failed_source(self) -> None:
        def loop(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"Location": str(request.url)})

        store, transport = _make_store({"ipfs-node": loop}, fallback_gateways=[])

        with pytest.raises(ContentFetchExhaustedError) as exc_info:
            store.get(CID)
        assert exc_info.value.attempts[0]["error"].startswith("TooManyRedirects")
        assert len(transport.requests) == 6

    def test_get_is_retryable(self) -> None:
        store, transport = _make_store({"ipfs-node": _ok})
        assert store.get(CID) == store.get(CID)
        assert len(transport.requests) == 2

    def test_json_body_survives(self) -> None:
        body = json.dumps({"title": "Ünïcode"}, ensure_ascii=False).encode("utf-8")
        store, _ = _make_store({"ipfs-node": lambda r: httpx.Response(200, content=body)})
        assert json.loads(store.get(CID)) == {"title": "Ünïcode"}


# =============================================================================
# Test: Lifecycle and Factory
# =============================================================================
class TestLifecycle:
    """Tests for close() and create_content_store()."""

    def test_injected_client_not_closed(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(_ok))
        store = IPFSContentStore(ContentStoreConfig(backend="ipfs"), client=client)
        store.close()
        assert client.is_closed is False

    def test_owned_client_closed(self) -> None:
        store = IPFSContentStore(ContentStoreConfig(backend="ipfs"))
        store.close()
        assert store._client.is_closed is True

    def test_factory_memory(self) -> None:
        assert isinstance(create_content_store(ContentStoreConfig()), InMemoryContentStore)

    def test_factory_ipfs(self) -> None:
        store = create_content_store(ContentStoreConfig(backend="ipfs"))
        assert isinstance(store, IPFSContentStore)
        store.close()

    def test_factory_unknown_backend(self) -> None:
        config = ContentStoreConfig.model_construct(backend="s3")
        with pytest.raises(ConfigurationError):
            create_content_store(config)
