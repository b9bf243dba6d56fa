"""
Shared fixtures for storage module tests.

Endpoint fakes are ``httpx.MockTransport`` handlers that record every
request they receive, so tests can assert both on results and on which
endpoints were contacted in which order.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from auditstore.storage import (
    BlobRetriever,
    BlobUploader,
    EndpointRegistry,
    ProbeConfig,
    RetrieverConfig,
    StatusProbe,
    UploaderConfig,
)


# =============================================================================
# Test Constants
# =============================================================================

PUBLISHERS = (
    "https://publisher-a.walrus.test",
    "https://publisher-b.walrus.test",
    "https://publisher-c.walrus.test",
)
AGGREGATORS = (
    "https://aggregator-a.walrus.test",
    "https://aggregator-b.walrus.test",
)

VALID_BLOB_ID = "M4hsZGQ1oCktdzegB6HnI6Mi28S2nqOPHxK-W7_4BUk"
VALID_OBJECT_ID = "0x" + "c" * 64
VALID_TX_DIGEST = "9XUMqL6XeTV1eHGrhYBrZf1VdGPf9ZRyLaZWnuEGbAsL"
VALID_WALLET = "0x" + "a" * 64

PDF_BYTES = b"%PDF-1.7\n% audit report\n" + b"0" * 1000


def newly_created_body(
    blob_id: str = VALID_BLOB_ID,
    size: int = 1024,
    cost: Optional[int] = 101_000_000,
) -> Dict[str, Any]:
    """Publisher body for a blob stored for the first time."""
    body: Dict[str, Any] = {
        "newlyCreated": {
            "blobObject": {
                "id": VALID_OBJECT_ID,
                "blobId": blob_id,
                "size": size,
                "storedEpoch": 7,
            },
        }
    }
    if cost is not None:
        body["newlyCreated"]["cost"] = cost
    return body


def already_certified_body(
    blob_id: str = VALID_BLOB_ID,
    tx_digest: Optional[str] = VALID_TX_DIGEST,
    event_seq: Optional[int] = None,
) -> Dict[str, Any]:
    """Publisher body for content the network already holds."""
    certified: Dict[str, Any] = {"blobId": blob_id, "endEpoch": 42}
    if tx_digest is not None:
        certified["event"] = {"txDigest": tx_digest, "eventSeq": 0}
    if event_seq is not None:
        certified["eventSeq"] = event_seq
    return {"alreadyCertified": certified}


# =============================================================================
# Fake Endpoints
# =============================================================================


Responder = Callable[[httpx.Request], httpx.Response]


class RecordingHandler:
    """MockTransport handler that remembers every request."""

    def __init__(self, respond: Responder) -> None:
        self._respond = respond
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)

    @property
    def hosts(self) -> List[str]:
        return [f"https://{r.url.host}" for r in self.requests]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def by_host(responses: Dict[str, Any], default: Any = None) -> Responder:
    """
    Build a responder keyed by base URL.

    Values are an ``httpx.Response``, an exception class to raise, or a
    callable taking the request.
    """

    def respond(request: httpx.Request) -> httpx.Response:
        outcome = responses.get(f"https://{request.url.host}", default)
        if outcome is None:
            return httpx.Response(404)
        if isinstance(outcome, type) and issubclass(outcome, Exception):
            raise outcome("simulated failure", request=request)
        if callable(outcome):
            return outcome(request)
        return outcome

    return respond


def sequence(*outcomes: Any) -> Responder:
    """Build a responder that returns (or raises) outcomes in order."""
    remaining = list(outcomes)

    def respond(request: httpx.Request) -> httpx.Response:
        outcome = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        if isinstance(outcome, type) and issubclass(outcome, Exception):
            raise outcome("simulated failure", request=request)
        return outcome

    return respond


def trickling_response(status_code: int = 200) -> httpx.Response:
    """
    Response whose body sends one byte and then stalls indefinitely.

    MockTransport applies no httpx timeouts, so only a limit on the whole
    call can end it.
    """

    async def body():
        yield b"%"
        await asyncio.Event().wait()

    return httpx.Response(status_code, content=body())


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def registry() -> EndpointRegistry:
    return EndpointRegistry(PUBLISHERS, AGGREGATORS)


@pytest.fixture
def make_uploader(registry: EndpointRegistry) -> Callable[..., BlobUploader]:
    def factory(handler: RecordingHandler, **config: Any) -> BlobUploader:
        return BlobUploader(
            UploaderConfig(**config),
            registry,
            transport=handler.transport(),
        )

    return factory


@pytest.fixture
def make_retriever(registry: EndpointRegistry) -> Callable[..., BlobRetriever]:
    def factory(handler: RecordingHandler, **config: Any) -> BlobRetriever:
        return BlobRetriever(
            RetrieverConfig(**config),
            registry,
            transport=handler.transport(),
        )

    return factory


@pytest.fixture
def make_probe(registry: EndpointRegistry) -> Callable[..., StatusProbe]:
    def factory(handler: RecordingHandler, **config: Any) -> StatusProbe:
        return StatusProbe(
            ProbeConfig(**config),
            registry,
            transport=handler.transport(),
        )

    return factory
