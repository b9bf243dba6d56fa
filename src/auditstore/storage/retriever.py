"""
Blob Retriever - Walrus reads

Fetches blob bytes from the aggregator list. A freshly stored blob can take
a few seconds to reach every aggregator, so a full fetch makes several
passes over the list with a pause between passes.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

import httpx

from auditstore.constants import BLOBS_PATH
from auditstore.errors import BlobNotFoundError
from auditstore.storage.endpoints import EndpointRegistry
from auditstore.storage.types import BlobHeadResult, FetchedBlob, RetrieverConfig
from auditstore.utils.http import bounded_request
from auditstore.utils.logging import get_logger
from auditstore.utils.validation import validate_blob_id

_logger = get_logger(__name__)


class BlobRetriever:
    """
    Walrus read client.

    Example:
        ```python
        retriever = BlobRetriever(registry=EndpointRegistry.testnet())

        blob = await retriever.fetch(blob_id)
        print(blob.aggregator, blob.size)

        head = await retriever.head_check(blob_id)
        if head.exists:
            ...
        ```
    """

    def __init__(
        self,
        config: Optional[RetrieverConfig] = None,
        registry: Optional[EndpointRegistry] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or RetrieverConfig()
        self._registry = registry or EndpointRegistry.testnet()
        self._transport = transport

    @property
    def registry(self) -> EndpointRegistry:
        return self._registry

    def _client(self, timeout_ms: int) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_ms / 1000),
            transport=self._transport,
        )

    def blob_url(self, blob_id: str, aggregator: Optional[str] = None) -> str:
        """
        Public read URL of a blob.

        Args:
            blob_id: Walrus blob identifier
            aggregator: Aggregator base URL (primary aggregator if None)

        Returns:
            ``{aggregator}/v1/blobs/{blob_id}``
        """
        blob_id = validate_blob_id(blob_id)
        base = aggregator or self._registry.read_endpoints()[0]
        return f"{base}{BLOBS_PATH}/{blob_id}"

    async def fetch(self, blob_id: str) -> FetchedBlob:
        """
        Retrieve blob bytes, retrying across aggregators.

        Each pass tries every aggregator in order and returns the first
        2xx body. Between passes it waits ``propagation_delay_ms``; there
        is no wait after the final pass.

        Args:
            blob_id: Walrus blob identifier

        Returns:
            FetchedBlob with bytes, content type and serving aggregator

        Raises:
            InvalidBlobIdError: If blob_id is malformed
            BlobNotFoundError: If every pass failed on every aggregator
        """
        blob_id = validate_blob_id(blob_id)
        passes = self._config.propagation_passes
        aggregators = self._registry.read_endpoints()

        async with self._client(self._config.aggregator_timeout_ms) as client:
            for pass_index in range(passes):
                for aggregator in aggregators:
                    url = f"{aggregator}{BLOBS_PATH}/{blob_id}"
                    try:
                        response = await bounded_request(
                            client.get(url), self._config.aggregator_timeout_ms
                        )
                    except httpx.TransportError as e:
                        _logger.debug(
                            "Aggregator request failed",
                            extra={"aggregator": aggregator, "error": type(e).__name__},
                        )
                        continue

                    if response.is_success:
                        _logger.info(
                            "Blob retrieved",
                            extra={
                                "blob_id": blob_id,
                                "aggregator": aggregator,
                                "pass": pass_index + 1,
                                "size": len(response.content),
                            },
                        )
                        return FetchedBlob(
                            blob_id=blob_id,
                            data=response.content,
                            content_type=response.headers.get("content-type"),
                            aggregator=aggregator,
                        )

                    _logger.debug(
                        "Aggregator does not serve blob",
                        extra={"aggregator": aggregator, "status": response.status_code},
                    )

                if pass_index < passes - 1:
                    delay = self._config.propagation_delay_ms / 1000
                    _logger.info(
                        "Blob not found yet, waiting for propagation",
                        extra={
                            "blob_id": blob_id,
                            "pass": f"{pass_index + 1}/{passes}",
                            "delay_s": delay,
                        },
                    )
                    await asyncio.sleep(delay)

        _logger.warning(
            "Blob not found on any aggregator",
            extra={"blob_id": blob_id, "passes": passes},
        )
        raise BlobNotFoundError(blob_id, passes=passes)

    async def head_check(self, blob_id: str) -> BlobHeadResult:
        """
        Check whether any aggregator serves a blob, without downloading it.

        Single pass, short timeout. Failure is reported as
        ``exists=False``, never raised.

        Args:
            blob_id: Walrus blob identifier

        Returns:
            BlobHeadResult with size and content type when known

        Raises:
            InvalidBlobIdError: If blob_id is malformed
        """
        blob_id = validate_blob_id(blob_id)

        async with self._client(self._config.head_timeout_ms) as client:
            for aggregator in self._registry.read_endpoints():
                try:
                    response = await bounded_request(
                        client.head(f"{aggregator}{BLOBS_PATH}/{blob_id}"),
                        self._config.head_timeout_ms,
                    )
                except httpx.TransportError:
                    continue
                if not response.is_success:
                    continue

                length = response.headers.get("content-length")
                return BlobHeadResult(
                    exists=True,
                    size=int(length) if length and length.isdigit() else None,
                    content_type=response.headers.get("content-type"),
                    aggregator=aggregator,
                )

        return BlobHeadResult(exists=False)

    async def storage_info(self, blob_id: str) -> Dict[str, Any]:
        """
        Summarize where a blob can be read.

        Args:
            blob_id: Walrus blob identifier

        Returns:
            Dictionary with blobId, exists, aggregator, url, size and contentType
        """
        blob_id = validate_blob_id(blob_id)
        head = await self.head_check(blob_id)
        return {
            "blobId": blob_id,
            "exists": head.exists,
            "aggregator": head.aggregator,
            "url": self.blob_url(blob_id, head.aggregator),
            "size": head.size,
            "contentType": head.content_type,
        }
