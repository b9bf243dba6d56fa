"""
Blob Uploader - Walrus writes

Two upload modes share one client:
- Simple upload: best-effort store, failing over across every publisher
- Deployment upload: paid store on one canonical publisher, retried with
  exponential backoff while the network is busy
"""

from __future__ import annotations

import asyncio
import json
from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx

from auditstore.constants import (
    BLOBS_PATH,
    JSON_CONTENT_TYPE,
    MIST_PER_SUI,
    OCTET_STREAM,
    PDF_CONTENT_TYPE,
)
from auditstore.errors import (
    AllEndpointsFailedError,
    DeploymentFailedError,
    MaxRetriesExceededError,
    NetworkTimeoutError,
    NetworkUnavailableError,
    PublisherBusyError,
    UnexpectedResponseError,
)
from auditstore.storage.cost import estimate_cost
from auditstore.storage.endpoints import EndpointRegistry
from auditstore.storage.types import (
    AlreadyCertified,
    BlobMetadata,
    NewlyCreated,
    StoreOutcome,
    UploaderConfig,
    parse_store_response,
)
from auditstore.utils.http import bounded_request
from auditstore.utils.logging import get_logger
from auditstore.utils.retry import RetryConfig, retry_async
from auditstore.utils.validation import validate_endpoint_url

_logger = get_logger(__name__)


def infer_content_type(payload: bytes) -> str:
    """
    Guess the MIME type of a payload from its leading bytes.

    Args:
        payload: Raw bytes

    Returns:
        ``application/pdf``, ``application/json`` or ``application/octet-stream``
    """
    if payload.startswith(b"%PDF-"):
        return PDF_CONTENT_TYPE
    head = payload.lstrip()[:1]
    if head in (b"{", b"["):
        try:
            json.loads(payload)
        except ValueError:
            return OCTET_STREAM
        return JSON_CONTENT_TYPE
    return OCTET_STREAM


class BlobUploader:
    """
    Walrus upload client.

    Features:
    - Sequential publisher failover for simple uploads
    - Exponential backoff on 503, transport errors and timeouts for
      deployment uploads
    - Overall deadline for a deployment upload
    - Normalization of both publisher success shapes into BlobMetadata

    Example:
        ```python
        from auditstore.storage import BlobUploader, EndpointRegistry

        uploader = BlobUploader(registry=EndpointRegistry.testnet())

        # Best-effort upload
        meta = await uploader.upload(pdf_bytes, "application/pdf")

        # Paid upload for 20 epochs
        meta = await uploader.upload_with_deployment(pdf_bytes, 20, wallet)
        print(meta.transaction_hash, meta.deployment_cost)
        ```
    """

    def __init__(
        self,
        config: Optional[UploaderConfig] = None,
        registry: Optional[EndpointRegistry] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the uploader.

        Args:
            config: Uploader configuration (defaults if None)
            registry: Endpoint registry (Walrus testnet if None)
            transport: Optional httpx transport, used to inject fakes
        """
        self._config = config or UploaderConfig()
        self._registry = registry or EndpointRegistry.testnet()
        self._transport = transport
        self._retry_config = RetryConfig(
            max_attempts=self._config.deployment_max_attempts,
            base_delay_ms=self._config.deployment_base_delay_ms,
            max_delay_ms=self._config.deployment_deadline_ms,
            jitter=False,
            retryable_errors=(PublisherBusyError, httpx.TransportError),
        )

    @property
    def registry(self) -> EndpointRegistry:
        """Get the endpoint registry."""
        return self._registry

    @property
    def deployment_endpoint(self) -> str:
        """Canonical publisher used by the deployment path."""
        if self._config.deployment_endpoint:
            return validate_endpoint_url(
                self._config.deployment_endpoint, "deployment endpoint"
            )
        return self._registry.primary_write_endpoint()

    def _client(self, timeout_ms: int) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_ms / 1000),
            transport=self._transport,
        )

    # ------------------------------------------------------------------
    # Simple upload
    # ------------------------------------------------------------------

    async def upload(
        self,
        payload: bytes,
        content_type: Optional[str] = None,
    ) -> BlobMetadata:
        """
        Upload bytes, trying each publisher in registry order.

        A failing publisher (error status, transport error, timeout or an
        undecodable body) is skipped without delay.

        Args:
            payload: Raw bytes to store
            content_type: MIME type (inferred from the payload if None)

        Returns:
            BlobMetadata without deployment fields

        Raises:
            AllEndpointsFailedError: If every publisher failed
        """
        content_type = content_type or infer_content_type(payload)
        publishers = self._registry.write_endpoints()
        attempts: List[Dict[str, str]] = []

        async with self._client(self._config.publisher_timeout_ms) as client:
            for index, publisher in enumerate(publishers, start=1):
                _logger.info(
                    "Attempting upload to publisher",
                    extra={
                        "endpoint": publisher,
                        "attempt": f"{index}/{len(publishers)}",
                        "size": len(payload),
                    },
                )
                try:
                    response = await bounded_request(
                        client.put(
                            f"{publisher}{BLOBS_PATH}",
                            content=payload,
                            headers={"Content-Type": content_type},
                        ),
                        self._config.publisher_timeout_ms,
                    )
                except httpx.TimeoutException:
                    attempts.append({"endpoint": publisher, "reason": "timeout"})
                    _logger.warning("Publisher timed out", extra={"endpoint": publisher})
                    continue
                except httpx.TransportError as e:
                    attempts.append({"endpoint": publisher, "reason": type(e).__name__})
                    _logger.warning(
                        "Publisher unreachable",
                        extra={"endpoint": publisher, "error": str(e)},
                    )
                    continue

                if not response.is_success:
                    attempts.append(
                        {"endpoint": publisher, "reason": f"HTTP {response.status_code}"}
                    )
                    _logger.warning(
                        "Publisher rejected upload",
                        extra={"endpoint": publisher, "status": response.status_code},
                    )
                    continue

                try:
                    outcome = parse_store_response(response.json(), publisher)
                except (ValueError, UnexpectedResponseError):
                    attempts.append(
                        {"endpoint": publisher, "reason": "unexpected response format"}
                    )
                    _logger.warning(
                        "Publisher returned an unexpected body",
                        extra={"endpoint": publisher},
                    )
                    continue

                metadata = self._simple_metadata(outcome, payload, content_type)
                _logger.info(
                    "Walrus upload successful",
                    extra={"endpoint": publisher, "blob_id": metadata.blob_id},
                )
                return metadata

        _logger.error(
            "All Walrus publishers failed",
            extra={"publishers": len(publishers)},
        )
        raise AllEndpointsFailedError(attempts=attempts)

    @staticmethod
    def _simple_metadata(
        outcome: StoreOutcome,
        payload: bytes,
        content_type: str,
    ) -> BlobMetadata:
        if isinstance(outcome, NewlyCreated):
            return BlobMetadata(
                blob_id=outcome.blob_object.blob_id,
                size=outcome.blob_object.size,
                content_type=content_type,
            )
        return BlobMetadata(
            blob_id=outcome.blob_id,
            size=len(payload),
            content_type=content_type,
        )

    async def upload_json(self, data: Any) -> BlobMetadata:
        """
        Upload a JSON document.

        Args:
            data: JSON-serializable object

        Returns:
            BlobMetadata of the stored document
        """
        content = json.dumps(data, indent=2).encode()
        return await self.upload(content, JSON_CONTENT_TYPE)

    async def upload_pdf(self, pdf_bytes: bytes) -> BlobMetadata:
        """Upload a rendered PDF report."""
        return await self.upload(pdf_bytes, PDF_CONTENT_TYPE)

    # ------------------------------------------------------------------
    # Deployment (paid) upload
    # ------------------------------------------------------------------

    async def upload_with_deployment(
        self,
        payload: bytes,
        storage_epochs: int,
        wallet_address: str,
        content_type: Optional[str] = None,
    ) -> BlobMetadata:
        """
        Store bytes for a purchased number of epochs.

        Uses only the canonical deployment endpoint. HTTP 503, transport
        errors and per-request timeouts are retried after
        ``base_delay * 2^attempt``; any other error status fails at once.

        Args:
            payload: Raw bytes to store
            storage_epochs: Epochs to purchase (>= 1)
            wallet_address: Owner of the resulting blob object
            content_type: MIME type (inferred from the payload if None)

        Returns:
            BlobMetadata with cost, epochs and transaction hash populated

        Raises:
            DeploymentFailedError: Non-503 error status or unusable body
            MaxRetriesExceededError: Publisher stayed busy
            NetworkUnavailableError: Transport failures outlasted retries
            NetworkTimeoutError: Timeouts outlasted retries, or the overall
                deadline passed
        """
        if storage_epochs < 1:
            raise ValueError(f"storage_epochs must be at least 1, got {storage_epochs}")
        if not wallet_address:
            raise ValueError("wallet_address is required for deployment uploads")

        content_type = content_type or infer_content_type(payload)
        endpoint = self.deployment_endpoint
        quote = estimate_cost(len(payload), storage_epochs)
        url = f"{endpoint}{BLOBS_PATH}"
        params = {"epochs": storage_epochs, "send_object_to": wallet_address}

        _logger.info(
            "Starting Walrus deployment",
            extra={
                "endpoint": endpoint,
                "size": len(payload),
                "epochs": storage_epochs,
                "quote_sui": str(quote),
            },
        )

        async with self._client(self._config.publisher_timeout_ms) as client:

            async def do_store() -> httpx.Response:
                response = await bounded_request(
                    client.put(
                        url,
                        params=params,
                        content=payload,
                        headers={"Content-Type": content_type},
                    ),
                    self._config.publisher_timeout_ms,
                )
                if response.status_code == 503:
                    raise PublisherBusyError(endpoint)
                if not response.is_success:
                    raise DeploymentFailedError(
                        response.status_code,
                        endpoint=endpoint,
                        reason=response.reason_phrase or None,
                    )
                return response

            try:
                response = await asyncio.wait_for(
                    retry_async(do_store, self._retry_config, on_retry=self._log_retry),
                    timeout=self._config.deployment_deadline_ms / 1000,
                )
            except asyncio.TimeoutError as e:
                _logger.error(
                    "Walrus deployment deadline exceeded",
                    extra={"endpoint": endpoint, "deadline_ms": self._config.deployment_deadline_ms},
                )
                raise NetworkTimeoutError(
                    self._config.deployment_deadline_ms, endpoint=endpoint
                ) from e
            except PublisherBusyError as e:
                _logger.error(
                    "Walrus network busy, retries exhausted",
                    extra={"endpoint": endpoint},
                )
                raise MaxRetriesExceededError(
                    self._config.deployment_max_attempts, endpoint=endpoint
                ) from e
            except httpx.TimeoutException as e:
                _logger.error(
                    "Walrus deployment timed out, retries exhausted",
                    extra={"endpoint": endpoint},
                )
                raise NetworkTimeoutError(
                    self._config.publisher_timeout_ms, endpoint=endpoint
                ) from e
            except httpx.TransportError as e:
                _logger.error(
                    "Walrus network unreachable, retries exhausted",
                    extra={"endpoint": endpoint, "error": str(e)},
                )
                raise NetworkUnavailableError(endpoint=endpoint) from e

        try:
            outcome = parse_store_response(response.json(), endpoint)
        except (ValueError, UnexpectedResponseError) as e:
            raise DeploymentFailedError(
                response.status_code,
                endpoint=endpoint,
                reason="unexpected response format",
            ) from e

        metadata = self._deployment_metadata(
            outcome,
            payload,
            content_type,
            storage_epochs,
            quote,
            endpoint,
            response.status_code,
        )
        _logger.info(
            "Walrus deployment successful",
            extra={
                "blob_id": metadata.blob_id,
                "cost_sui": str(metadata.deployment_cost),
                "tx": metadata.transaction_hash,
            },
        )
        return metadata

    def _log_retry(self, attempt: int, error: Exception, delay: float) -> None:
        if isinstance(error, PublisherBusyError):
            reason = "network busy"
        elif isinstance(error, httpx.TimeoutException):
            reason = "timeout"
        else:
            reason = "network error"
        _logger.warning(
            "Retrying Walrus deployment",
            extra={
                "reason": reason,
                "delay_s": delay,
                "failed_attempt": f"{attempt + 1}/{self._config.deployment_max_attempts}",
            },
        )

    @staticmethod
    def _deployment_metadata(
        outcome: StoreOutcome,
        payload: bytes,
        content_type: str,
        storage_epochs: int,
        quote: Decimal,
        endpoint: str,
        http_status: int,
    ) -> BlobMetadata:
        if isinstance(outcome, NewlyCreated):
            cost = quote
            if outcome.cost is not None:
                cost = Decimal(outcome.cost) / Decimal(MIST_PER_SUI)
            return BlobMetadata(
                blob_id=outcome.blob_object.blob_id,
                size=outcome.blob_object.size,
                content_type=content_type,
                deployment_cost=cost,
                storage_epochs=storage_epochs,
                transaction_hash=outcome.blob_object.id,
            )

        if not isinstance(outcome, AlreadyCertified):
            raise UnexpectedResponseError(endpoint=endpoint)
        reference = outcome.transaction_reference
        if reference is None:
            raise DeploymentFailedError(
                http_status,
                endpoint=endpoint,
                reason="certified blob carries no transaction reference",
            )
        return BlobMetadata(
            blob_id=outcome.blob_id,
            size=len(payload),
            content_type=content_type,
            deployment_cost=quote,
            storage_epochs=storage_epochs,
            transaction_hash=reference,
        )
