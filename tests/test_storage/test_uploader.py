"""
Tests for BlobUploader.

Tests cover:
- Publisher failover order for simple uploads
- Exhaustion after one attempt per publisher
- Normalization of both publisher success shapes
- Deployment backoff schedule and error classification
- Overall deployment deadline
"""

import asyncio
import json
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from auditstore.errors import (
    AllEndpointsFailedError,
    DeploymentFailedError,
    MaxRetriesExceededError,
    NetworkTimeoutError,
    NetworkUnavailableError,
    UnexpectedResponseError,
)
from auditstore.storage import BlobUploader, infer_content_type
from auditstore.storage.cost import estimate_cost

from .conftest import (
    PDF_BYTES,
    PUBLISHERS,
    VALID_BLOB_ID,
    VALID_OBJECT_ID,
    VALID_TX_DIGEST,
    VALID_WALLET,
    RecordingHandler,
    already_certified_body,
    by_host,
    newly_created_body,
    sequence,
    trickling_response,
)

SLEEP_TARGET = "auditstore.utils.retry.asyncio.sleep"


# =============================================================================
# Content Type Inference
# =============================================================================


class TestInferContentType:
    def test_pdf(self) -> None:
        assert infer_content_type(PDF_BYTES) == "application/pdf"

    def test_json(self) -> None:
        assert infer_content_type(b'  {"a": 1}') == "application/json"

    def test_invalid_json_falls_back(self) -> None:
        assert infer_content_type(b"{not json") == "application/octet-stream"

    def test_binary(self) -> None:
        assert infer_content_type(b"\x00\x01\x02") == "application/octet-stream"


# =============================================================================
# Simple Upload
# =============================================================================


class TestSimpleUpload:
    """Best-effort upload with sequential failover."""

    @pytest.mark.asyncio
    async def test_first_publisher_succeeds(self, make_uploader) -> None:
        handler = RecordingHandler(
            lambda request: httpx.Response(200, json=newly_created_body(size=1024))
        )
        uploader = make_uploader(handler)

        metadata = await uploader.upload(PDF_BYTES)

        assert handler.hosts == [PUBLISHERS[0]]
        assert metadata.blob_id == VALID_BLOB_ID
        assert metadata.size == 1024
        assert metadata.content_type == "application/pdf"
        assert metadata.is_deployment is False
        assert metadata.deployment_cost is None

    @pytest.mark.asyncio
    async def test_request_shape(self, make_uploader) -> None:
        handler = RecordingHandler(
            lambda request: httpx.Response(200, json=newly_created_body())
        )
        uploader = make_uploader(handler)

        await uploader.upload(b"payload", "text/plain")

        request = handler.requests[0]
        assert request.method == "PUT"
        assert request.url.path == "/v1/blobs"
        assert request.headers["content-type"] == "text/plain"
        assert request.content == b"payload"

    @pytest.mark.asyncio
    async def test_failover_in_registry_order(self, make_uploader) -> None:
        handler = RecordingHandler(
            by_host(
                {
                    PUBLISHERS[0]: httpx.Response(500),
                    PUBLISHERS[1]: httpx.ConnectError,
                    PUBLISHERS[2]: httpx.Response(200, json=newly_created_body()),
                }
            )
        )
        uploader = make_uploader(handler)

        with patch(SLEEP_TARGET, new_callable=AsyncMock) as sleep:
            metadata = await uploader.upload(PDF_BYTES)

        assert handler.hosts == list(PUBLISHERS)
        assert metadata.blob_id == VALID_BLOB_ID
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stalled_publisher_skipped(self, make_uploader) -> None:
        handler = RecordingHandler(
            by_host(
                {PUBLISHERS[0]: lambda request: trickling_response()},
                default=httpx.Response(200, json=newly_created_body()),
            )
        )
        uploader = make_uploader(handler, publisher_timeout_ms=100)

        metadata = await uploader.upload(PDF_BYTES)

        assert handler.hosts == list(PUBLISHERS[:2])
        assert metadata.blob_id == VALID_BLOB_ID

    @pytest.mark.asyncio
    async def test_unexpected_body_moves_to_next_publisher(self, make_uploader) -> None:
        handler = RecordingHandler(
            by_host(
                {
                    PUBLISHERS[0]: httpx.Response(200, content=b"<html>oops</html>"),
                    PUBLISHERS[1]: httpx.Response(200, json={"somethingElse": {}}),
                    PUBLISHERS[2]: httpx.Response(200, json=newly_created_body()),
                }
            )
        )
        uploader = make_uploader(handler)

        metadata = await uploader.upload(PDF_BYTES)

        assert handler.hosts == list(PUBLISHERS)
        assert metadata.blob_id == VALID_BLOB_ID

    @pytest.mark.asyncio
    async def test_all_publishers_fail(self, make_uploader) -> None:
        handler = RecordingHandler(
            by_host(
                {
                    PUBLISHERS[0]: httpx.Response(500),
                    PUBLISHERS[1]: httpx.ReadTimeout,
                    PUBLISHERS[2]: httpx.ConnectError,
                }
            )
        )
        uploader = make_uploader(handler)

        with pytest.raises(AllEndpointsFailedError) as exc_info:
            await uploader.upload(PDF_BYTES)

        # Each publisher contacted exactly once
        assert handler.hosts == list(PUBLISHERS)
        assert [a["endpoint"] for a in exc_info.value.attempts] == list(PUBLISHERS)
        assert exc_info.value.attempts[0]["reason"] == "HTTP 500"
        assert exc_info.value.attempts[1]["reason"] == "timeout"
        assert exc_info.value.code == "WALRUS_ALL_PUBLISHERS_FAILED"

    @pytest.mark.asyncio
    async def test_already_certified_size_from_payload(self, make_uploader) -> None:
        handler = RecordingHandler(
            lambda request: httpx.Response(200, json=already_certified_body())
        )
        uploader = make_uploader(handler)

        metadata = await uploader.upload(PDF_BYTES)

        assert metadata.blob_id == VALID_BLOB_ID
        assert metadata.size == len(PDF_BYTES)

    @pytest.mark.asyncio
    async def test_both_shapes_normalize_to_same_blob_id(self, make_uploader) -> None:
        created = make_uploader(
            RecordingHandler(lambda r: httpx.Response(200, json=newly_created_body()))
        )
        certified = make_uploader(
            RecordingHandler(lambda r: httpx.Response(200, json=already_certified_body()))
        )

        first = await created.upload(PDF_BYTES)
        second = await certified.upload(PDF_BYTES)

        assert first.blob_id == second.blob_id == VALID_BLOB_ID

    @pytest.mark.asyncio
    async def test_upload_json(self, make_uploader) -> None:
        handler = RecordingHandler(
            lambda request: httpx.Response(200, json=newly_created_body())
        )
        uploader = make_uploader(handler)

        metadata = await uploader.upload_json({"findings": [1, 2]})

        assert metadata.content_type == "application/json"
        assert json.loads(handler.requests[0].content) == {"findings": [1, 2]}


# =============================================================================
# Deployment Upload
# =============================================================================


class TestDeploymentUpload:
    """Paid upload with exponential backoff."""

    @pytest.mark.asyncio
    async def test_success_populates_deployment_fields(self, make_uploader) -> None:
        handler = RecordingHandler(
            lambda request: httpx.Response(200, json=newly_created_body(cost=101_000_000))
        )
        uploader = make_uploader(handler)

        metadata = await uploader.upload_with_deployment(PDF_BYTES, 10, VALID_WALLET)

        assert metadata.is_deployment is True
        assert metadata.transaction_hash == VALID_OBJECT_ID
        assert metadata.storage_epochs == 10
        assert metadata.deployment_cost == Decimal("0.101")

    @pytest.mark.asyncio
    async def test_request_targets_deployment_endpoint(self, make_uploader) -> None:
        handler = RecordingHandler(
            lambda request: httpx.Response(200, json=newly_created_body())
        )
        uploader = make_uploader(
            handler, deployment_endpoint="https://deploy.walrus.test/"
        )

        await uploader.upload_with_deployment(PDF_BYTES, 5, VALID_WALLET)

        request = handler.requests[0]
        assert handler.hosts == ["https://deploy.walrus.test"]
        assert request.method == "PUT"
        assert request.url.path == "/v1/blobs"
        assert request.url.params["epochs"] == "5"
        assert request.url.params["send_object_to"] == VALID_WALLET

    @pytest.mark.asyncio
    async def test_missing_cost_uses_quote(self, make_uploader) -> None:
        handler = RecordingHandler(
            lambda request: httpx.Response(200, json=newly_created_body(cost=None))
        )
        uploader = make_uploader(handler)

        metadata = await uploader.upload_with_deployment(PDF_BYTES, 3, VALID_WALLET)

        assert metadata.deployment_cost == estimate_cost(len(PDF_BYTES), 3)

    @pytest.mark.asyncio
    async def test_busy_then_success(self, make_uploader) -> None:
        handler = RecordingHandler(
            sequence(
                httpx.Response(503),
                httpx.Response(503),
                httpx.Response(200, json=newly_created_body()),
            )
        )
        uploader = make_uploader(handler)

        with patch(SLEEP_TARGET, new_callable=AsyncMock) as sleep:
            metadata = await uploader.upload_with_deployment(PDF_BYTES, 10, VALID_WALLET)

        assert len(handler.requests) == 3
        assert [c.args[0] for c in sleep.await_args_list] == [2.0, 4.0]
        assert metadata.blob_id == VALID_BLOB_ID

    @pytest.mark.asyncio
    async def test_persistent_busy_exhausts_retries(self, make_uploader) -> None:
        handler = RecordingHandler(lambda request: httpx.Response(503))
        uploader = make_uploader(handler)

        with patch(SLEEP_TARGET, new_callable=AsyncMock) as sleep:
            with pytest.raises(MaxRetriesExceededError) as exc_info:
                await uploader.upload_with_deployment(PDF_BYTES, 10, VALID_WALLET)

        # 1 initial attempt + 3 retries, waits of 2s, 4s, 8s
        assert len(handler.requests) == 4
        assert [c.args[0] for c in sleep.await_args_list] == [2.0, 4.0, 8.0]
        assert exc_info.value.attempts == 4

    @pytest.mark.asyncio
    async def test_rejected_request_not_retried(self, make_uploader) -> None:
        handler = RecordingHandler(lambda request: httpx.Response(400))
        uploader = make_uploader(handler)

        with patch(SLEEP_TARGET, new_callable=AsyncMock) as sleep:
            with pytest.raises(DeploymentFailedError) as exc_info:
                await uploader.upload_with_deployment(PDF_BYTES, 10, VALID_WALLET)

        assert len(handler.requests) == 1
        assert exc_info.value.http_status == 400
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transport_errors_become_network_unavailable(self, make_uploader) -> None:
        handler = RecordingHandler(sequence(httpx.ConnectError))
        uploader = make_uploader(handler)

        with patch(SLEEP_TARGET, new_callable=AsyncMock):
            with pytest.raises(NetworkUnavailableError):
                await uploader.upload_with_deployment(PDF_BYTES, 10, VALID_WALLET)

        assert len(handler.requests) == 4

    @pytest.mark.asyncio
    async def test_timeouts_become_network_timeout(self, make_uploader) -> None:
        handler = RecordingHandler(sequence(httpx.ReadTimeout))
        uploader = make_uploader(handler)

        with patch(SLEEP_TARGET, new_callable=AsyncMock):
            with pytest.raises(NetworkTimeoutError) as exc_info:
                await uploader.upload_with_deployment(PDF_BYTES, 10, VALID_WALLET)

        assert len(handler.requests) == 4
        assert exc_info.value.timeout_ms == 30_000

    @pytest.mark.asyncio
    async def test_stalled_attempt_retried(self, make_uploader) -> None:
        responses = [
            trickling_response(),
            httpx.Response(200, json=newly_created_body()),
        ]
        handler = RecordingHandler(lambda request: responses.pop(0))
        uploader = make_uploader(handler, publisher_timeout_ms=100)

        with patch(SLEEP_TARGET, new_callable=AsyncMock) as sleep:
            metadata = await uploader.upload_with_deployment(PDF_BYTES, 10, VALID_WALLET)

        assert metadata.blob_id == VALID_BLOB_ID
        assert len(handler.requests) == 2
        sleep.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_overall_deadline(self, make_uploader) -> None:
        async def slow(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json=newly_created_body())

        handler = RecordingHandler(slow)
        uploader = make_uploader(handler, deployment_deadline_ms=100)

        with pytest.raises(NetworkTimeoutError) as exc_info:
            await uploader.upload_with_deployment(PDF_BYTES, 10, VALID_WALLET)

        assert exc_info.value.timeout_ms == 100

    @pytest.mark.asyncio
    async def test_unexpected_body_fails_deployment(self, make_uploader) -> None:
        handler = RecordingHandler(lambda request: httpx.Response(200, json={"ok": True}))
        uploader = make_uploader(handler)

        with pytest.raises(DeploymentFailedError, match="unexpected response format"):
            await uploader.upload_with_deployment(PDF_BYTES, 10, VALID_WALLET)

    @pytest.mark.asyncio
    async def test_already_certified_uses_event_digest(self, make_uploader) -> None:
        handler = RecordingHandler(
            lambda request: httpx.Response(200, json=already_certified_body())
        )
        uploader = make_uploader(handler)

        metadata = await uploader.upload_with_deployment(PDF_BYTES, 10, VALID_WALLET)

        assert metadata.transaction_hash == VALID_TX_DIGEST
        assert metadata.size == len(PDF_BYTES)
        assert metadata.deployment_cost == estimate_cost(len(PDF_BYTES), 10)

    @pytest.mark.asyncio
    async def test_already_certified_event_seq_reference(self, make_uploader) -> None:
        handler = RecordingHandler(
            lambda request: httpx.Response(
                200, json=already_certified_body(tx_digest=None, event_seq=17)
            )
        )
        uploader = make_uploader(handler)

        metadata = await uploader.upload_with_deployment(PDF_BYTES, 10, VALID_WALLET)

        assert metadata.transaction_hash == "eventSeq:17"

    @pytest.mark.asyncio
    async def test_already_certified_without_reference(self, make_uploader) -> None:
        handler = RecordingHandler(
            lambda request: httpx.Response(200, json=already_certified_body(tx_digest=None))
        )
        uploader = make_uploader(handler)

        with pytest.raises(DeploymentFailedError):
            await uploader.upload_with_deployment(PDF_BYTES, 10, VALID_WALLET)

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, make_uploader) -> None:
        handler = RecordingHandler(lambda request: httpx.Response(200))
        uploader = make_uploader(handler)

        with pytest.raises(ValueError):
            await uploader.upload_with_deployment(PDF_BYTES, 0, VALID_WALLET)
        with pytest.raises(ValueError):
            await uploader.upload_with_deployment(PDF_BYTES, 10, "")

        assert handler.requests == []


class TestDeploymentMetadata:
    def test_unknown_outcome_rejected(self) -> None:
        with pytest.raises(UnexpectedResponseError):
            BlobUploader._deployment_metadata(
                object(),
                PDF_BYTES,
                "application/pdf",
                10,
                Decimal("0.011"),
                PUBLISHERS[0],
                200,
            )
