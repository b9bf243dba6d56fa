"""
Tests for StatusProbe.
"""

import asyncio
from typing import List

import httpx
import pytest

from auditstore.storage import NetworkStatus, ProbeResult

from .conftest import PUBLISHERS, RecordingHandler, sequence, trickling_response


class TestCheckAvailability:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [200, 204, 405])
    async def test_available(self, make_probe, status_code: int) -> None:
        handler = RecordingHandler(lambda request: httpx.Response(status_code))
        probe = make_probe(handler)

        result = await probe.check_availability()

        assert result.status == NetworkStatus.AVAILABLE
        assert result.is_available is True
        assert result.http_status == status_code
        assert result.endpoint == PUBLISHERS[0]

    @pytest.mark.asyncio
    async def test_request_shape(self, make_probe) -> None:
        handler = RecordingHandler(lambda request: httpx.Response(200))
        probe = make_probe(handler)

        await probe.check_availability()

        assert len(handler.requests) == 1
        assert handler.requests[0].method == "OPTIONS"
        assert str(handler.requests[0].url) == f"{PUBLISHERS[0]}/v1/blobs"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [500, 503, 404])
    async def test_error_status_unavailable(self, make_probe, status_code: int) -> None:
        probe = make_probe(RecordingHandler(lambda request: httpx.Response(status_code)))

        result = await probe.check_availability()

        assert result.status == NetworkStatus.UNAVAILABLE

    @pytest.mark.asyncio
    async def test_connection_error_unavailable(self, make_probe) -> None:
        probe = make_probe(RecordingHandler(sequence(httpx.ConnectError)))

        result = await probe.check_availability()

        assert result.status == NetworkStatus.UNAVAILABLE
        assert result.http_status is None

    @pytest.mark.asyncio
    async def test_timeout(self, make_probe) -> None:
        probe = make_probe(RecordingHandler(sequence(httpx.ConnectTimeout)))

        result = await probe.check_availability()

        assert result.status == NetworkStatus.TIMEOUT
        assert "high load" in result.message

    @pytest.mark.asyncio
    async def test_stalled_response_is_timeout(self, make_probe) -> None:
        probe = make_probe(
            RecordingHandler(lambda request: trickling_response()), timeout_ms=100
        )

        result = await probe.check_availability()

        assert result.status == NetworkStatus.TIMEOUT
        assert result.http_status is None

    @pytest.mark.asyncio
    async def test_last_result(self, make_probe) -> None:
        probe = make_probe(RecordingHandler(lambda request: httpx.Response(200)))
        assert probe.last_result is None

        result = await probe.check_availability()

        assert probe.last_result == result


class TestPolling:
    @pytest.mark.asyncio
    async def test_poll_until_stopped(self, make_probe) -> None:
        handler = RecordingHandler(lambda request: httpx.Response(200))
        probe = make_probe(handler)
        stop = asyncio.Event()
        results: List[ProbeResult] = []

        def on_result(result: ProbeResult) -> None:
            results.append(result)
            if len(results) == 3:
                stop.set()

        await asyncio.wait_for(
            probe.poll(on_result, interval_s=0.01, stop_event=stop),
            timeout=5,
        )

        assert len(results) == 3
        assert len(handler.requests) == 3

    @pytest.mark.asyncio
    async def test_callback_errors_do_not_stop_polling(self, make_probe) -> None:
        probe = make_probe(RecordingHandler(lambda request: httpx.Response(200)))
        stop = asyncio.Event()
        calls = 0

        def on_result(result: ProbeResult) -> None:
            nonlocal calls
            calls += 1
            if calls == 2:
                stop.set()
            raise RuntimeError("callback failed")

        await asyncio.wait_for(
            probe.poll(on_result, interval_s=0.01, stop_event=stop),
            timeout=5,
        )

        assert calls == 2

    @pytest.mark.asyncio
    async def test_start_and_stop(self, make_probe) -> None:
        probe = make_probe(RecordingHandler(lambda request: httpx.Response(405)))
        seen = asyncio.Event()

        probe.start(on_result=lambda result: seen.set(), interval_s=60)
        assert probe.is_running is True

        await asyncio.wait_for(seen.wait(), timeout=5)
        await probe.stop()

        assert probe.is_running is False
        assert probe.last_result is not None
        assert probe.last_result.status == NetworkStatus.AVAILABLE
