"""
Status Probe - Walrus availability check

Sends a lightweight ``OPTIONS`` request to the primary publisher and
classifies the outcome. The result is advisory only: uploads never consult
it before running.
"""

from __future__ import annotations

import asyncio
import traceback
from typing import Callable, Optional

import httpx

from auditstore.constants import BLOBS_PATH, PROBE_INTERVAL_SECONDS
from auditstore.storage.endpoints import EndpointRegistry
from auditstore.storage.types import NetworkStatus, ProbeConfig, ProbeResult
from auditstore.utils.http import bounded_request
from auditstore.utils.logging import get_logger

_logger = get_logger(__name__)

ProbeCallback = Callable[[ProbeResult], None]


class StatusProbe:
    """
    Availability probe for the primary publisher.

    Example:
        ```python
        probe = StatusProbe(registry=EndpointRegistry.testnet())
        result = await probe.check_availability()
        print(result.status, result.message)

        # Background polling
        probe.start(on_result=lambda r: print(r.status))
        ...
        await probe.stop()
        ```
    """

    def __init__(
        self,
        config: Optional[ProbeConfig] = None,
        registry: Optional[EndpointRegistry] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or ProbeConfig()
        self._registry = registry or EndpointRegistry.testnet()
        self._transport = transport
        self._last_result: Optional[ProbeResult] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._poll_task: Optional[asyncio.Task[None]] = None

    @property
    def last_result(self) -> Optional[ProbeResult]:
        """Most recent probe result, or None before the first check."""
        return self._last_result

    @property
    def is_running(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def check_availability(self) -> ProbeResult:
        """
        Probe the primary publisher once.

        A 2xx or 405 response counts as available: the endpoint answered,
        even if it does not implement ``OPTIONS``. A timeout maps to
        ``TIMEOUT``; any other response or connection failure maps to
        ``UNAVAILABLE``. Never raises.

        Returns:
            ProbeResult
        """
        endpoint = self._registry.primary_write_endpoint()
        url = f"{endpoint}{BLOBS_PATH}"
        http_status: Optional[int] = None

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout_ms / 1000),
                transport=self._transport,
            ) as client:
                response = await bounded_request(
                    client.options(url), self._config.timeout_ms
                )
        except httpx.TimeoutException:
            status = NetworkStatus.TIMEOUT
        except httpx.TransportError as e:
            _logger.debug(
                "Availability probe failed",
                extra={"endpoint": endpoint, "error": type(e).__name__},
            )
            status = NetworkStatus.UNAVAILABLE
        else:
            http_status = response.status_code
            if response.is_success or response.status_code == 405:
                status = NetworkStatus.AVAILABLE
            else:
                status = NetworkStatus.UNAVAILABLE

        result = ProbeResult(status=status, endpoint=endpoint, http_status=http_status)
        self._last_result = result
        _logger.info(
            "Walrus availability checked",
            extra={"endpoint": endpoint, "status": status.value, "http_status": http_status},
        )
        return result

    async def poll(
        self,
        on_result: Optional[ProbeCallback] = None,
        interval_s: float = PROBE_INTERVAL_SECONDS,
        stop_event: Optional[asyncio.Event] = None,
    ) -> None:
        """
        Probe on a fixed interval until ``stop_event`` is set.

        The first check runs immediately.

        Args:
            on_result: Called with every ProbeResult
            interval_s: Seconds between checks
            stop_event: Event that ends the loop (runs forever if None)
        """
        stop_event = stop_event or asyncio.Event()
        while not stop_event.is_set():
            result = await self.check_availability()
            if on_result is not None:
                try:
                    on_result(result)
                except Exception as e:
                    _logger.error(
                        "Error in probe callback",
                        extra={"error": str(e), "traceback": traceback.format_exc()},
                    )

            # Wait for interval or stop signal
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval_s)
                break
            except asyncio.TimeoutError:
                continue

    def start(
        self,
        on_result: Optional[ProbeCallback] = None,
        interval_s: float = PROBE_INTERVAL_SECONDS,
    ) -> None:
        """Run ``poll`` as a background task on the current event loop."""
        if self.is_running:
            return
        self._stop_event = asyncio.Event()
        self._poll_task = asyncio.create_task(
            self.poll(on_result, interval_s, self._stop_event)
        )

    async def stop(self) -> None:
        """Stop background polling and wait for the loop to exit."""
        if self._stop_event is not None:
            self._stop_event.set()
        if self._poll_task is not None:
            try:
                await asyncio.wait_for(self._poll_task, timeout=self._config.timeout_ms / 1000 + 1)
            except asyncio.TimeoutError:
                self._poll_task.cancel()
                try:
                    await self._poll_task
                except asyncio.CancelledError:
                    pass
        self._poll_task = None
        self._stop_event = None
