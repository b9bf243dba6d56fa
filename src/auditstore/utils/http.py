"""
HTTP helpers shared by the Walrus and Sui clients.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

import httpx

T = TypeVar("T")


async def bounded_request(request: Awaitable[T], timeout_ms: int) -> T:
    """
    Await an HTTP call with a cap on its total duration.

    ``httpx.Timeout`` limits each phase (connect, read, write, pool) on its
    own, so a body that arrives a few bytes at a time never trips it.
    Expiry here is raised as ``httpx.ReadTimeout`` and callers handle both
    in one branch.

    Args:
        request: Pending client call, e.g. ``client.get(url)``
        timeout_ms: Limit for the whole call in milliseconds

    Returns:
        Result of the call

    Raises:
        httpx.ReadTimeout: If the call did not complete in time
    """
    try:
        return await asyncio.wait_for(request, timeout=timeout_ms / 1000)
    except asyncio.TimeoutError as e:
        raise httpx.ReadTimeout(
            f"No complete response within {timeout_ms} ms"
        ) from e
