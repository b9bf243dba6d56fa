"""
Retry Utilities for auditstore.

Provides exponential backoff for transient failures. The deployment upload
path uses it without jitter so the wait between attempt k and k+1 is
exactly ``base_delay_ms * 2^k``.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from typing import (
    Awaitable,
    Callable,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

T = TypeVar("T")

RetryCallback = Callable[[int, Exception, float], None]
"""Called as ``on_retry(attempt, error, delay_seconds)`` before each wait."""


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior.

    Example:
        ```python
        config = RetryConfig(
            max_attempts=4,
            base_delay_ms=2000,
            jitter=False,
            retryable_errors=(PublisherBusyError, httpx.TransportError),
        )
        ```
    """

    max_attempts: int = 3
    """Maximum number of attempts, including the first one."""

    base_delay_ms: int = 1000
    """Base delay in milliseconds for exponential backoff."""

    max_delay_ms: int = 30000
    """Maximum delay in milliseconds (cap for exponential growth)."""

    jitter: bool = True
    """Whether to add random jitter to delays."""

    exponential_base: float = 2.0
    """Base for exponential backoff calculation."""

    retryable_errors: Tuple[Type[Exception], ...] = field(
        default_factory=lambda: (Exception,)
    )
    """Tuple of exception types that should trigger a retry."""


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """
    Calculate delay with exponential backoff and optional jitter.

    Args:
        attempt: Zero-based attempt number (0 = wait after the first attempt)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    delay_ms = config.base_delay_ms * (config.exponential_base ** attempt)
    delay_ms = min(delay_ms, config.max_delay_ms)

    if config.jitter:
        # Full jitter: random value between 0 and calculated delay
        delay_ms = random.uniform(0, delay_ms)

    return delay_ms / 1000


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    on_retry: Optional[RetryCallback] = None,
) -> T:
    """
    Execute async function with retry logic.

    Args:
        fn: Async function to execute (no arguments)
        config: Retry configuration (uses defaults if None)
        on_retry: Optional hook invoked before each backoff wait

    Returns:
        Result of the function

    Raises:
        Last exception if all retries fail; non-retryable errors immediately

    Example:
        ```python
        async def store():
            async with httpx.AsyncClient() as client:
                return await client.put(url, content=payload)

        response = await retry_async(
            store,
            RetryConfig(max_attempts=4, retryable_errors=(httpx.TransportError,))
        )
        ```
    """
    config = config or RetryConfig()
    last_error: Optional[Exception] = None

    for attempt in range(config.max_attempts):
        try:
            return await fn()
        except config.retryable_errors as e:
            last_error = e

            # Don't delay after last attempt
            if attempt < config.max_attempts - 1:
                delay = calculate_delay(attempt, config)
                if on_retry is not None:
                    on_retry(attempt, e, delay)
                await asyncio.sleep(delay)

    if last_error is not None:
        raise last_error

    raise RuntimeError("Retry exhausted without error")
