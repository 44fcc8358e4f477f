"""
Bounded exponential-backoff retry for remote calls.

Every exception is treated the same way: a 400 for a bad request is retried
just like a dropped connection. Budget is small enough that this only costs
a few seconds on a permanent error.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRIES = 3
DEFAULT_DELAY   = 1.0     # seconds; doubled after each failure → 1s, 2s, 4s


async def call_with_retry(
    fn: Callable[[], Awaitable[T]],
    retries: int = DEFAULT_RETRIES,
    delay: float = DEFAULT_DELAY,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
) -> T:
    """
    Await fn() up to retries + 1 times.
    The last failure is re-raised exactly as fn raised it.
    """
    sleep = sleep or asyncio.sleep
    remaining = retries
    attempt = 0

    while True:
        attempt += 1
        try:
            return await fn()
        except Exception as exc:
            if remaining <= 0:
                logger.error("Call failed after %d attempt(s): %s", attempt, exc)
                raise
            logger.warning(
                "API call failed, retrying in %.1fs (%d attempts left): %s",
                delay, remaining, exc,
            )
            await sleep(delay)
            delay *= 2
            remaining -= 1
