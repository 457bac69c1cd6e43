# src/llm/rate_limiter.py — v1
"""Process-wide ceiling on concurrent outbound AI calls.

A single limiter is shared by every adapter. Callers beyond the ceiling wait
in arrival order; there is no timeout here, the request-level deadline bounds
the wait in practice.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")


class ConcurrencyLimiter:
    """Run coroutines with at most ``max_concurrency`` in flight."""

    def __init__(self, max_concurrency: int = 10) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._max_concurrency = max_concurrency
        # asyncio.Semaphore wakes waiters in FIFO order
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._in_flight = 0
        self._waiting = 0

    async def schedule(
        self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """Await ``fn(*args, **kwargs)`` once a slot is free."""
        self._waiting += 1
        try:
            await self._semaphore.acquire()
        finally:
            self._waiting -= 1

        self._in_flight += 1
        try:
            return await fn(*args, **kwargs)
        finally:
            self._in_flight -= 1
            self._semaphore.release()

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    @property
    def in_flight(self) -> int:
        """Tasks currently holding a slot."""
        return self._in_flight

    @property
    def waiting(self) -> int:
        """Tasks queued for a slot."""
        return self._waiting
