from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class ConcurrencyLimiter:
    """Counting admission gate for in-flight jobs.

    Waiters are admitted in FIFO order by the underlying ``asyncio.Semaphore``,
    which is also the only synchronization point for the held-slot counter.
    Must be created and used from a single event loop.
    """

    def __init__(self, max_concurrency: int) -> None:
        if isinstance(max_concurrency, bool) or not isinstance(max_concurrency, int):
            raise TypeError("max_concurrency must be an integer")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.max_concurrency = max_concurrency
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._held = 0
        self._peak = 0
        self._acquire_count = 0

    async def acquire(self) -> None:
        await self._semaphore.acquire()
        self._held += 1
        self._acquire_count += 1
        self._peak = max(self._peak, self._held)

    def release(self) -> None:
        if self._held <= 0:
            raise RuntimeError("release() called without a held slot")
        self._held -= 1
        self._semaphore.release()

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        await self.acquire()
        try:
            yield
        finally:
            self.release()

    @property
    def held(self) -> int:
        return self._held

    @property
    def peak(self) -> int:
        return self._peak

    @property
    def acquire_count(self) -> int:
        return self._acquire_count
