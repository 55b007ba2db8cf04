"""Bounded worker pool used for admission control."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")


class WorkerPool:
    """Limits how many coroutines run inside the pool at the same time.

    A task is admitted only when a slot is free and releases it on exit::

        pool = WorkerPool(4)
        async with pool:
            await do_io()

    The semaphore is created for the running event loop on first use, so
    a pool can outlive a single ``asyncio.run`` call.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"Pool capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.active = 0
        self.peak = 0
        self._semaphore: asyncio.Semaphore | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    def _get_semaphore(self) -> asyncio.Semaphore:
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._loop is not loop:
            self._semaphore = asyncio.Semaphore(self.capacity)
            self._loop = loop
            self.active = 0
        return self._semaphore

    async def __aenter__(self) -> WorkerPool:
        await self._get_semaphore().acquire()
        self.active += 1
        self.peak = max(self.peak, self.active)
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.active -= 1
        self._get_semaphore().release()

    async def run(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Await ``func(*args, **kwargs)`` inside a pool slot."""
        async with self:
            return await func(*args, **kwargs)
