"""Tests for the bounded worker pool."""

from __future__ import annotations

import asyncio

import pytest

from reclaim.core.pool import WorkerPool


class TestWorkerPool:
    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            WorkerPool(0)

    def test_caps_concurrent_tasks(self):
        pool = WorkerPool(2)
        running = 0
        observed: list[int] = []

        async def task():
            nonlocal running
            async with pool:
                running += 1
                observed.append(running)
                await asyncio.sleep(0.01)
                running -= 1

        async def main():
            await asyncio.gather(*(task() for _ in range(5)))

        asyncio.run(main())
        assert max(observed) == 2
        assert pool.peak == 2
        assert pool.active == 0

    def test_run_returns_value(self):
        pool = WorkerPool(1)

        async def double(x):
            return x * 2

        assert asyncio.run(pool.run(double, 21)) == 42

    def test_slot_released_on_error(self):
        pool = WorkerPool(1)

        async def boom():
            raise RuntimeError("boom")

        async def ok():
            return "ok"

        async def main():
            with pytest.raises(RuntimeError):
                await pool.run(boom)
            return await asyncio.wait_for(pool.run(ok), timeout=1)

        assert asyncio.run(main()) == "ok"
        assert pool.active == 0

    def test_usable_from_several_event_loops(self):
        pool = WorkerPool(1)

        async def one():
            async with pool:
                return 1

        assert asyncio.run(one()) == 1
        assert asyncio.run(one()) == 1
