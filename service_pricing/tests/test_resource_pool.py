"""
Unit tests for the pricing ResourcePool.
"""

import asyncio
import pytest
from prometheus_client import CollectorRegistry

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_pricing.app.pool.resource_pool import PoolSlot, ResourcePool
from shared.errors import PoolClosedError, PoolTimeoutError
from shared.metrics import MetricsCollector


class TestResourcePool:
    """Test cases for ResourcePool."""

    @pytest.fixture
    def handle(self):
        return object()

    @pytest.fixture
    def pool(self, handle):
        return ResourcePool(handle, max_size=2)

    @pytest.mark.asyncio
    async def test_acquire_within_capacity(self, pool, handle):
        first = await pool.acquire()
        second = await pool.acquire()

        assert first.handle is handle
        assert first != second
        assert pool.in_use == 2

    @pytest.mark.asyncio
    async def test_release_frees_capacity(self, pool):
        slot = await pool.acquire()
        pool.release(slot)

        assert pool.in_use == 0

    @pytest.mark.asyncio
    async def test_release_is_idempotent(self, pool, handle):
        slot = await pool.acquire()
        pool.release(slot)
        pool.release(slot)
        pool.release(PoolSlot(handle))

        assert pool.in_use == 0

    @pytest.mark.asyncio
    async def test_waiter_resumes_after_release(self, pool):
        held = [await pool.acquire(), await pool.acquire()]

        waiter = asyncio.create_task(pool.acquire())
        await asyncio.sleep(0)
        assert not waiter.done()
        assert pool.waiting == 1

        pool.release(held[0])
        slot = await asyncio.wait_for(waiter, 1)

        assert isinstance(slot, PoolSlot)
        assert pool.in_use == 2
        assert pool.waiting == 0

    @pytest.mark.asyncio
    async def test_waiters_served_in_arrival_order(self, pool):
        held = [await pool.acquire(), await pool.acquire()]
        order = []

        async def worker(label):
            slot = await pool.acquire()
            order.append(label)
            return slot

        tasks = [asyncio.create_task(worker(label)) for label in ("a", "b", "c")]
        await asyncio.sleep(0)

        pool.release(held[0])
        first = await tasks[0]
        pool.release(held[1])
        await tasks[1]
        pool.release(first)
        await tasks[2]

        assert order == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_newcomer_does_not_overtake_queue(self, pool):
        held = [await pool.acquire(), await pool.acquire()]
        queued = asyncio.create_task(pool.acquire())
        await asyncio.sleep(0)

        pool.release(held[0])
        newcomer = asyncio.create_task(pool.acquire())
        await asyncio.sleep(0)

        assert queued.done()
        assert not newcomer.done()

        pool.release(held[1])
        await asyncio.wait_for(newcomer, 1)

    @pytest.mark.asyncio
    async def test_acquire_timeout(self, handle):
        pool = ResourcePool(handle, max_size=1, acquire_timeout=0.05)
        await pool.acquire()

        with pytest.raises(PoolTimeoutError) as exc_info:
            await pool.acquire()

        assert exc_info.value.code == "POOL_TIMEOUT"
        assert pool.waiting == 0
        assert pool.in_use == 1

    @pytest.mark.asyncio
    async def test_explicit_timeout_overrides_default(self, handle):
        pool = ResourcePool(handle, max_size=1, acquire_timeout=60)
        await pool.acquire()

        with pytest.raises(PoolTimeoutError):
            await pool.acquire(timeout=0.01)

    @pytest.mark.asyncio
    async def test_cancelled_waiter_is_removed(self, pool):
        held = [await pool.acquire(), await pool.acquire()]
        waiter = asyncio.create_task(pool.acquire())
        await asyncio.sleep(0)

        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        assert pool.waiting == 0
        pool.release(held[0])
        assert pool.in_use == 1

    @pytest.mark.asyncio
    async def test_slot_handed_to_cancelled_waiter_is_passed_on(self, pool):
        held = [await pool.acquire(), await pool.acquire()]
        first = asyncio.create_task(pool.acquire())
        second = asyncio.create_task(pool.acquire())
        await asyncio.sleep(0)

        # Hand a slot to ``first`` and cancel it before it gets to run.
        pool.release(held[0])
        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        slot = await asyncio.wait_for(second, 1)
        assert slot in pool._in_use
        assert pool.in_use == 2

    @pytest.mark.asyncio
    async def test_slot_context_manager_releases_on_error(self, pool):
        with pytest.raises(RuntimeError):
            async with pool.slot():
                assert pool.in_use == 1
                raise RuntimeError("boom")

        assert pool.in_use == 0

    @pytest.mark.asyncio
    async def test_capacity_never_exceeded(self, handle):
        pool = ResourcePool(handle, max_size=3)
        peak = 0

        async def worker():
            nonlocal peak
            async with pool.slot():
                peak = max(peak, pool.in_use)
                await asyncio.sleep(0.01)

        await asyncio.gather(*(worker() for _ in range(12)))

        assert peak == 3
        assert pool.in_use == 0

    @pytest.mark.asyncio
    async def test_close_fails_waiters_and_new_acquires(self, pool):
        held = [await pool.acquire(), await pool.acquire()]
        waiter = asyncio.create_task(pool.acquire())
        await asyncio.sleep(0)

        pool.close()

        with pytest.raises(PoolClosedError):
            await waiter
        with pytest.raises(PoolClosedError):
            await pool.acquire()

        pool.release(held[0])
        assert pool.in_use == 1

    def test_invalid_size(self, handle):
        with pytest.raises(ValueError):
            ResourcePool(handle, max_size=0)

    @pytest.mark.asyncio
    async def test_stats_and_metrics(self, handle):
        metrics = MetricsCollector("pricing", registry=CollectorRegistry())
        pool = ResourcePool(handle, max_size=1, acquire_timeout=0.01, metrics=metrics)
        await pool.acquire()

        with pytest.raises(PoolTimeoutError):
            await pool.acquire()

        stats = pool.get_stats()
        assert stats["in_use"] == 1
        assert stats["available"] == 0
        assert stats["waiting"] == 0
        assert metrics.get_sample_value("pricing_pool_slots_in_use", pool="pricing") == 1
        assert metrics.get_sample_value("pricing_pool_acquire_timeouts_total", pool="pricing") == 1
