"""
Bounded pool of slots guarding access to a shared store handle.
"""

import asyncio
import itertools
import time
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Deque, Dict, Optional, Set, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import PoolClosedError, PoolTimeoutError

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_MAX_SIZE = 10

_slot_ids = itertools.count(1)


@dataclass(frozen=True)
class PoolSlot:
    """One unit of capacity. Slots are fungible; ``slot_id`` only tracks membership."""
    handle: Any = field(compare=False, repr=False)
    slot_id: int = field(default_factory=lambda: next(_slot_ids))


class ResourcePool:
    """Caps concurrent users of ``handle`` at ``max_size``.

    Callers that find the pool full queue up and are served in arrival
    order: a release hands its capacity straight to the oldest waiter, so
    a newcomer can never overtake someone already queued.
    """

    def __init__(
        self,
        handle: Any,
        max_size: int = DEFAULT_MAX_SIZE,
        *,
        acquire_timeout: Optional[float] = None,
        name: str = "pricing",
        metrics: Optional["MetricsCollector"] = None,
    ):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.handle = handle
        self.max_size = max_size
        self.acquire_timeout = acquire_timeout
        self.name = name
        self.metrics = metrics
        self.logger = get_logger(f"pricing.pool.{name}")

        self._in_use: Set[PoolSlot] = set()
        self._waiters: Deque[asyncio.Future] = deque()
        self._closed = False

    @property
    def in_use(self) -> int:
        return len(self._in_use)

    @property
    def waiting(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.done())

    @property
    def closed(self) -> bool:
        return self._closed

    def _allocate(self) -> PoolSlot:
        slot = PoolSlot(self.handle)
        self._in_use.add(slot)
        return slot

    def _has_live_waiters(self) -> bool:
        return any(not waiter.done() for waiter in self._waiters)

    def _update_gauges(self):
        if self.metrics:
            self.metrics.set_gauge("pricing_pool_slots_in_use", self.in_use, pool=self.name)
            self.metrics.set_gauge("pricing_pool_waiters", self.waiting, pool=self.name)

    async def acquire(self, timeout: Optional[float] = None) -> PoolSlot:
        """Take a slot, waiting in line if the pool is full.

        ``timeout`` overrides the pool's ``acquire_timeout``; when both are
        None the caller waits until a slot frees up or the task is cancelled.
        """
        if self._closed:
            raise PoolClosedError(self.name)

        # Check and insert with no await in between.
        if len(self._in_use) < self.max_size and not self._has_live_waiters():
            slot = self._allocate()
            self._update_gauges()
            return slot

        timeout = self.acquire_timeout if timeout is None else timeout
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        self._update_gauges()
        self.logger.debug("Pool saturated, queueing", in_use=self.in_use, waiting=self.waiting)

        start = time.perf_counter()
        try:
            if timeout is None:
                slot = await waiter
            else:
                slot = await asyncio.wait_for(waiter, timeout)
        except asyncio.TimeoutError:
            self._abandon(waiter)
            if self.metrics:
                self.metrics.increment_counter("pricing_pool_acquire_timeouts_total", pool=self.name)
            self.logger.warning(
                "Timed out waiting for pool slot",
                timeout=timeout,
                in_use=self.in_use,
                waiting=self.waiting
            )
            raise PoolTimeoutError(self.name, timeout, details={"max_size": self.max_size})
        except BaseException:
            self._abandon(waiter)
            raise
        finally:
            self._update_gauges()

        if self.metrics:
            self.metrics.observe_histogram(
                "pricing_pool_acquire_wait_seconds",
                time.perf_counter() - start,
                pool=self.name
            )
        return slot

    def _abandon(self, waiter: asyncio.Future):
        """Forget a waiter that gave up; pass on a slot it was handed meanwhile."""
        try:
            self._waiters.remove(waiter)
        except ValueError:
            pass
        if waiter.done() and not waiter.cancelled() and waiter.exception() is None:
            self.release(waiter.result())

    def release(self, slot: PoolSlot) -> None:
        """Return ``slot`` to the pool. Releasing an untracked slot does nothing."""
        if slot not in self._in_use:
            self.logger.debug("Ignoring release of untracked slot", slot_id=slot.slot_id)
            return
        self._in_use.discard(slot)

        while self._waiters:
            waiter = self._waiters.popleft()
            if waiter.done():
                continue
            waiter.set_result(self._allocate())
            break

        self._update_gauges()

    @asynccontextmanager
    async def slot(self, timeout: Optional[float] = None) -> AsyncIterator[PoolSlot]:
        """Hold a slot for the duration of the block."""
        acquired = await self.acquire(timeout)
        try:
            yield acquired
        finally:
            self.release(acquired)

    def close(self) -> None:
        """Refuse new acquisitions and fail everyone still queued."""
        if self._closed:
            return
        self._closed = True
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_exception(PoolClosedError(self.name))
        self._update_gauges()
        self.logger.info("Pool closed", in_use=self.in_use)

    def get_stats(self) -> Dict[str, Any]:
        """Get current pool state."""
        return {
            "name": self.name,
            "max_size": self.max_size,
            "in_use": self.in_use,
            "available": self.max_size - self.in_use,
            "waiting": self.waiting,
            "acquire_timeout": self.acquire_timeout,
            "closed": self._closed,
        }
