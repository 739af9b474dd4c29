"""
Passive TTL cache keyed by supplier and optional pricing table id.
"""

import copy
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TYPE_CHECKING

from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_TTL_SECONDS = 300.0


@dataclass(frozen=True)
class CacheKey:
    """Collection key when ``record_id`` is None, item key otherwise."""
    owner_id: str
    record_id: Optional[str] = None

    @classmethod
    def collection(cls, owner_id: str) -> "CacheKey":
        return cls(owner_id)

    @classmethod
    def item(cls, owner_id: str, record_id: str) -> "CacheKey":
        return cls(owner_id, record_id)

    def render(self, prefix: str = "pricing") -> str:
        if self.record_id is None:
            return f"{prefix}:{self.owner_id}"
        return f"{prefix}:{self.owner_id}:{self.record_id}"


@dataclass
class CacheEntry:
    """Cached payload and the clock reading it was stored at."""
    data: Any
    stored_at: float

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.stored_at < ttl


class TTLCache:
    """In-process cache with lazy expiry.

    Entries are checked against the TTL when read; there is no sweeper.
    A stale entry is skipped, not removed: it stays until the next
    successful fetch overwrites it, a write invalidates it, or
    ``purge_expired`` is called.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        name: str = "pricing",
        clock: Callable[[], float] = time.monotonic,
        metrics: Optional["MetricsCollector"] = None,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self.name = name
        self.metrics = metrics
        self.logger = get_logger(f"pricing.cache.{name}")
        self._clock = clock
        self._entries: Dict[CacheKey, CacheEntry] = {}

        self._hits = 0
        self._misses = 0
        self._expired = 0
        self._invalidations = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.is_fresh(self._clock(), self.ttl_seconds)

    def _record(self, result: str):
        if self.metrics:
            self.metrics.increment_counter("pricing_cache_requests_total", cache=self.name, result=result)

    def get(self, key: CacheKey) -> Optional[Any]:
        """Return a copy of the fresh payload for ``key``, or None."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            self._record("miss")
            self.logger.debug("Cache miss", key=key.render())
            return None

        if not entry.is_fresh(self._clock(), self.ttl_seconds):
            self._expired += 1
            self._record("expired")
            self.logger.debug("Cache entry expired", key=key.render())
            return None

        self._hits += 1
        self._record("hit")
        self.logger.debug("Cache hit", key=key.render())
        return copy.deepcopy(entry.data)

    def set(self, key: CacheKey, data: Any) -> None:
        """Store ``data`` under ``key``, replacing any previous entry."""
        if data is None:
            raise ValueError("Negative results are not cached")
        self._entries[key] = CacheEntry(data=copy.deepcopy(data), stored_at=self._clock())

    def delete(self, key: CacheKey) -> bool:
        removed = self._entries.pop(key, None) is not None
        if removed:
            self._count_invalidations(1)
        return removed

    def invalidate_owner(self, owner_id: str) -> int:
        """Drop the collection key and every item key for ``owner_id``."""
        keys = [key for key in self._entries if key.owner_id == owner_id]
        for key in keys:
            del self._entries[key]
        self._count_invalidations(len(keys))
        if keys:
            self.logger.info("Invalidated owner cache entries", owner_id=owner_id, count=len(keys))
        return len(keys)

    def purge_expired(self) -> int:
        """Remove stale entries; returns how many were dropped."""
        now = self._clock()
        stale = [key for key, entry in self._entries.items() if not entry.is_fresh(now, self.ttl_seconds)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        self._count_invalidations(count)
        return count

    def _count_invalidations(self, count: int):
        if not count:
            return
        self._invalidations += count
        if self.metrics:
            self.metrics.increment_counter("pricing_cache_invalidations_total", count, cache=self.name)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        lookups = self._hits + self._misses + self._expired
        return {
            "name": self.name,
            "entries": len(self._entries),
            "ttl_seconds": self.ttl_seconds,
            "hits": self._hits,
            "misses": self._misses,
            "expired": self._expired,
            "invalidations": self._invalidations,
            "hit_rate": self._hits / lookups if lookups else 0.0,
        }
