"""
In-memory TTL cache for the Creator Analytics engine.

The engine uses three independent instances, all constructed by the caller
and injected (see ``data_sources._clients``):

1. **detail cache** – ``AssetDetail`` per coin address.
2. **result cache** – whole ``AggregatedResult`` per request key.
3. **wallet cache** – discovered secondary wallet per identity.

Entries are fresh while ``now - written_at < ttl``.  Growth is bounded by
``max_entries``: expired entries are purged first, then the least recently
used ones are evicted.  Not designed for multi-process deployments.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total


class TTLCache:
    """TTL cache backed by an ``OrderedDict`` kept in LRU order.

    Parameters
    ----------
    default_ttl:
        Seconds an entry stays fresh unless ``set`` overrides it.
    max_entries:
        Upper bound on stored entries.
    name:
        Label used in logs and ``stats()``.
    clock:
        Monotonic time source; tests pass a fake to step over the TTL.
    """

    def __init__(
        self,
        default_ttl: int = 300,
        max_entries: int = 10_000,
        *,
        name: str = "cache",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store: OrderedDict[str, tuple[float, Any]] = OrderedDict()
        self._default_ttl = default_ttl
        self._max_entries = max_entries
        self._clock = clock
        self.name = name
        self.stats_counters = CacheStats()

    def get(self, key: str, default: Any = None) -> Any:
        """Return the fresh value for *key*, or *default* when missing / stale."""
        entry = self._store.get(key, _MISSING)
        if entry is _MISSING:
            self.stats_counters.misses += 1
            return default
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._store[key]
            self.stats_counters.misses += 1
            return default
        self._store.move_to_end(key)
        self.stats_counters.hits += 1
        return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store *value* under *key*, overwriting any previous entry."""
        actual_ttl = ttl if ttl is not None else self._default_ttl
        self._store[key] = (self._clock() + actual_ttl, value)
        self._store.move_to_end(key)
        if len(self._store) > self._max_entries:
            self._evict()

    def invalidate(self, key: str) -> None:
        """Remove a specific key."""
        self._store.pop(key, None)

    def clear(self) -> None:
        """Drop all cached entries."""
        self._store.clear()

    def purge_expired(self) -> int:
        """Delete stale entries. Returns the number removed."""
        now = self._clock()
        expired = [k for k, (exp, _) in self._store.items() if now >= exp]
        for k in expired:
            del self._store[k]
        return len(expired)

    def stats(self) -> dict[str, Any]:
        """Return a serialisable summary for the health endpoint."""
        return {
            "name": self.name,
            "entries": len(self._store),
            "max_entries": self._max_entries,
            "ttl_seconds": self._default_ttl,
            "hits": self.stats_counters.hits,
            "misses": self.stats_counters.misses,
            "evictions": self.stats_counters.evictions,
            "hit_rate": round(self.stats_counters.hit_rate, 3),
        }

    def _evict(self) -> None:
        removed = self.purge_expired()
        while len(self._store) > self._max_entries:
            self._store.popitem(last=False)
            removed += 1
        if removed:
            self.stats_counters.evictions += removed
            logger.debug("%s: evicted %d entries", self.name, removed)

    def __contains__(self, key: str) -> bool:
        entry = self._store.get(key)
        return entry is not None and self._clock() < entry[0]

    def __len__(self) -> int:
        self.purge_expired()
        return len(self._store)
