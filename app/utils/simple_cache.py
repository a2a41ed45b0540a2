"""In-memory bounded cache with per-entry TTL and LRU eviction.

Backs the admission limiter's per-caller counters. Thread-safe, with an
injectable clock so expiry can be tested deterministically.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass
class CacheItem(Generic[V]):
    """Container for cached values with expiration metadata."""

    value: V
    expires_at: float


class SimpleTTLCache(Generic[V]):
    """Thread-safe, in-memory TTL cache with LRU eviction.

    ``get`` refreshes an entry's recency but not its expiry, ``peek`` refreshes
    neither, and only ``set`` restarts the time-to-live.

    Attributes:
        ttl_seconds: Time-to-live applied to every entry on write.
        max_entries: Maximum number of live items (None for unlimited).
    """

    def __init__(
        self,
        ttl_seconds: float = 3600,
        max_entries: int | None = 1024,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be >= 1")

        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._store: OrderedDict[str, CacheItem[V]] = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"SimpleTTLCache(ttl_seconds={self._ttl}, max_entries={self._max_entries}, "
            f"size={len(self._store)}, hits={self._hits}, misses={self._misses}, "
            f"evictions={self._evictions})"
        )

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for item in self._store.values() if not self._is_expired(item))

    def __contains__(self, key: object) -> bool:
        with self._lock:
            item = self._store.get(key)  # type: ignore[call-overload]
            return item is not None and not self._is_expired(item)

    def get(self, key: str) -> V | None:
        """Retrieve a cached value if it exists and is not expired.

        Args:
            key: Cache key.

        Returns:
            Cached value or None if not found/expired.
        """

        with self._lock:
            item = self._store.get(key)
            if item is None:
                self._misses += 1
                return None

            if self._is_expired(item):
                self._evict_single(key)
                self._misses += 1
                logger.debug("cache.expired", extra={"cache_size": len(self._store)})
                return None

            self._hits += 1
            self._store.move_to_end(key)
            return item.value

    def peek(self, key: str) -> V | None:
        """Read a live value without touching recency, expiry or counters.

        Args:
            key: Cache key.

        Returns:
            Cached value or None if not found/expired.
        """

        with self._lock:
            item = self._store.get(key)
            if item is None or self._is_expired(item):
                return None
            return item.value

    def set(self, key: str, value: V) -> None:
        """Store a value with a fresh TTL, evicting as needed."""

        with self._lock:
            self._evict_expired_locked()
            self._store[key] = CacheItem(value=value, expires_at=self._clock() + self._ttl)
            self._store.move_to_end(key)
            self._evict_if_over_capacity_locked()

    def clear(self) -> None:
        """Remove all cached entries and reset counters."""

        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def stats(self) -> dict[str, int | float | None]:
        """Return lightweight cache metrics without exposing keys or values."""

        with self._lock:
            return {
                "ttl_seconds": self._ttl,
                "max_entries": self._max_entries,
                "entries": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    def _evict_single(self, key: str) -> None:
        if self._store.pop(key, None) is not None:
            self._evictions += 1

    def _evict_expired_locked(self) -> None:
        expired_keys = [k for k, item in self._store.items() if self._is_expired(item)]
        for key in expired_keys:
            self._evict_single(key)

    def _evict_if_over_capacity_locked(self) -> None:
        if self._max_entries is None:
            return

        while len(self._store) > self._max_entries:
            # popitem(last=False) removes the least recently used entry
            self._store.popitem(last=False)
            self._evictions += 1
            logger.debug("cache.evicted_lru", extra={"max_entries": self._max_entries})

    def _is_expired(self, item: CacheItem[V]) -> bool:
        return self._clock() > item.expires_at
