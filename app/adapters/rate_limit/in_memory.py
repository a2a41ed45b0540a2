"""In-memory per-caller rate limiter backed by a bounded LRU/TTL cache.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: the read-increment-compare sequence runs under one lock.
- Fixed window per caller: a counter's lifetime starts on the caller's first
  request and is not extended by later ones. Once it expires the caller is
  indistinguishable from a new one.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.utils.simple_cache import SimpleTTLCache


@dataclass
class _TokenCount:
    count: int
    started_at: float


class InMemoryLRUWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests per caller token.

    At most ``capacity`` tokens are tracked at once; when a new token arrives
    at capacity, the least recently used one is forgotten and its next
    request starts a fresh window.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        capacity: int = 500,
        window_ms: int = 60000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the limiter.

        Args:
            capacity: Maximum number of distinct tokens tracked simultaneously.
            window_ms: Lifetime of a token's counter in milliseconds.
            clock: Time source returning seconds.

        Raises:
            ValueError: If capacity or window_ms are invalid.
        """
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")

        self._window_seconds = window_ms / 1000
        self._clock = clock
        self._lock = threading.Lock()
        self._counts: SimpleTTLCache[_TokenCount] = SimpleTTLCache(
            ttl_seconds=self._window_seconds,
            max_entries=capacity,
            clock=clock,
        )

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def tracked_tokens(self) -> int:
        """Number of tokens currently holding a live counter."""
        return len(self._counts)

    def count_for(self, token: str) -> int:
        """Current request count for ``token`` (0 when untracked).

        Read-only: does not change which token is evicted next.
        """
        with self._lock:
            state = self._counts.peek(token)
            return state.count if state else 0

    def check(self, token: str, limit: int) -> RateLimitResult:
        """Count one request for ``token`` and decide whether it is admitted.

        The counter is incremented even when the request is rejected.

        Raises:
            ValueError: If token is empty or limit is not positive.
        """
        if not token:
            raise ValueError("token must be a non-empty string")
        if limit < 1:
            raise ValueError("limit must be >= 1")

        with self._lock:
            state = self._counts.get(token)
            if state is None:
                # Only the first write sets the TTL; increments mutate in place.
                state = _TokenCount(count=0, started_at=self._clock())
                self._counts.set(token, state)
            state.count += 1
            count = state.count
            started_at = state.started_at

        if count > limit:
            retry_after = self._window_seconds - (self._clock() - started_at)
            return RateLimitResult(
                allowed=False,
                limit=limit,
                remaining=0,
                retry_after_seconds=max(0, int(math.ceil(retry_after))),
            )

        return RateLimitResult(allowed=True, limit=limit, remaining=max(0, limit - count))
