"""Process-local result store for development and tests.

Results are lost on restart and are not shared between workers.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.result_store.base import AbstractResultStore


@dataclass
class _StoredResult:
    value: str
    expires_at: float | None = None


class InMemoryResultStore(AbstractResultStore):
    """Dictionary-backed store with optional per-entry expiry."""

    def __init__(
        self,
        *,
        ttl_seconds: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._data: dict[str, _StoredResult] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> str | None:
        async with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            if entry.expires_at is not None and self._clock() > entry.expires_at:
                del self._data[key]
                return None
            return entry.value

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            expires_at = self._clock() + self._ttl if self._ttl > 0 else None
            self._data[key] = _StoredResult(value=value, expires_at=expires_at)

    async def ping(self) -> bool:
        return True
