"""Redis-backed durable result store."""

from __future__ import annotations

import logging
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from app.adapters.result_store.base import AbstractResultStore
from app.core.errors import StoreAppError

logger = logging.getLogger(__name__)


class RedisResultStore(AbstractResultStore):
    """Stores results as UTF-8 strings in Redis.

    Example:
        >>> store = RedisResultStore("redis://localhost:6379/0", ttl_seconds=3600)
        >>> await store.set("job:abc", '{"data": []}')
    """

    def __init__(
        self,
        redis_url: str | None = None,
        *,
        ttl_seconds: int = 0,
        client: Any | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            redis_url: Redis connection URL (e.g., "redis://localhost:6379/0").
            ttl_seconds: Expiry applied on write (0 keeps results forever).
            client: Optional preconfigured ``redis.asyncio`` client.
        """
        if client is None and not redis_url:
            raise ValueError("redis_url or client is required")

        self._ttl = ttl_seconds
        self._redis = client or aioredis.from_url(redis_url, decode_responses=True)

    async def get(self, key: str) -> str | None:
        try:
            value = await self._redis.get(key)
        except RedisError as exc:
            logger.error("store.error", extra={"operation": "get", "error_type": type(exc).__name__})
            raise StoreAppError(
                code="store_unavailable",
                message="Result store is unavailable",
                details={"backend": "redis"},
            ) from exc

        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        try:
            if self._ttl > 0:
                await self._redis.set(key, value, ex=self._ttl)
            else:
                await self._redis.set(key, value)
        except RedisError as exc:
            logger.error("store.error", extra={"operation": "set", "error_type": type(exc).__name__})
            raise StoreAppError(
                code="store_write_failed",
                message="Result could not be written to the store",
                details={"backend": "redis"},
            ) from exc

    async def ping(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except RedisError:
            logger.warning("store.ping_failed", extra={"backend": "redis"})
            return False

    async def close(self) -> None:
        # aclose() is the redis-py 5.0+ spelling
        await self._redis.aclose()
