"""Factory for the configured durable result store."""

from app.adapters.result_store.base import AbstractResultStore
from app.adapters.result_store.in_memory import InMemoryResultStore
from app.adapters.result_store.redis_store import RedisResultStore
from app.core.config import StoreSettings, settings
from app.core.errors import ValidationAppError


def create_result_store(store_settings: StoreSettings | None = None) -> AbstractResultStore:
    """Instantiate the result store backend.

    With no explicit backend, Redis is used when a URL is configured and the
    in-memory store otherwise.

    Raises:
        ValidationAppError: If the backend is unknown or Redis lacks a URL.
    """
    cfg = store_settings or settings.store
    backend = (cfg.backend or ("redis" if cfg.redis_url else "memory")).lower()

    if backend == "memory":
        return InMemoryResultStore(ttl_seconds=cfg.result_ttl_seconds)

    if backend == "redis":
        if not cfg.redis_url:
            raise ValidationAppError(
                code="store_missing_redis_url",
                message="Redis result store requires STORE_REDIS_URL environment variable",
            )
        return RedisResultStore(cfg.redis_url, ttl_seconds=cfg.result_ttl_seconds)

    raise ValidationAppError(
        code="store_unknown_backend",
        message=f"Unknown result store backend: '{backend}'. Supported backends: memory, redis",
    )
