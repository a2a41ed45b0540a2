"""Durable result store adapters - key-value access by correlation id."""

from app.adapters.result_store.base import AbstractResultStore
from app.adapters.result_store.factory import create_result_store
from app.adapters.result_store.in_memory import InMemoryResultStore
from app.adapters.result_store.redis_store import RedisResultStore

__all__ = [
    "AbstractResultStore",
    "InMemoryResultStore",
    "RedisResultStore",
    "create_result_store",
]
