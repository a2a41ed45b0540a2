"""Durable key-value store interface.

The store is an external collaborator: get/set are assumed atomic per key,
and there are no transactions or listings.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractResultStore(ABC):
    """Interface for the store holding completed job results."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None when absent.

        Raises:
            StoreAppError: If the store is unreachable.
        """
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        Raises:
            StoreAppError: If the store is unreachable or rejects the write.
        """
        raise NotImplementedError

    @abstractmethod
    async def ping(self) -> bool:
        """Return True when the store answers."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release connections held by the store."""
        return None
