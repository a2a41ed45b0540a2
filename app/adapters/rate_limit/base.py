"""Rate limiter interfaces.

The API should depend on this abstraction (not the concrete implementation)
so we can swap storage backends later (e.g., Redis) with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of an admission check.

    A rejection is a decision, not an error: callers inspect ``allowed``.

    Attributes:
        allowed: Whether the request is admitted.
        limit: Max admitted requests per caller per window.
        remaining: Remaining quota in the current window (0 when rejected).
        retry_after_seconds: Suggested wait time in seconds when rejected.
    """

    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int | None = None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def check(self, token: str, limit: int) -> RateLimitResult:
        """Count one request for ``token`` and decide whether it is admitted.

        Args:
            token: Caller identity (e.g., API key, IP address).
            limit: Max admitted requests per token per window.

        Returns:
            RateLimitResult describing the decision.

        Raises:
            ValueError: If token is empty or limit is not positive.
        """
        raise NotImplementedError
