"""Rate limiting adapters.

The HTTP layer depends on the abstract limiter only, so the in-process
LRU-backed limiter can later be replaced by a shared store without
touching the routes.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemoryLRUWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemoryLRUWindowRateLimiter",
    "RateLimitResult",
]
