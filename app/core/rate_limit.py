"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: API routes depend on a dependency function only.
- Explicit ownership: the limiter is built by the app factory and held on
  ``app.state``; no module-level limiter state.
- Observability: the configured limit and remaining quota are attached to
  every admitted or rejected response.

Rate limiting strategy:
- Per caller token: the X-API-Key header value when present, else client IP.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Header, HTTPException, Request, Response, status

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemoryLRUWindowRateLimiter
from app.core.config import AppSettings, settings
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)


def build_rate_limiter(app_settings: AppSettings | None = None) -> AbstractRateLimiter:
    """Build the limiter configured for this process."""

    cfg = app_settings or settings.app
    return InMemoryLRUWindowRateLimiter(
        capacity=cfg.rate_limit_capacity,
        window_ms=cfg.rate_limit_window_ms,
    )


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter owned by the running application."""

    return request.app.state.rate_limiter


def build_rate_limit_token(request: Request, x_api_key: str | None) -> str:
    """Build the namespaced caller token for the current request."""

    if x_api_key:
        return f"api_key:{x_api_key}"

    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


def rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    headers = {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
    }
    if not result.allowed and result.retry_after_seconds is not None:
        headers["Retry-After"] = str(result.retry_after_seconds)
    return headers


async def enforce_rate_limit(
    request: Request,
    response: Response,
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> None:
    """FastAPI dependency enforcing rate limits.

    When enabled, counts one request against the caller's quota. Admitted
    responses carry the quota headers, including error responses raised
    later by the route; rejected callers get HTTP 429.

    Raises:
        HTTPException: 429 Too Many Requests when rate limit is exceeded.
    """

    if not settings.app.rate_limit_enabled:
        return

    limiter = get_rate_limiter(request)
    token = build_rate_limit_token(request, x_api_key)
    token_type = "api_key" if x_api_key else "ip"

    result = limiter.check(token, settings.app.rate_limit_requests)
    log_extra = {
        "token_type": token_type,
        "token_hash": hash_identifier(token),
        "limit": result.limit,
        "remaining": result.remaining,
        "window_ms": settings.app.rate_limit_window_ms,
    }

    if result.allowed:
        logger.info("rate_limit.allowed", extra=log_extra)
        if settings.app.rate_limit_include_headers:
            response.headers.update(rate_limit_headers(result))
            # Error responses are built by the exception handlers, not from `response`
            request.state.rate_limit = result
        return

    logger.warning(
        "rate_limit.exceeded",
        extra={**log_extra, "retry_after_s": result.retry_after_seconds},
    )

    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Rate limit exceeded. Try again later.",
        headers=rate_limit_headers(result) if settings.app.rate_limit_include_headers else None,
    )
