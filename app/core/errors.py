"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.

Rate-limit rejections and poll misses are decision outcomes, not errors,
and are therefore not represented here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    http_status: int
    upstream_status: int
    correlation_id: str
    backend: str
    max_value: int
    actual_value: int
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class DispatchAppError(AppError):
    """Raised when a job could not be handed to the external dispatcher."""


class DecodeAppError(AppError):
    """Raised when a callback payload cannot be decoded."""


class StoreAppError(AppError):
    """Raised when the durable result store is unreachable or rejects an operation."""
