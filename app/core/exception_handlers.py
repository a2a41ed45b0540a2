"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain and unexpected) and return consistent JSON responses with proper
HTTP status codes and traceability.

Design:
- AppError subclasses → appropriate HTTP status (400, 500, 502, 503)
- Unexpected Exception → generic 500 (safety net)
- All responses include request_id for distributed tracing
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.errors import (
    AppError,
    DecodeAppError,
    DispatchAppError,
    StoreAppError,
    ValidationAppError,
)
from app.core.logging import get_request_id
from app.core.rate_limit import rate_limit_headers

logger = logging.getLogger(__name__)


def status_code_for(exc: AppError) -> int:
    """Map a domain error to its HTTP status code.

    - ValidationAppError → 400 Bad Request (client fault)
    - DispatchAppError → 502 Bad Gateway (dispatcher fault)
    - StoreAppError → 503 Service Unavailable (durable store fault)
    - DecodeAppError → 500 Internal Server Error (callback payload fault)
    """
    if isinstance(exc, ValidationAppError):
        return 400
    if isinstance(exc, DispatchAppError):
        return 502
    if isinstance(exc, StoreAppError):
        return 503
    if isinstance(exc, DecodeAppError):
        return 500
    return 500


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    All responses include:
    - error.code: Machine-readable error code
    - error.message: Human-readable message
    - error.request_id: For distributed tracing
    - error.details: Optional structured context

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = status_code_for(exc)

    log = logger.warning if status_code < 500 else logger.error
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
            "request_id": get_request_id(),
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }

    if exc.details:
        error_content["details"] = exc.details

    # Admitted requests that fail later still report the quota they consumed
    admitted = getattr(request.state, "rate_limit", None)

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
        headers=rate_limit_headers(admitted) if admitted is not None else None,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic
    message. No stack traces or exception text reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with FastAPI app.

    Order matters: specific handlers registered before general fallback.

    Example:
        >>> from fastapi import FastAPI
        >>> from app.core.exception_handlers import setup_exception_handlers
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
