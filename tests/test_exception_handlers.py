"""Tests for global exception handlers.

Validates that all exception types are handled consistently with
proper HTTP status codes, error format, and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.errors import (
    AppError,
    DecodeAppError,
    DispatchAppError,
    StoreAppError,
    ValidationAppError,
)
from app.core.exception_handlers import setup_exception_handlers, status_code_for


@pytest.fixture
def app_with_handlers() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    @pytest.mark.parametrize(
        ("error_cls", "expected_status"),
        [
            (ValidationAppError, 400),
            (DecodeAppError, 500),
            (DispatchAppError, 502),
            (StoreAppError, 503),
            (AppError, 500),
        ],
    )
    def test_maps_error_type_to_status(self, error_cls, expected_status: int) -> None:
        assert status_code_for(error_cls(code="x", message="x")) == expected_status

    def test_dispatch_error_returns_502(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-dispatch")
        async def test_endpoint():
            raise DispatchAppError(
                code="dispatch_rejected",
                message="Job dispatcher rejected the request with HTTP 401",
                details={"upstream_status": 401},
            )

        response = client.get("/test-dispatch")

        assert response.status_code == 502
        data = response.json()
        assert data["error"]["code"] == "dispatch_rejected"
        assert data["error"]["details"]["upstream_status"] == 401
        assert "request_id" in data["error"]

    def test_error_response_omits_empty_details(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-format")
        async def test_endpoint():
            raise ValidationAppError(code="test", message="test")

        data = client.get("/test-format").json()

        assert set(data["error"]) == {"code", "message", "request_id"}


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_handler_registered(self, app_with_handlers: FastAPI):
        assert Exception in app_with_handlers.exception_handlers

    def test_general_exception_handler_hides_internals(self):
        from app.core.exception_handlers import general_exception_handler

        request = AsyncMock()
        request.url.path = "/v1/images/poll/x"
        request.method = "GET"

        exc = RuntimeError("redis://:secret@cache:6379 refused connection")
        response = asyncio.run(general_exception_handler(request, exc))

        body = response.body if isinstance(response.body, bytes) else bytes(response.body)
        data = json.loads(body.decode())
        assert response.status_code == 500
        assert data["error"]["code"] == "internal_server_error"
        assert "secret" not in body.decode()
        assert "RuntimeError" not in body.decode()


def test_setup_is_idempotent():
    app = FastAPI()

    setup_exception_handlers(app)
    setup_exception_handlers(app)

    assert AppError in app.exception_handlers
    assert Exception in app.exception_handlers
