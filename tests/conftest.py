"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment variables are seeded here, before any import of
``app.core.config`` builds the global settings.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DISPATCH_QSTASH_TOKEN", "test-qstash-token")
os.environ.setdefault("DISPATCH_TARGET_API_KEY", "test-target-key")
os.environ.setdefault("DISPATCH_CALLBACK_BASE_URL", "https://relay.test")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("APP_RATE_LIMIT_REQUESTS", "3")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import base64
from typing import Any

import pytest

from app.adapters.dispatcher.base import AbstractDispatcher
from app.adapters.result_store.in_memory import InMemoryResultStore
from app.core.errors import DispatchAppError
from app.services.job_service import ImageJobService


class FakeDispatcher(AbstractDispatcher):
    """Records submitted jobs and hands out sequential correlation ids."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.submitted: list[tuple[dict[str, Any], str]] = []

    async def submit(self, job: dict[str, Any], callback_url: str) -> str:
        if self.fail:
            raise DispatchAppError(code="dispatch_unavailable", message="Could not reach the job dispatcher")
        self.submitted.append((job, callback_url))
        return f"msg-{len(self.submitted)}"


class FakeTime:
    """Deterministic clock used to test expiration logic."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


def encode(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def dispatcher() -> FakeDispatcher:
    return FakeDispatcher()


@pytest.fixture
def store() -> InMemoryResultStore:
    return InMemoryResultStore()


@pytest.fixture
def job_service(dispatcher: FakeDispatcher, store: InMemoryResultStore) -> ImageJobService:
    return ImageJobService(
        dispatcher=dispatcher,
        store=store,
        callback_url="https://relay.test/v1/images/callback",
        key_prefix="job:",
        max_prompt_chars=100,
    )
