"""Tests for the QStash dispatcher adapter using httpx.MockTransport."""

import asyncio
import json

import httpx
import pytest

from app.adapters.dispatcher.qstash import QStashDispatcher
from app.core.errors import DispatchAppError

JOB = {"prompt": "a red fox", "n": 1, "size": "1024x1024", "response_format": "b64_json"}
CALLBACK = "https://relay.test/v1/images/callback"


def _dispatcher(handler) -> QStashDispatcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return QStashDispatcher(
        token="qstash-token",
        target_url="https://api.openai.com/v1/images/generations",
        target_api_key="sk-target",
        publish_url="https://qstash.test/v2/publish/",
        client=client,
    )


def test_publishes_job_with_forwarding_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"messageId": "msg_123"})

    message_id = asyncio.run(_dispatcher(handler).submit(JOB, CALLBACK))

    assert message_id == "msg_123"
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://qstash.test/v2/publish/https://api.openai.com/v1/images/generations"
    assert request.headers["Authorization"] == "Bearer qstash-token"
    assert request.headers["Upstash-Forward-Authorization"] == "Bearer sk-target"
    assert request.headers["Upstash-Callback"] == CALLBACK
    assert json.loads(request.content) == JOB


def test_non_2xx_answer_is_dispatch_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "unauthorized"})

    with pytest.raises(DispatchAppError) as exc_info:
        asyncio.run(_dispatcher(handler).submit(JOB, CALLBACK))

    assert exc_info.value.code == "dispatch_rejected"
    assert exc_info.value.details == {"upstream_status": 401}


def test_transport_error_is_dispatch_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(DispatchAppError) as exc_info:
        asyncio.run(_dispatcher(handler).submit(JOB, CALLBACK))

    assert exc_info.value.code == "dispatch_unavailable"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={}),
        httpx.Response(200, json={"messageId": ""}),
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json=["msg_123"]),
    ],
)
def test_missing_message_id_is_dispatch_failure(response: httpx.Response) -> None:
    with pytest.raises(DispatchAppError) as exc_info:
        asyncio.run(_dispatcher(lambda request: response).submit(JOB, CALLBACK))

    assert exc_info.value.code == "dispatch_invalid_response"


def test_close_leaves_injected_client_open() -> None:
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    dispatcher = QStashDispatcher(
        token="t", target_url="https://target.test", target_api_key="k", client=client
    )

    asyncio.run(dispatcher.close())

    assert client.is_closed is False
