"""QStash push-queue dispatcher adapter.

The job is published to QStash, which forwards it to the target API
(authorizing with the forwarded bearer token) and, once the target answers,
POSTs the base64-encoded response to the callback URL.
"""

import logging
from typing import Any

import httpx

from app.adapters.dispatcher.base import AbstractDispatcher
from app.core.errors import DispatchAppError

logger = logging.getLogger(__name__)


class QStashDispatcher(AbstractDispatcher):
    """Publishes generation jobs through QStash using an async HTTP client."""

    def __init__(
        self,
        *,
        token: str,
        target_url: str,
        target_api_key: str,
        publish_url: str = "https://qstash.upstash.io/v2/publish/",
        timeout_seconds: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            token: QStash bearer token.
            target_url: URL QStash forwards the job to.
            target_api_key: Bearer token QStash forwards to the target.
            publish_url: QStash publish endpoint; the target URL is appended.
            timeout_seconds: Timeout for the publish call.
            client: Optional preconfigured client (tests, shared pools).
        """
        self._token = token
        self._target_url = target_url
        self._target_api_key = target_api_key
        self._publish_url = publish_url
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self._owns_client = client is None

    @property
    def endpoint(self) -> str:
        return f"{self._publish_url}{self._target_url}"

    def _headers(self, callback_url: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Upstash-Forward-Authorization": f"Bearer {self._target_api_key}",
            "Upstash-Callback": callback_url,
            "Content-Type": "application/json",
        }

    async def submit(self, job: dict[str, Any], callback_url: str) -> str:
        """Publish ``job`` and return the QStash message id.

        Raises:
            DispatchAppError: On transport failure, a non-2xx answer, or a
                response without a message id.
        """
        try:
            response = await self._client.post(
                self.endpoint,
                json=job,
                headers=self._headers(callback_url),
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "dispatch.transport_error",
                extra={"error_type": type(exc).__name__},
            )
            raise DispatchAppError(
                code="dispatch_unavailable",
                message="Could not reach the job dispatcher",
            ) from exc

        if response.is_error:
            raise DispatchAppError(
                code="dispatch_rejected",
                message=f"Job dispatcher rejected the request with HTTP {response.status_code}",
                details={"upstream_status": response.status_code},
            )

        try:
            message_id = response.json().get("messageId")
        except (ValueError, AttributeError) as exc:
            raise DispatchAppError(
                code="dispatch_invalid_response",
                message="Job dispatcher returned an unreadable response",
            ) from exc

        if not isinstance(message_id, str) or not message_id:
            raise DispatchAppError(
                code="dispatch_invalid_response",
                message="Job dispatcher response did not include a message id",
            )

        return message_id

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
