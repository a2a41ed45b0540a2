"""Asynchronous image job service: dispatch, callback, and poll.

A job moves through three states per correlation id:

- none: nothing is known about the id
- pending: the id was handed to the client but no result was written yet
- completed: a decoded result is stored under the id

Pending is never materialized; it is inferred from the absence of a stored
value, so a poll cannot tell a pending job from an id that never existed.
The durable store is the only state shared between the callback writer and
the poll reader.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any

from app.adapters.dispatcher.base import AbstractDispatcher
from app.adapters.result_store.base import AbstractResultStore
from app.core.config import settings
from app.core.errors import DecodeAppError, DispatchAppError, ValidationAppError
from app.schemas.generation import GenerateImageRequest

logger = logging.getLogger(__name__)

MAX_CORRELATION_ID_CHARS = 256


def decode_payload(encoded: str) -> str:
    """Decode a base64 callback body into UTF-8 text.

    Raises:
        DecodeAppError: If the body is not valid base64 or not UTF-8 text.
    """
    try:
        raw = base64.b64decode(encoded, validate=True)
        return raw.decode("utf-8")
    except (binascii.Error, ValueError) as exc:
        raise DecodeAppError(
            code="callback_decode_failed",
            message="Callback payload is not valid base64-encoded UTF-8 text",
        ) from exc


def validate_correlation_id(correlation_id: str) -> str:
    """Return the id unchanged when well-formed.

    Raises:
        ValidationAppError: If the id is blank or too long.
    """
    if not correlation_id or not correlation_id.strip():
        raise ValidationAppError(
            code="invalid_correlation_id",
            message="Correlation id must be a non-empty string",
        )
    if len(correlation_id) > MAX_CORRELATION_ID_CHARS:
        raise ValidationAppError(
            code="invalid_correlation_id",
            message="Correlation id is too long",
            details={"max_value": MAX_CORRELATION_ID_CHARS, "actual_value": len(correlation_id)},
        )
    return correlation_id


class ImageJobService:
    """Bridges fire-and-forget dispatch with a later callback and client polls.

    Attributes:
        dispatcher: Push-queue adapter assigning correlation ids.
        store: Durable key-value store holding completed results.
        callback_url: Address handed to the dispatcher for the callback.
    """

    def __init__(
        self,
        dispatcher: AbstractDispatcher,
        store: AbstractResultStore,
        *,
        callback_url: str,
        key_prefix: str = "",
        default_size: str = "1024x1024",
        default_count: int = 1,
        max_prompt_chars: int | None = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.store = store
        self.callback_url = callback_url
        self.key_prefix = key_prefix
        self.default_size = default_size
        self.default_count = default_count
        self.max_prompt_chars = max_prompt_chars or settings.app.max_prompt_chars

    def _key(self, correlation_id: str) -> str:
        return f"{self.key_prefix}{correlation_id}"

    def build_job(self, request: GenerateImageRequest) -> dict[str, Any]:
        """Build the target API payload for a generation request.

        Raises:
            ValidationAppError: If the prompt is blank or too long.
        """
        prompt = request.prompt.strip()
        if not prompt:
            raise ValidationAppError(code="empty_prompt", message="Prompt must not be empty")
        if len(prompt) > self.max_prompt_chars:
            raise ValidationAppError(
                code="prompt_too_long",
                message="Prompt exceeds the maximum allowed length",
                details={"max_value": self.max_prompt_chars, "actual_value": len(prompt)},
            )

        return {
            "prompt": prompt,
            "n": request.n or self.default_count,
            "size": request.size or self.default_size,
            "response_format": "b64_json",
        }

    async def dispatch(self, request: GenerateImageRequest) -> str:
        """Hand the job to the dispatcher and return its correlation id.

        Returns as soon as the dispatcher accepts the job; completion is
        reported later through ``on_callback``.

        Raises:
            ValidationAppError: If the request is malformed.
            DispatchAppError: If the dispatcher could not accept the job.
        """
        job = self.build_job(request)
        try:
            correlation_id = await self.dispatcher.submit(job, self.callback_url)
        except DispatchAppError as exc:
            logger.warning(
                "job.dispatch_failed",
                extra={"error_code": exc.code, "prompt_chars": len(job["prompt"])},
            )
            raise

        logger.info(
            "job.dispatched",
            extra={"correlation_id": correlation_id, "n": job["n"], "size": job["size"]},
        )
        return correlation_id

    async def on_callback(
        self,
        correlation_id: str,
        encoded_payload: str,
        *,
        upstream_status: int | None = None,
        retried: int | None = None,
    ) -> str:
        """Decode the worker's payload and store it, completing the job.

        A repeated callback for the same id overwrites the previous result.
        Nothing is written when decoding fails. ``retried`` is the number of
        delivery attempts the dispatcher reports and is only logged.

        Returns:
            The decoded payload as stored.

        Raises:
            ValidationAppError: If the correlation id is malformed.
            DecodeAppError: If the payload cannot be decoded.
            StoreAppError: If the store rejects the write.
        """
        validate_correlation_id(correlation_id)
        try:
            decoded = decode_payload(encoded_payload)
        except DecodeAppError:
            logger.warning(
                "job.callback_decode_failed",
                extra={"correlation_id": correlation_id, "encoded_chars": len(encoded_payload)},
            )
            raise

        if upstream_status is not None and upstream_status >= 400:
            # Stored anyway so the client sees the upstream error on poll
            logger.warning(
                "job.callback_upstream_error",
                extra={"correlation_id": correlation_id, "upstream_status": upstream_status},
            )

        await self.store.set(self._key(correlation_id), decoded)
        logger.info(
            "job.callback_stored",
            extra={
                "correlation_id": correlation_id,
                "result_chars": len(decoded),
                "retried": retried,
            },
        )
        return decoded

    async def poll(self, correlation_id: str) -> str | None:
        """Return the stored result, or None while pending or when unknown.

        Raises:
            ValidationAppError: If the correlation id is malformed.
            StoreAppError: If the store is unreachable.
        """
        validate_correlation_id(correlation_id)
        value = await self.store.get(self._key(correlation_id))
        if value is None:
            logger.debug("job.poll_miss", extra={"correlation_id": correlation_id})
            return None

        logger.info("job.poll_hit", extra={"correlation_id": correlation_id})
        return value

    async def close(self) -> None:
        await self.dispatcher.close()
        await self.store.close()
