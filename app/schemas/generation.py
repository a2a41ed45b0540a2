"""Pydantic schemas for image generation jobs."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GenerateImageRequest(BaseModel):
    """Client request to start an image generation job."""

    prompt: str = Field(
        ...,
        min_length=1,
        description="Text prompt describing the image to generate.",
    )
    n: int | None = Field(
        default=None,
        ge=1,
        le=10,
        description="Number of images to generate (defaults to server configuration).",
    )
    size: str | None = Field(
        default=None,
        pattern=r"^\d{2,4}x\d{2,4}$",
        description="Image size such as '1024x1024' (defaults to server configuration).",
    )


class GenerateImageResponse(BaseModel):
    """Accepted job: poll with the returned id."""

    id: str = Field(..., description="Correlation id used to poll for the result.")


class CallbackPayload(BaseModel):
    """Body the push queue sends once the target API has answered.

    Only ``body`` and ``sourceMessageId`` are required; the queue adds
    delivery metadata that is accepted and ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    body: str = Field(..., description="Base64-encoded response of the target API.")
    source_message_id: str = Field(
        ...,
        alias="sourceMessageId",
        min_length=1,
        description="Id of the message originally published for this job.",
    )
    status: int | None = Field(
        default=None,
        description="HTTP status the target API answered with.",
    )
    retried: int | None = Field(default=None, description="Delivery attempts already made.")


class CallbackAck(BaseModel):
    """Acknowledgement returned to the push queue."""

    id: str
    stored: bool = True
