import json

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from app.core.rate_limit import enforce_rate_limit
from app.schemas.generation import (
    CallbackAck,
    CallbackPayload,
    GenerateImageRequest,
    GenerateImageResponse,
)
from app.services.job_service import ImageJobService

router = APIRouter(prefix="/images", tags=["Images"])


def get_job_service(request: Request) -> ImageJobService:
    """Return the job service owned by the running application."""
    return request.app.state.job_service


@router.post(
    "/generate",
    response_model=GenerateImageResponse,
    status_code=status.HTTP_202_ACCEPTED,
    dependencies=[Depends(enforce_rate_limit)],
)
async def generate_image(
    payload: GenerateImageRequest,
    service: ImageJobService = Depends(get_job_service),
) -> GenerateImageResponse:
    """Start an image generation job.

    The job is handed to the dispatcher and the endpoint returns right away
    with the correlation id; poll ``/images/poll/{id}`` for the result.

    Raises:
        ValidationAppError: 400 for a blank or oversized prompt.
        DispatchAppError: 502 when the dispatcher cannot accept the job.
    """
    correlation_id = await service.dispatch(payload)
    return GenerateImageResponse(id=correlation_id)


@router.post("/callback", response_model=CallbackAck)
async def receive_callback(
    payload: CallbackPayload,
    service: ImageJobService = Depends(get_job_service),
) -> CallbackAck:
    """Callback entry point invoked by the dispatcher, not by end users.

    Raises:
        DecodeAppError: 500 when the body is not valid base64 text.
        StoreAppError: 503 when the result cannot be stored.
    """
    await service.on_callback(
        payload.source_message_id,
        payload.body,
        upstream_status=payload.status,
        retried=payload.retried,
    )
    return CallbackAck(id=payload.source_message_id)


@router.get(
    "/poll/{job_id}",
    responses={
        200: {"description": "Stored result; non-JSON text is wrapped as a JSON string."},
        404: {"description": "Job still pending or unknown."},
    },
)
async def poll_image(
    job_id: str,
    service: ImageJobService = Depends(get_job_service),
) -> Response:
    """Return the job result once the callback has delivered it.

    A 404 means either that the job is still running or that the id was
    never issued; the two cases are indistinguishable. Results that are not
    JSON text (an upstream plain-text error, say) are wrapped as a JSON
    string so the response always matches its content type.
    """
    value = await service.poll(job_id)
    if value is None:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": "No data found"})
    try:
        json.loads(value)
    except ValueError:
        return JSONResponse(content=value)
    return Response(content=value, media_type="application/json")
