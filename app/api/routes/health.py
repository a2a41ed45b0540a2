from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness check used by load balancers and monitoring systems.

    Returns:
        dict: A dictionary with a single "status" key set to "ok".
    """

    return {"status": "ok"}


@router.get("/health/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness check: the durable result store must answer a ping."""

    store = request.app.state.job_service.store
    if await store.ping():
        return JSONResponse(content={"status": "ok", "store": "ok"})
    return JSONResponse(status_code=503, content={"status": "unavailable", "store": "unreachable"})
