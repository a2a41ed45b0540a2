"""Application factory for FastAPI app.

Centralizes app construction (collaborators, middleware, handlers, routers)
so tests can build isolated instances.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.adapters.dispatcher.factory import build_callback_url, create_dispatcher
from app.adapters.result_store.factory import create_result_store
from app.api.routes import health_router, images_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import build_rate_limiter
from app.services.job_service import ImageJobService


def build_job_service() -> ImageJobService:
    """Wire the job service to the configured dispatcher and result store.

    Raises:
        ValidationAppError: If dispatcher or store configuration is incomplete.
    """
    return ImageJobService(
        dispatcher=create_dispatcher(settings.dispatch),
        store=create_result_store(settings.store),
        callback_url=build_callback_url(settings.dispatch),
        key_prefix=settings.store.key_prefix,
        default_size=settings.dispatch.image_size,
        default_count=settings.dispatch.image_count,
        max_prompt_chars=settings.app.max_prompt_chars,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Close outbound connections on shutdown."""
    yield
    await app.state.job_service.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with collaborators, middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Image Relay API",
        description=(
            "Accepts image generation requests, hands them to a push queue that "
            "calls the generation API, receives the result through a callback, "
            "and lets clients poll for it by job id. Generation requests are "
            "rate limited per caller."
        ),
        version="0.1.0",
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
        lifespan=lifespan,
    )

    app.state.rate_limiter = build_rate_limiter(settings.app)
    app.state.job_service = build_job_service()

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(images_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
