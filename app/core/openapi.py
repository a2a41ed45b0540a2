"""OpenAPI metadata and customization utilities.

Enriches the generated OpenAPI schema with tags metadata and documents the
rate-limit response headers on the generation endpoint. This keeps
documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

_RATE_LIMIT_HEADERS = {
    "X-RateLimit-Limit": {
        "description": "Requests allowed per caller per window.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Remaining": {
        "description": "Requests left in the current window.",
        "schema": {"type": "integer"},
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation.

    - Adds tags metadata if not present
    - Documents X-RateLimit-* headers and the 429 answer on rate-limited paths
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {
                "name": "Images",
                "description": "Start generation jobs, receive callbacks, poll for results.",
            },
            {
                "name": "Health",
                "description": "Liveness and readiness checks.",
            },
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        paths = schema.get("paths", {})
        for path, methods in paths.items():
            if not path.endswith("/generate"):
                continue
            for method_obj in methods.values():
                if not isinstance(method_obj, dict):
                    continue
                responses = method_obj.setdefault("responses", {})
                accepted = responses.get("202")
                if accepted is not None:
                    accepted.setdefault("headers", {}).update(_RATE_LIMIT_HEADERS)
                responses.setdefault(
                    "429",
                    {"description": "Rate limit exceeded.", "headers": dict(_RATE_LIMIT_HEADERS)},
                )

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
