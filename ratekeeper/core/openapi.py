"""OpenAPI customization utilities.

Documents the X-Client-Key header used to key admission decisions and adds
tag metadata. Routes that never consume capacity are marked as not
requiring the header.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

_UNGUARDED_SUFFIXES = ("/health", "/policy")


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation with the client key scheme and tags."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "ClientKey",
            {
                "type": "apiKey",
                "in": "header",
                "name": "X-Client-Key",
                "description": "Identifies the caller for rate limiting. Falls back to client IP.",
            },
        )
        schema.setdefault("security", [{"ClientKey": []}])

        tags = schema.setdefault("tags", [])
        existing = {t.get("name") for t in tags}
        for tag in (
            {"name": "Admission", "description": "Rate limited admission checks."},
            {"name": "Health", "description": "Liveness checks."},
        ):
            if tag["name"] not in existing:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if path.endswith(_UNGUARDED_SUFFIXES):
                for method_obj in methods.values():
                    if isinstance(method_obj, dict):
                        method_obj["security"] = []

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
