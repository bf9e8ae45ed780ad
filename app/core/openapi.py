"""OpenAPI customization for webhook authentication.

Documents the HMAC signature header as an ``apiKey`` security scheme on the
webhook operations and tags the routers. Health endpoints stay unauthenticated.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

_TAGS = [
    {
        "name": "Webhooks",
        "description": "Signed, rate-limited inbound webhooks from the tutoring platform.",
    },
    {
        "name": "Health",
        "description": "Liveness checks.",
    },
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to describe webhook signing."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        security_schemes = schema.setdefault("components", {}).setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "WebhookSignature",
            {
                "type": "apiKey",
                "in": "header",
                "name": "X-Signature",
                "description": (
                    "Lowercase hex HMAC-SHA256 of the raw request body keyed by the "
                    "shared webhook secret, optionally prefixed with 'sha256='."
                ),
            },
        )

        tags = schema.setdefault("tags", [])
        existing = {t.get("name") for t in tags}
        tags.extend(tag for tag in _TAGS if tag["name"] not in existing)

        for path, methods in schema.get("paths", {}).items():
            if not path.startswith("/api/webhooks/"):
                continue
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj["security"] = [{"WebhookSignature": []}]

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
