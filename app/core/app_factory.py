"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers,
lifespan) so tests and the ASGI entrypoint build the same application.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api.routes import health_router, webhooks_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import close_counter_store


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await close_counter_store()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title=settings.app.name,
        description=(
            "Ingestion endpoint for tutoring session webhooks. Requests are "
            "rate limited per client and authenticated with an HMAC-SHA256 "
            "signature of the raw body."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        lifespan=lifespan,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(webhooks_router)
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
