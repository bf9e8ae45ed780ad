"""Rate limiting dependency for webhook routes.

This module wires the rate limiter into the HTTP layer:
- a process-wide counter store chosen by RATE_LIMIT_BACKEND
- a FastAPI dependency that counts the request, sets X-RateLimit-* headers
  and raises HTTP 429 when the client is over its budget

Requests are keyed by client identity (see ``app.core.client_identity``)
and request path.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from fastapi import Depends, Request, Response

from app.adapters.rate_limit.base import AbstractCounterStore, RateLimitConfig, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemoryCounterStore
from app.adapters.rate_limit.redis_store import RedisCounterStore
from app.core.client_identity import client_identity_from_request
from app.core.config import settings
from app.core.errors import RateLimitExceededAppError
from app.core.logging import hash_identity
from app.services.rate_limiter import check_rate_limit

logger = logging.getLogger(__name__)


_store: AbstractCounterStore | None = None


def get_counter_store() -> AbstractCounterStore:
    """Return the process-wide counter store, creating it on first use.

    Raises:
        ValueError: If RATE_LIMIT_BACKEND names an unknown backend.
    """

    global _store

    if _store is None:
        backend = settings.rate_limit.backend.lower()
        if backend == "redis":
            _store = RedisCounterStore.from_url(
                settings.redis.url,
                socket_timeout=settings.redis.socket_timeout_seconds,
            )
        elif backend == "memory":
            _store = InMemoryCounterStore()
        else:
            raise ValueError(f"Unknown rate limit backend: {settings.rate_limit.backend!r}")

    return _store


async def close_counter_store() -> None:
    """Close and forget the process-wide counter store (app shutdown)."""

    global _store

    if _store is not None:
        await _store.close()
        _store = None


def get_webhook_rate_limit_config() -> RateLimitConfig:
    """Rate limit policy for webhook endpoints, from settings."""

    return RateLimitConfig(
        limit=settings.rate_limit.webhook_requests,
        window_ms=settings.rate_limit.webhook_window_ms,
    )


def build_rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    """Render a RateLimitResult as response headers.

    ``X-RateLimit-Reset`` is the ISO-8601 UTC time at which the window ends.
    """

    reset_at = datetime.fromtimestamp(result.reset / 1000, tz=timezone.utc)
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": reset_at.isoformat().replace("+00:00", "Z"),
    }


async def enforce_webhook_rate_limit(
    request: Request,
    response: Response,
    store: AbstractCounterStore = Depends(get_counter_store),
    config: RateLimitConfig = Depends(get_webhook_rate_limit_config),
) -> RateLimitResult | None:
    """FastAPI dependency enforcing the webhook rate limit.

    Counts one request against the caller's budget. Store outages never
    surface here: the limiter logs them and applies the configured
    fail-open/fail-closed policy.

    Args:
        request: FastAPI request.
        response: Response whose headers receive the rate limit state.
        store: Counter store (overridable in tests).
        config: Rate limit policy.

    Returns:
        The RateLimitResult, or None when rate limiting is disabled.

    Raises:
        RateLimitExceededAppError: When the limit is exceeded (429).
    """

    if not settings.rate_limit.enabled:
        return None

    identity = client_identity_from_request(request)
    endpoint = request.url.path

    result = await check_rate_limit(
        store,
        identity,
        endpoint,
        config,
        fail_open=settings.rate_limit.fail_open,
    )

    headers = build_rate_limit_headers(result) if settings.rate_limit.include_headers else {}

    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "endpoint": endpoint,
                "identity_hash": hash_identity(identity),
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        response.headers.update(headers)
        return result

    retry_after = result.retry_after_seconds(int(time.time() * 1000))
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "endpoint": endpoint,
            "identity_hash": hash_identity(identity),
            "limit": result.limit,
            "window_ms": config.window_ms,
            "retry_after_s": retry_after,
        },
    )

    headers["Retry-After"] = str(retry_after)
    raise RateLimitExceededAppError(
        code="rate_limit_exceeded",
        message="Rate limit exceeded. Please try again later.",
        headers=headers,
    )
