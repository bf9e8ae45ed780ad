"""Fixed-TTL counter rate limiting against a shared counter store.

Approximates a sliding window: the first request of a window creates the
counter and arms its TTL; later requests only increment. The TTL is never
refreshed, otherwise sustained traffic would keep the window open forever.

Key lifecycle: absent -> counting (TTL armed on count == 1) -> over limit
(same TTL) -> expired -> absent.

Known approximation: INCR, EXPIRE and TTL are three separate round trips,
not one transaction. Counts are never lost (INCR is atomic), but a reader
can briefly see a counter before its TTL is armed. If the EXPIRE on
count == 1 fails or never runs, the key has no expiry; the next request
that reads TTL_NO_EXPIRY arms it with a full window. A live TTL is never
touched, so the window still does not slide.

Failure policy: any store error (including timeouts) is logged and, by
default, the request is allowed (fail-open), so an outage of the limiter
never becomes a denial of service. ``fail_open=False`` opts into strict
mode, which rejects instead.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from app.adapters.rate_limit.base import (
    TTL_NO_EXPIRY,
    AbstractCounterStore,
    RateLimitConfig,
    RateLimitResult,
)
from app.core.logging import hash_identity

logger = logging.getLogger(__name__)

# Reference policy for the session-completed webhook
WEBHOOK_RATE_LIMIT = RateLimitConfig(limit=100, window_ms=60_000)


def build_rate_limit_key(endpoint: str, identity: str) -> str:
    """Compose the counter key for an endpoint/identity pair."""
    return f"rate_limit:{endpoint}:{identity}"


def _store_failure_result(config: RateLimitConfig, now_ms: int, *, fail_open: bool) -> RateLimitResult:
    if fail_open:
        return RateLimitResult(
            allowed=True,
            limit=config.limit,
            remaining=config.limit,
            reset=now_ms + config.window_ms,
        )
    return RateLimitResult(
        allowed=False,
        limit=config.limit,
        remaining=0,
        reset=now_ms + config.window_ms,
    )


async def check_rate_limit(
    store: AbstractCounterStore,
    identity: str,
    endpoint: str,
    config: RateLimitConfig,
    *,
    fail_open: bool = True,
    clock: Callable[[], float] = time.time,
) -> RateLimitResult:
    """Count one request for ``identity`` on ``endpoint`` and decide admission.

    Args:
        store: Shared counter store.
        identity: Opaque client identity (usually an IP address).
        endpoint: Endpoint path the limit applies to.
        config: Limit and window for this endpoint.
        fail_open: Allow the request when the store fails (default).
        clock: Time source returning UNIX time in seconds.

    Returns:
        RateLimitResult. Never raises for store failures.
    """
    key = build_rate_limit_key(endpoint, identity)
    now_ms = int(clock() * 1000)

    try:
        count = await store.incr(key)

        if count == 1:
            await store.expire(key, config.window_seconds)

        ttl = await store.ttl(key)

        if ttl == TTL_NO_EXPIRY:
            logger.warning(
                "rate_limit.ttl_missing",
                extra={"endpoint": endpoint, "identity_hash": hash_identity(identity)},
            )
            await store.expire(key, config.window_seconds)
    except Exception as exc:
        logger.error(
            "rate_limit.store_unavailable",
            extra={
                "endpoint": endpoint,
                "identity_hash": hash_identity(identity),
                "error_type": type(exc).__name__,
                "error_msg": str(exc),
                "fail_open": fail_open,
            },
        )
        return _store_failure_result(config, now_ms, fail_open=fail_open)

    reset = now_ms + (ttl * 1000 if ttl > 0 else config.window_ms)

    return RateLimitResult(
        allowed=count <= config.limit,
        limit=config.limit,
        remaining=max(0, config.limit - count),
        reset=reset,
    )
