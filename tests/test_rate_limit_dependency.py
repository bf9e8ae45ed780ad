"""Tests for the rate limit wiring in the HTTP layer."""

from unittest.mock import patch

import pytest

from app.adapters.rate_limit.base import RateLimitResult
from app.adapters.rate_limit.in_memory import InMemoryCounterStore
from app.adapters.rate_limit.redis_store import RedisCounterStore
from app.core import rate_limit
from app.core.rate_limit import (
    build_rate_limit_headers,
    close_counter_store,
    get_counter_store,
    get_webhook_rate_limit_config,
)


@pytest.fixture(autouse=True)
def reset_store():
    rate_limit._store = None
    yield
    rate_limit._store = None


@patch("app.core.rate_limit.settings")
def test_memory_backend(mock_settings) -> None:
    mock_settings.rate_limit.backend = "memory"

    store = get_counter_store()

    assert isinstance(store, InMemoryCounterStore)
    assert get_counter_store() is store


@patch("app.core.rate_limit.settings")
def test_redis_backend(mock_settings) -> None:
    mock_settings.rate_limit.backend = "Redis"
    mock_settings.redis.url = "redis://localhost:6399/0"
    mock_settings.redis.socket_timeout_seconds = 0.5

    assert isinstance(get_counter_store(), RedisCounterStore)


@patch("app.core.rate_limit.settings")
def test_unknown_backend(mock_settings) -> None:
    mock_settings.rate_limit.backend = "memcached"

    with pytest.raises(ValueError):
        get_counter_store()


@pytest.mark.asyncio
@patch("app.core.rate_limit.settings")
async def test_close_forgets_store(mock_settings) -> None:
    mock_settings.rate_limit.backend = "memory"
    first = get_counter_store()

    await close_counter_store()

    assert get_counter_store() is not first


@patch("app.core.rate_limit.settings")
def test_webhook_config_from_settings(mock_settings) -> None:
    mock_settings.rate_limit.webhook_requests = 10
    mock_settings.rate_limit.webhook_window_ms = 1500

    config = get_webhook_rate_limit_config()

    assert config.limit == 10
    assert config.window_seconds == 2


def test_headers_render_reset_as_utc_iso() -> None:
    result = RateLimitResult(allowed=True, limit=100, remaining=42, reset=1_700_000_060_000)

    headers = build_rate_limit_headers(result)

    assert headers == {
        "X-RateLimit-Limit": "100",
        "X-RateLimit-Remaining": "42",
        "X-RateLimit-Reset": "2023-11-14T22:14:20Z",
    }
