"""Tests for environment-driven settings."""

from app.core.config import RateLimitSettings, RedisSettings, WebhookSettings


def test_webhook_secret_absent_is_none(monkeypatch) -> None:
    monkeypatch.delenv("WEBHOOK_SECRET", raising=False)
    assert WebhookSettings().secret is None


def test_webhook_secret_empty_is_preserved(monkeypatch) -> None:
    monkeypatch.setenv("WEBHOOK_SECRET", "")
    assert WebhookSettings().secret == ""


def test_rate_limit_defaults(monkeypatch) -> None:
    for name in (
        "RATE_LIMIT_ENABLED",
        "RATE_LIMIT_BACKEND",
        "RATE_LIMIT_WEBHOOK_REQUESTS",
        "RATE_LIMIT_WEBHOOK_WINDOW_MS",
        "RATE_LIMIT_FAIL_OPEN",
    ):
        monkeypatch.delenv(name, raising=False)

    cfg = RateLimitSettings()

    assert cfg.enabled is True
    assert cfg.backend == "redis"
    assert cfg.webhook_requests == 100
    assert cfg.webhook_window_ms == 60_000
    assert cfg.fail_open is True


def test_fail_closed_from_env(monkeypatch) -> None:
    monkeypatch.setenv("RATE_LIMIT_FAIL_OPEN", "false")
    assert RateLimitSettings().fail_open is False


def test_redis_url_from_env(monkeypatch) -> None:
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/2")
    assert RedisSettings().url == "redis://cache:6379/2"


def test_session_sink_from_env(monkeypatch) -> None:
    monkeypatch.delenv("WEBHOOK_SESSION_SINK", raising=False)
    assert WebhookSettings().session_sink == "memory"

    monkeypatch.setenv("WEBHOOK_SESSION_SINK", "queue")
    assert WebhookSettings().session_sink == "queue"
