"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    name: str = Field(
        "Tutor Webhook Guard",
        description="Service name used in API metadata",
    )
    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class WebhookSettings(BaseSettings):
    """Inbound webhook authentication settings.

    ``secret`` stays ``None`` when WEBHOOK_SECRET is unset, and ``""`` when it
    is set but empty. Callers decide which of the two is fatal.
    """

    secret: str | None = Field(
        None,
        description="Shared HMAC secret used to sign webhook payloads",
    )
    signature_headers: str = Field(
        "X-Signature,X-Webhook-Signature,X-Hub-Signature-256",
        description="Comma-separated signature header names, checked in order",
    )
    session_sink: str = Field(
        "memory",
        description="Where accepted sessions go: 'memory' (per-process, development)",
    )

    model_config = SettingsConfigDict(
        env_prefix="WEBHOOK_",
        case_sensitive=False,
    )


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration for protected endpoints."""

    enabled: bool = Field(
        True,
        description="Enable rate limiting on webhook endpoints",
    )
    backend: str = Field(
        "redis",
        description="Counter store backend: 'redis' (shared) or 'memory' (per-process)",
    )
    webhook_requests: int = Field(
        100,
        description="Maximum number of webhook requests per window (per client identity)",
        ge=1,
    )
    webhook_window_ms: int = Field(
        60_000,
        description="Rate limit window size in milliseconds",
        ge=1,
    )
    fail_open: bool = Field(
        True,
        description="Allow requests when the counter store is unavailable",
    )
    include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* headers on webhook responses",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


class RedisSettings(BaseSettings):
    """Connection settings for the shared counter store."""

    url: str = Field(
        "redis://localhost:6379",
        description="Redis connection URL",
    )
    socket_timeout_seconds: float = Field(
        1.0,
        description="Socket connect/read timeout; a timeout counts as a store failure",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: 'json' or 'plain'")
    output: str = Field("stdout", description="Log destination: 'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        0,
        description="Rotate the log file at this size (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to accept and echo request correlation ids",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


def _build_app_settings() -> AppSettings:
    """Build app settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    However, static type checkers often treat required fields as required
    constructor arguments, which is not how BaseSettings is intended to be used.
    """

    return AppSettings()  # type: ignore[call-arg]


def _build_webhook_settings() -> WebhookSettings:
    return WebhookSettings()  # type: ignore[call-arg]


def _build_rate_limit_settings() -> RateLimitSettings:
    return RateLimitSettings()  # type: ignore[call-arg]


def _build_redis_settings() -> RedisSettings:
    return RedisSettings()  # type: ignore[call-arg]


def _build_log_settings() -> LogSettings:
    return LogSettings()  # type: ignore[call-arg]


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    webhook: WebhookSettings = Field(default_factory=_build_webhook_settings)
    rate_limit: RateLimitSettings = Field(default_factory=_build_rate_limit_settings)
    redis: RedisSettings = Field(default_factory=_build_redis_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
