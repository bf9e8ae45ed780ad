"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    code: str
    message: str
    hint: str
    session_id: str
    fields: list[dict[str, str]]
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input validation fails."""


class AuthenticationAppError(AppError):
    """Raised when a webhook request cannot be authenticated."""


class ConflictAppError(AppError):
    """Raised when a resource already exists (e.g., duplicate session)."""


class ConfigurationAppError(AppError):
    """Raised when required server configuration is missing."""


@dataclass
class RateLimitExceededAppError(AppError):
    """Raised when a client has used up its request budget.

    Attributes:
        headers: Rate limit headers (``X-RateLimit-*``, ``Retry-After``) to
            send with the 429 response.
    """

    headers: dict[str, str] = field(default_factory=dict)
