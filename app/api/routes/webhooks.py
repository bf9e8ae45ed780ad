"""Session-completed webhook endpoint.

Flow:
1. Rate limit by client identity (dependency, before any hashing work)
2. Read the raw body (signature covers the exact bytes)
3. Verify the HMAC signature against the configured secret
4. Validate the JSON payload
5. Hand the derived session record to the session sink
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from app.adapters.session_sink.base import AbstractSessionSink
from app.adapters.session_sink.factory import create_session_sink
from app.core.client_identity import client_identity_from_request
from app.core.config import settings
from app.core.errors import AuthenticationAppError, ConfigurationAppError, ValidationAppError
from app.core.logging import hash_identity
from app.core.rate_limit import enforce_webhook_rate_limit
from app.core.webhook_security import (
    extract_signature_from_header,
    get_webhook_secret,
    parse_signature_headers,
    verify_webhook_signature,
)
from app.schemas.webhook import SessionCompletedPayload, WebhookAcceptedResponse
from app.services.session_ingest import ingest_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Webhooks"])

_session_sink: AbstractSessionSink | None = None


def get_session_sink() -> AbstractSessionSink:
    """Return the process-wide session sink, creating it on first use.

    The default ``memory`` sink is per-process: ``queued`` in the response
    means the record reached that sink, not durable storage.
    """

    global _session_sink

    if _session_sink is None:
        _session_sink = create_session_sink()

    return _session_sink


def _find_signature_header(request: Request) -> str | None:
    """Return the first configured signature header present on the request."""
    for name in parse_signature_headers(settings.webhook.signature_headers):
        value = request.headers.get(name)
        if value:
            return value
    return None


def _authenticate(request: Request, raw_body: bytes, secret: str | None) -> None:
    """Verify the webhook signature or raise.

    Raises:
        ConfigurationAppError: WEBHOOK_SECRET is not set.
        AuthenticationAppError: Signature missing, malformed or invalid.
    """
    if secret is None:
        logger.error("webhook.secret_not_configured")
        raise ConfigurationAppError(
            code="webhook_secret_not_configured",
            message="Webhook secret not configured",
        )

    identity_hash = hash_identity(client_identity_from_request(request))

    header_value = _find_signature_header(request)
    if not header_value:
        logger.warning("webhook.signature_missing", extra={"identity_hash": identity_hash})
        raise AuthenticationAppError(
            code="missing_signature",
            message="Missing signature header",
        )

    signature = extract_signature_from_header(header_value)
    if not signature:
        logger.warning(
            "webhook.signature_invalid",
            extra={"identity_hash": identity_hash, "reason": "invalid_format"},
        )
        raise AuthenticationAppError(
            code="invalid_signature_format",
            message="Invalid signature format",
        )

    if not verify_webhook_signature(raw_body, signature, secret):
        logger.warning(
            "webhook.signature_invalid",
            extra={"identity_hash": identity_hash, "reason": "mismatch"},
        )
        raise AuthenticationAppError(
            code="invalid_signature",
            message="Invalid signature",
        )

    logger.info("webhook.signature_valid", extra={"identity_hash": identity_hash})


def _parse_payload(raw_body: bytes) -> SessionCompletedPayload:
    """Validate the raw JSON body.

    Raises:
        ValidationAppError: Body is not valid JSON or fails schema validation.
    """
    try:
        return SessionCompletedPayload.model_validate_json(raw_body)
    except ValidationError as exc:
        fields = [
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        raise ValidationAppError(
            code="invalid_payload",
            message="Invalid payload",
            details={"fields": fields},
        ) from exc


@router.post(
    "/api/webhooks/session-completed",
    response_model=WebhookAcceptedResponse,
    dependencies=[Depends(enforce_webhook_rate_limit)],
)
async def session_completed(
    request: Request,
    secret: str | None = Depends(get_webhook_secret),
    sink: AbstractSessionSink = Depends(get_session_sink),
) -> WebhookAcceptedResponse:
    """Receive a session-completed event from the tutoring platform.

    Returns:
        WebhookAcceptedResponse once the session is handed off.

    Raises:
        RateLimitExceededAppError: 429 when the caller is rate limited.
        AuthenticationAppError: 401 on missing or invalid signature.
        ValidationAppError: 400 on malformed payload.
        ConflictAppError: 409 when the session was already received.
        ConfigurationAppError: 500 when no webhook secret is configured.
    """
    raw_body = await request.body()

    _authenticate(request, raw_body, secret)
    payload = _parse_payload(raw_body)
    record = await ingest_session(payload, sink)

    return WebhookAcceptedResponse(
        success=True,
        session_id=record.session_id,
        queued=True,
        message="Session received and queued for processing",
    )
