"""HMAC signature verification for inbound webhooks.

Webhook senders sign the raw request body with HMAC-SHA256 using a shared
secret and send the lowercase hex digest in a header. Verification is a pure
function of (payload, signature, secret): the secret is passed in by the
caller, never read from global state here.

Accepted header shapes:
- Plain hex: ``"abc123def456"``
- Algorithm prefix: ``"sha256=abc123def456"``
- Either of the above with surrounding whitespace
"""

from __future__ import annotations

import hashlib
import hmac

from app.core.config import settings


def _as_bytes(value: str | bytes) -> bytes:
    return value if isinstance(value, bytes) else value.encode("utf-8")


def compute_webhook_signature(payload: str | bytes, secret: str) -> str:
    """Compute the lowercase hex HMAC-SHA256 of ``payload`` keyed by ``secret``.

    Args:
        payload: Exact request body. Strings are encoded as UTF-8.
        secret: Shared webhook secret. An empty secret is a valid HMAC key.

    Returns:
        64-character lowercase hex digest.
    """
    return hmac.new(_as_bytes(secret), _as_bytes(payload), hashlib.sha256).hexdigest()


def verify_webhook_signature(
    payload: str | bytes,
    signature: str | None,
    secret: str,
) -> bool:
    """Check that ``signature`` was produced from ``payload`` with ``secret``.

    Never raises for bad input: a missing, malformed or wrong signature is a
    plain ``False``.

    The length check runs before decoding and comparison; length is not
    secret. Equal-length signatures are compared with
    ``hmac.compare_digest`` so timing does not reveal where they differ.

    Args:
        payload: Raw request body, byte-exact as received.
        signature: Hex signature extracted from the request header.
        secret: Shared webhook secret.

    Returns:
        True if the signature is valid, False otherwise.
    """
    if not signature:
        return False

    expected = compute_webhook_signature(payload, secret)
    if len(signature) != len(expected):
        return False

    try:
        supplied_bytes = bytes.fromhex(signature)
    except ValueError:
        return False

    return hmac.compare_digest(supplied_bytes, bytes.fromhex(expected))


def extract_signature_from_header(header_value: str | None) -> str | None:
    """Normalize a raw signature header value to the bare hex signature.

    Args:
        header_value: Header value, e.g. ``"sha256=abc123"`` or ``" abc123 "``.

    Returns:
        Extracted signature, or None when nothing is left after trimming.

    Examples:
        >>> extract_signature_from_header("sha256=abcd")
        'abcd'
        >>> extract_signature_from_header("  abcd  ")
        'abcd'
        >>> extract_signature_from_header("a=b=c")
        'b=c'
        >>> extract_signature_from_header("") is None
        True
    """
    if not header_value:
        return None

    trimmed = header_value.strip()
    if "=" in trimmed:
        _, _, signature = trimmed.partition("=")
        return signature.strip() or None

    return trimmed or None


def parse_signature_headers(names: str | None) -> list[str]:
    """Parse the comma-separated list of signature header names.

    Examples:
        >>> parse_signature_headers("X-Signature, X-Hub-Signature-256")
        ['X-Signature', 'X-Hub-Signature-256']
        >>> parse_signature_headers(None)
        []
    """
    if not names:
        return []
    return [name.strip() for name in names.split(",") if name.strip()]


def get_webhook_secret() -> str | None:
    """Return the configured webhook secret.

    ``None`` means WEBHOOK_SECRET is not set at all; ``""`` means it is set
    but empty. Used as a FastAPI dependency so tests can override it.
    """
    return settings.webhook.secret
