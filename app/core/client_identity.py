"""Client identity extraction for rate limiting and audit logs.

The identity is a best-effort, opaque string: no IP syntax validation is
performed, and proxy headers are trusted as-is. Whether a proxy header can
be trusted is decided by the deployment, not here.

Precedence (first match wins):
1. ``X-Real-IP`` (set by the reverse proxy)
2. ``X-Forwarded-For`` (first entry of the chain)
3. Transport-level peer address
4. ``"unknown"``
"""

from __future__ import annotations

from typing import Mapping

from fastapi import Request

REAL_IP_HEADER = "x-real-ip"
FORWARDED_FOR_HEADER = "x-forwarded-for"
UNKNOWN_IDENTITY = "unknown"


def _get_header(headers: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive header lookup over any mapping."""
    value = headers.get(name)
    if value is not None:
        return value
    for key, candidate in headers.items():
        if key.lower() == name:
            return candidate
    return None


def extract_client_identity(
    headers: Mapping[str, str],
    peer_address: str | None = None,
) -> str:
    """Derive the client identity from request headers and peer address.

    Args:
        headers: Request headers (plain dict or Starlette ``Headers``).
        peer_address: Address of the directly connected peer, if known.

    Returns:
        Non-empty identity string.

    Examples:
        >>> extract_client_identity({"X-Forwarded-For": "1.2.3.4, 5.6.7.8"})
        '1.2.3.4'
        >>> extract_client_identity({})
        'unknown'
    """
    real_ip = (_get_header(headers, REAL_IP_HEADER) or "").strip()
    if real_ip:
        return real_ip

    forwarded_for = _get_header(headers, FORWARDED_FOR_HEADER)
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    if peer_address:
        return peer_address

    return UNKNOWN_IDENTITY


def client_identity_from_request(request: Request) -> str:
    """Resolve the identity of the client behind a FastAPI request."""
    peer = request.client.host if request.client else None
    return extract_client_identity(request.headers, peer)
