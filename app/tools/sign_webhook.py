"""Sign a webhook payload for manual testing.

Usage:
    python -m app.tools.sign_webhook '{"session_id": "test_123"}'
    echo -n "$PAYLOAD" | python -m app.tools.sign_webhook --secret s3cret

Prints the lowercase hex HMAC-SHA256 signature, ready to send as
``X-Signature: sha256=<signature>``. Without ``--secret`` the configured
WEBHOOK_SECRET is used.
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from app.core.config import settings
from app.core.webhook_security import compute_webhook_signature


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sign_webhook",
        description="Compute the HMAC-SHA256 signature of a webhook payload.",
    )
    parser.add_argument(
        "payload",
        nargs="?",
        help="Exact payload to sign (read from stdin when omitted)",
    )
    parser.add_argument(
        "--secret",
        default=None,
        help="Webhook secret (defaults to WEBHOOK_SECRET)",
    )
    parser.add_argument(
        "--prefix",
        action="store_true",
        help="Print as 'sha256=<hex>'",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    secret = args.secret if args.secret is not None else settings.webhook.secret
    if secret is None:
        print("Error: no secret given and WEBHOOK_SECRET is not set", file=sys.stderr)
        return 1

    payload = args.payload if args.payload is not None else sys.stdin.read()
    signature = compute_webhook_signature(payload, secret)
    print(f"sha256={signature}" if args.prefix else signature)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
