"""Unit tests for webhook HMAC signature verification."""

import hashlib
import hmac
from unittest.mock import patch

import pytest

from app.core.webhook_security import (
    compute_webhook_signature,
    extract_signature_from_header,
    get_webhook_secret,
    parse_signature_headers,
    verify_webhook_signature,
)

SECRET = "test-secret"
PAYLOAD = '{"session_id":"test_123","tutor_id":"tutor_456"}'


def _sign(payload: str, secret: str = SECRET) -> str:
    return hmac.new(secret.encode(), payload.encode(), hashlib.sha256).hexdigest()


class TestComputeWebhookSignature:
    """Test signature computation."""

    def test_matches_reference_hmac(self) -> None:
        assert compute_webhook_signature(PAYLOAD, SECRET) == _sign(PAYLOAD)

    def test_is_lowercase_hex_of_sha256_length(self) -> None:
        signature = compute_webhook_signature(PAYLOAD, SECRET)
        assert len(signature) == 64
        assert signature == signature.lower()
        int(signature, 16)

    def test_bytes_and_str_payloads_agree(self) -> None:
        assert compute_webhook_signature(PAYLOAD.encode(), SECRET) == compute_webhook_signature(
            PAYLOAD, SECRET
        )

    def test_empty_secret_is_a_valid_key(self) -> None:
        assert compute_webhook_signature(PAYLOAD, "") == _sign(PAYLOAD, "")


class TestVerifyWebhookSignature:
    """Test signature verification."""

    @pytest.mark.parametrize(
        "payload,secret",
        [
            (PAYLOAD, SECRET),
            ("", SECRET),
            ("plain text body", "another-secret"),
            ('{"emoji":"é中"}', "kéy"),
            (PAYLOAD, ""),
        ],
    )
    def test_accepts_valid_signature(self, payload: str, secret: str) -> None:
        assert verify_webhook_signature(payload, _sign(payload, secret), secret) is True

    def test_accepts_raw_bytes_payload(self) -> None:
        assert verify_webhook_signature(PAYLOAD.encode(), _sign(PAYLOAD), SECRET) is True

    def test_accepts_uppercase_hex(self) -> None:
        assert verify_webhook_signature(PAYLOAD, _sign(PAYLOAD).upper(), SECRET) is True

    @pytest.mark.parametrize("signature", [None, ""])
    def test_rejects_missing_signature(self, signature) -> None:
        assert verify_webhook_signature(PAYLOAD, signature, SECRET) is False

    def test_rejects_wrong_secret(self) -> None:
        assert verify_webhook_signature(PAYLOAD, _sign(PAYLOAD, "other"), SECRET) is False

    def test_rejects_modified_payload(self) -> None:
        signature = _sign(PAYLOAD)
        assert verify_webhook_signature(PAYLOAD + " ", signature, SECRET) is False

    def test_rejects_any_single_character_flip(self) -> None:
        signature = _sign(PAYLOAD)
        for index, char in enumerate(signature):
            replacement = "0" if char != "0" else "1"
            tampered = signature[:index] + replacement + signature[index + 1 :]
            assert verify_webhook_signature(PAYLOAD, tampered, SECRET) is False

    @pytest.mark.parametrize(
        "signature",
        [
            "abc123",
            "z" * 64,
            "g" + "0" * 63,
            "sha256=" + "0" * 57,
            "é" * 64,
        ],
    )
    def test_rejects_malformed_signature_without_raising(self, signature: str) -> None:
        assert verify_webhook_signature(PAYLOAD, signature, SECRET) is False

    def test_length_mismatch_skips_constant_time_comparison(self) -> None:
        with patch("app.core.webhook_security.hmac.compare_digest") as compare:
            assert verify_webhook_signature(PAYLOAD, _sign(PAYLOAD)[:-2], SECRET) is False
            assert verify_webhook_signature(PAYLOAD, _sign(PAYLOAD) + "00", SECRET) is False

        compare.assert_not_called()

    def test_equal_length_uses_constant_time_comparison(self) -> None:
        with patch(
            "app.core.webhook_security.hmac.compare_digest", return_value=True
        ) as compare:
            assert verify_webhook_signature(PAYLOAD, "0" * 64, SECRET) is True

        compare.assert_called_once()
        supplied, expected = compare.call_args.args
        assert supplied == bytes(32)
        assert expected == bytes.fromhex(_sign(PAYLOAD))


class TestExtractSignatureFromHeader:
    """Test header value normalization."""

    @pytest.mark.parametrize(
        "header_value,expected",
        [
            ("abcd", "abcd"),
            ("sha256=abcd", "abcd"),
            ("  abcd  ", "abcd"),
            ("  sha256=abcd  ", "abcd"),
            ("sha256= abcd ", "abcd"),
            ("a=b=c", "b=c"),
        ],
    )
    def test_extracts_signature(self, header_value: str, expected: str) -> None:
        assert extract_signature_from_header(header_value) == expected

    @pytest.mark.parametrize("header_value", [None, "", "   ", "sha256=", "sha256=   "])
    def test_empty_result_means_absent(self, header_value) -> None:
        assert extract_signature_from_header(header_value) is None

    def test_extracted_signature_verifies(self) -> None:
        header = f"sha256={_sign(PAYLOAD)}"
        signature = extract_signature_from_header(header)
        assert verify_webhook_signature(PAYLOAD, signature, SECRET) is True


class TestSignatureHeaderConfig:
    """Test parsing of configured signature header names."""

    def test_parses_names_in_order(self) -> None:
        assert parse_signature_headers(" X-Signature ,X-Hub-Signature-256,, ") == [
            "X-Signature",
            "X-Hub-Signature-256",
        ]

    @pytest.mark.parametrize("value", [None, "", " , "])
    def test_empty_config_yields_no_headers(self, value) -> None:
        assert parse_signature_headers(value) == []


class TestGetWebhookSecret:
    """Absent and empty secrets must stay distinguishable."""

    @patch("app.core.webhook_security.settings")
    def test_absent_secret_is_none(self, mock_settings) -> None:
        mock_settings.webhook.secret = None
        assert get_webhook_secret() is None

    @patch("app.core.webhook_security.settings")
    def test_empty_secret_is_empty_string(self, mock_settings) -> None:
        mock_settings.webhook.secret = ""
        assert get_webhook_secret() == ""
