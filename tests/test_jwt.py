"""
Unit tests for identity JWT decoding and signature checks
"""

import hmac
import json
from unittest.mock import patch

import pytest
from cryptography.hazmat.primitives import constant_time
from jwt.utils import base64url_decode

from mwoauth_client.exceptions import InvalidSignatureError, MalformedTokenError
from mwoauth_client.verification import (
    IdentityClaims,
    constant_time_compare,
    decode_jwt,
)

from conftest import CONSUMER_SECRET, b64url, forge_jwt, identity_payload, make_jwt, sign_segments


def flip_signature_byte(token: str, position: int) -> str:
    header_b64, payload_b64, signature_b64 = token.split('.')
    signature = bytearray(base64url_decode(signature_b64))
    signature[position] ^= 0x01
    return f"{header_b64}.{payload_b64}.{b64url(bytes(signature))}"


class TestConstantTimeCompare:
    """Test constant-time comparison"""

    def test_equal(self):
        assert constant_time_compare(b"signature", b"signature")

    def test_differs_at_any_position(self):
        expected = bytes(range(32))
        for position in range(len(expected)):
            actual = bytearray(expected)
            actual[position] ^= 0xFF
            assert not constant_time_compare(expected, bytes(actual))

    def test_length_mismatch(self):
        assert not constant_time_compare(b"abc", b"abcd")
        assert not constant_time_compare(b"abcd", b"abc")
        assert not constant_time_compare(b"", b"a")

    def test_non_bytes(self):
        assert not constant_time_compare(b"abc", "abc")

    def test_delegates_to_non_short_circuit_primitive(self):
        with patch.object(constant_time, 'bytes_eq', wraps=constant_time.bytes_eq) as spy:
            assert not constant_time_compare(b"\x00" * 32, b"\x01" + b"\x00" * 31)
        spy.assert_called_once_with(b"\x00" * 32, b"\x01" + b"\x00" * 31)


class TestDecodeJwt:
    """Test JWT decoding"""

    def test_round_trip(self):
        payload = identity_payload("nonce-1", now=1700000000)
        claims = decode_jwt(make_jwt(payload), CONSUMER_SECRET)

        assert isinstance(claims, IdentityClaims)
        assert claims.to_dict() == payload
        assert claims.issuer == payload["iss"]
        assert claims.audience == payload["aud"]
        assert claims.issued_at == 1700000000
        assert claims.expires_at == 1700000100
        assert claims.nonce == "nonce-1"
        assert claims.username == "Example User"
        assert claims.groups == ["*", "user", "autoconfirmed"]
        assert claims.rights == ["read", "edit"]
        assert claims["editcount"] == 42
        assert claims.get("missing", "default") == "default"

    def test_expired_token_still_decodes(self):
        # Time window is checked by validate_claims, not while decoding
        payload = identity_payload("nonce-1", now=1000)
        assert decode_jwt(make_jwt(payload), CONSUMER_SECRET).expires_at == 1100

    def test_numeric_subject_accepted(self):
        payload = identity_payload("nonce-1", sub=12345)
        token = sign_segments(b64url(json.dumps({"typ": "JWT", "alg": "HS256"}).encode()),
                              b64url(json.dumps(payload).encode()))
        assert decode_jwt(token, CONSUMER_SECRET)["sub"] == 12345

    def test_accepts_bytes_and_trailing_newline(self):
        payload = identity_payload("nonce-1")
        token = (make_jwt(payload) + "\n").encode('ascii')
        assert decode_jwt(token, CONSUMER_SECRET).to_dict() == payload

    def test_padded_segments(self):
        header_b64 = b64url(json.dumps({"alg": "HS256"}).encode()) + "=="
        payload_b64 = b64url(json.dumps(identity_payload("nonce-1")).encode())
        payload_b64 += "=" * (-len(payload_b64) % 4)
        assert decode_jwt(sign_segments(header_b64, payload_b64), CONSUMER_SECRET).nonce == "nonce-1"

    @pytest.mark.parametrize("token", ["a.b", "a.b.c.d", "abc", ""])
    def test_wrong_segment_count(self, token):
        with pytest.raises(MalformedTokenError) as exc_info:
            decode_jwt(token, CONSUMER_SECRET)
        assert exc_info.value.details["segments"] == token.count('.') + 1

    @pytest.mark.parametrize("char", ["+", "/"])
    def test_standard_base64_alphabet_rejected(self, char):
        header_b64, payload_b64, signature_b64 = make_jwt(identity_payload("nonce-1")).split('.')
        token = f"{header_b64}.{payload_b64}.{signature_b64[:-1]}{char}"
        with pytest.raises(MalformedTokenError) as exc_info:
            decode_jwt(token, CONSUMER_SECRET)
        assert exc_info.value.details["segment"] == 2

    def test_wrong_secret(self):
        token = make_jwt(identity_payload("nonce-1"), secret="other-secret")
        with pytest.raises(InvalidSignatureError):
            decode_jwt(token, CONSUMER_SECRET)

    def test_every_signature_byte_is_checked(self):
        token = make_jwt(identity_payload("nonce-1"))
        for position in range(32):
            with pytest.raises(InvalidSignatureError):
                decode_jwt(flip_signature_byte(token, position), CONSUMER_SECRET)

    def test_truncated_signature(self):
        header_b64, payload_b64, signature_b64 = make_jwt(identity_payload("nonce-1")).split('.')
        signature = base64url_decode(signature_b64)[:-1]
        with pytest.raises(InvalidSignatureError):
            decode_jwt(f"{header_b64}.{payload_b64}.{b64url(signature)}", CONSUMER_SECRET)

    def test_none_algorithm_rejected(self):
        header_b64 = b64url(json.dumps({"typ": "JWT", "alg": "none"}).encode())
        payload_b64 = b64url(json.dumps(identity_payload("nonce-1")).encode())
        with pytest.raises(InvalidSignatureError) as exc_info:
            decode_jwt(f"{header_b64}.{payload_b64}.", CONSUMER_SECRET)
        assert exc_info.value.details["alg"] == "none"

    @pytest.mark.parametrize("alg", ["HS512", "RS256", "hs256", None])
    def test_non_hs256_algorithm_rejected_even_with_valid_hmac(self, alg):
        token = forge_jwt({"typ": "JWT", "alg": alg}, identity_payload("nonce-1"))
        with pytest.raises(InvalidSignatureError) as exc_info:
            decode_jwt(token, CONSUMER_SECRET)
        assert exc_info.value.details["alg"] == alg

    def test_signature_comparison_is_constant_time(self):
        token = make_jwt(identity_payload("nonce-1"))
        with patch.object(hmac, 'compare_digest', wraps=hmac.compare_digest) as spy:
            with pytest.raises(InvalidSignatureError):
                decode_jwt(flip_signature_byte(token, 0), CONSUMER_SECRET)
        assert spy.call_count == 1

    def test_invalid_json_payload(self):
        token = sign_segments(b64url(json.dumps({"alg": "HS256"}).encode()), b64url(b"not json"))
        with pytest.raises(MalformedTokenError):
            decode_jwt(token, CONSUMER_SECRET)

    def test_non_object_payload(self):
        token = sign_segments(b64url(json.dumps({"alg": "HS256"}).encode()), b64url(b"[1, 2]"))
        with pytest.raises(MalformedTokenError):
            decode_jwt(token, CONSUMER_SECRET)

    def test_non_object_header(self):
        header_b64 = b64url(b'["HS256"]')
        payload_b64 = b64url(json.dumps(identity_payload("nonce-1")).encode())
        with pytest.raises(MalformedTokenError):
            decode_jwt(f"{header_b64}.{payload_b64}.{b64url(b'x')}", CONSUMER_SECRET)

    def test_non_ascii_token(self):
        with pytest.raises(MalformedTokenError):
            decode_jwt("héader.payload.sig".encode('utf-8'), CONSUMER_SECRET)

    @pytest.mark.parametrize("claim", ["iss", "aud", "iat", "exp", "nonce"])
    def test_missing_required_claim(self, claim):
        payload = identity_payload("nonce-1")
        del payload[claim]
        with pytest.raises(MalformedTokenError) as exc_info:
            decode_jwt(make_jwt(payload), CONSUMER_SECRET)
        assert exc_info.value.details["missing"] == [claim]

    @pytest.mark.parametrize("claim, value", [
        ("iat", "1700000000"),
        ("exp", True),
        ("aud", ["consumer-key"]),
        ("nonce", 12345),
        ("nonce", None),
        ("iat", float("nan")),
        ("exp", float("nan")),
        ("exp", float("inf")),
        ("iat", float("-inf")),
    ])
    def test_wrongly_typed_claim(self, claim, value):
        payload = identity_payload("nonce-1")
        payload[claim] = value
        with pytest.raises(MalformedTokenError) as exc_info:
            decode_jwt(make_jwt(payload), CONSUMER_SECRET)
        assert exc_info.value.details["claim"] == claim

    def test_signature_checked_before_claims(self):
        payload = identity_payload("nonce-1")
        del payload["nonce"]
        with pytest.raises(InvalidSignatureError):
            decode_jwt(make_jwt(payload, secret="other-secret"), CONSUMER_SECRET)
