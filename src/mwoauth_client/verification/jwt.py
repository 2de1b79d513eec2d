"""
Compact JWT decoding for identity assertions

MediaWiki signs identity assertions with HMAC-SHA256 keyed by the consumer
secret.  Only ``HS256`` is accepted, so a token claiming ``none`` or an
asymmetric algorithm never validates.  PyJWT checks the signature; the
registered claims are validated afterwards by :func:`validate_claims`, which
reports a specific failure reason for each of them.
"""

import re
from typing import Optional, Union

import jwt
from cryptography.hazmat.primitives import constant_time

from ..exceptions import InvalidSignatureError, MalformedTokenError
from .types import IdentityClaims

EXPECTED_ALGORITHM = 'HS256'

# Unpadded or padded base64url, never the standard alphabet
SEGMENT_PATTERN = re.compile(r'[A-Za-z0-9_-]*={0,2}')

# Claim checks are left to validate_claims
DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}


def constant_time_compare(expected: bytes, actual: bytes) -> bool:
    """
    Compare two byte strings in time independent of where they differ.

    A length mismatch is decided by an initial fixed check; equal-length
    inputs are compared without short-circuiting.
    """
    if not isinstance(expected, bytes) or not isinstance(actual, bytes):
        return False
    return constant_time.bytes_eq(expected, actual)


def _unverified_alg(token: str) -> Optional[str]:
    try:
        return jwt.get_unverified_header(token).get('alg')
    except jwt.DecodeError:
        return None


def decode_jwt(token: Union[str, bytes], shared_secret: str) -> IdentityClaims:
    """
    Decode a compact JWT and verify its HS256 signature.

    Args:
        token: Compact ``header.payload.signature`` token
        shared_secret: The consumer secret

    Returns:
        IdentityClaims: The verified payload

    Raises:
        MalformedTokenError: If the token is not three base64url JSON segments
            or a required claim is missing
        InvalidSignatureError: If the algorithm is not HS256 or the signature
            does not match
    """
    if isinstance(token, bytes):
        try:
            token = token.decode('ascii')
        except UnicodeDecodeError:
            raise MalformedTokenError("JWT must be ASCII")

    token = token.strip()
    segments = token.count('.') + 1
    if segments != 3:
        raise MalformedTokenError(
            f"JWT must have exactly three segments, got {segments}",
            details={"segments": segments}
        )
    for index, segment in enumerate(token.split('.')):
        if not SEGMENT_PATTERN.fullmatch(segment):
            raise MalformedTokenError(
                "JWT segments must be base64url encoded",
                details={"segment": index}
            )

    try:
        payload = jwt.decode(
            token,
            shared_secret,
            algorithms=[EXPECTED_ALGORITHM],
            options=DECODE_OPTIONS,
        )
    except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as e:
        raise InvalidSignatureError(
            "Invalid JWT signature from /identify",
            details={"alg": _unverified_alg(token), "original_error": str(e)}
        )
    except jwt.DecodeError as e:
        raise MalformedTokenError(f"Malformed JWT: {e}")
    except jwt.InvalidTokenError as e:
        raise MalformedTokenError(f"Invalid JWT: {e}")

    return IdentityClaims.from_payload(payload)
