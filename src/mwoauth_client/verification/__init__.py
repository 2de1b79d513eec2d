"""
MediaWiki OAuth client - Identity Verification Module

Decoding and validation of the signed identity assertions (JWTs) returned by
the provider's identify endpoint.
"""

from .types import (
    IdentityClaims,
    ClaimsValidationResult,
    REQUIRED_CLAIMS,
)

from .jwt import (
    decode_jwt,
    constant_time_compare,
    EXPECTED_ALGORITHM,
)

from .verifier import (
    IdentityVerifier,
    validate_claims,
)

__all__ = [
    # Types
    'IdentityClaims',
    'ClaimsValidationResult',
    'REQUIRED_CLAIMS',
    # JWT decoding
    'decode_jwt',
    'constant_time_compare',
    'EXPECTED_ALGORITHM',
    # Validation
    'IdentityVerifier',
    'validate_claims',
]
