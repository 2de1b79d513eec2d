"""
Identity assertion verification

Validates the claims of a decoded identity JWT against the consumer key, the
canonical server and the nonce of the identify request that returned it.
"""

import logging
import time
from typing import Callable, Optional, Union

from ..exceptions import (
    ExpiredOrNotYetValidError,
    InvalidAudienceError,
    InvalidIssuerError,
    ReplayNonceError,
)
from ..tokens import ConsumerToken
from .jwt import constant_time_compare, decode_jwt
from .types import ClaimsValidationResult, IdentityClaims

logger = logging.getLogger(__name__)


def validate_claims(
    claims: IdentityClaims,
    consumer_key: str,
    expected_issuer: str,
    expected_nonce: str,
    now: Optional[float] = None,
    leeway: float = 0.0,
) -> ClaimsValidationResult:
    """
    Validate identity claims.
    
    Checks, in order: issuer, audience, issued-at/expiry window (inclusive on
    both ends, widened by ``leeway``) and nonce.  The first failing check
    decides the result.
    
    Args:
        claims: Decoded claims
        consumer_key: Our consumer key, the expected audience
        expected_issuer: The configured canonical server URL
        expected_nonce: Nonce of the identify request
        now: Current Unix time (read once from the wall clock if None)
        leeway: Clock skew allowance in seconds
    
    Returns:
        ClaimsValidationResult: Success, or the specific failure
    """
    if claims.issuer != expected_issuer:
        return ClaimsValidationResult.failure(InvalidIssuerError(
            "Invalid issuer",
            details={"expected": expected_issuer, "actual": claims.issuer}
        ))
    
    if claims.audience != consumer_key:
        return ClaimsValidationResult.failure(InvalidAudienceError(
            "Invalid audience",
            details={"expected": consumer_key, "actual": claims.audience}
        ))
    
    if now is None:
        now = time.time()
    if not claims.issued_at - leeway <= now <= claims.expires_at + leeway:
        return ClaimsValidationResult.failure(ExpiredOrNotYetValidError(
            "Identity assertion is expired or not yet valid",
            details={"now": now, "iat": claims.issued_at, "exp": claims.expires_at, "leeway": leeway}
        ))
    
    if not constant_time_compare(claims.nonce.encode('utf-8'), expected_nonce.encode('utf-8')):
        return ClaimsValidationResult.failure(ReplayNonceError(
            "Invalid nonce",
            details={"expected": expected_nonce, "actual": claims.nonce}
        ))
    
    return ClaimsValidationResult.success()


class IdentityVerifier:
    """
    Decodes and validates identity assertions for one consumer
    
    Attributes:
        consumer: Consumer credential; its secret keys the JWT signature and
            its key is the expected audience
        expected_issuer: Canonical server URL expected as ``iss``
        leeway: Clock skew allowance in seconds
        clock: Wall-clock source, read once per verification
    """
    
    def __init__(
        self,
        consumer: ConsumerToken,
        expected_issuer: str,
        leeway: float = 0.0,
        clock: Callable[[], float] = time.time,
    ):
        self.consumer = consumer
        self.expected_issuer = expected_issuer
        self.leeway = leeway
        self.clock = clock
    
    def verify(self, token: Union[str, bytes], expected_nonce: str) -> IdentityClaims:
        """
        Decode and validate an identity assertion.
        
        Args:
            token: Raw identify response body
            expected_nonce: Nonce of the identify request that returned ``token``
        
        Returns:
            IdentityClaims: Fully validated claims
        
        Raises:
            MalformedTokenError: If the token cannot be decoded
            IdentityValidationError: If the signature or any claim is invalid
        """
        claims = decode_jwt(token, self.consumer.secret)
        result = validate_claims(
            claims,
            self.consumer.key,
            self.expected_issuer,
            expected_nonce,
            now=self.clock(),
            leeway=self.leeway,
        )
        if not result.valid:
            logger.warning(f"Identity assertion rejected: {result.reason}")
            result.raise_for_failure()
        
        logger.info(f"Identity verified for user: {claims.username}")
        return claims
