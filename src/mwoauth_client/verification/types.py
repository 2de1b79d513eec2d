"""
Type definitions for identity assertion verification

This module provides the typed claim structure decoded from the identify JWT
and the result type returned by claim validation.
"""

import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional

from ..exceptions import IdentityValidationError, MalformedTokenError

# Registered claims every identity assertion must carry
REQUIRED_CLAIMS = ('iss', 'aud', 'iat', 'exp', 'nonce')


@dataclass(frozen=True)
class IdentityClaims:
    """
    Decoded payload of an identity assertion
    
    Attributes:
        issuer: ``iss``, the canonical server that minted the token
        audience: ``aud``, the consumer key the token is intended for
        issued_at: ``iat``, Unix time the token was issued
        expires_at: ``exp``, Unix time the token expires
        nonce: ``nonce``, the OAuth nonce of the identify request
        extra: All other claims (``username``, ``groups``, ``rights``, ...)
    """
    issuer: str
    audience: str
    issued_at: float
    expires_at: float
    nonce: str
    extra: Dict[str, Any] = field(default_factory=dict)
    
    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> 'IdentityClaims':
        """
        Build claims from a decoded JWT payload.
        
        Raises:
            MalformedTokenError: If a required claim is missing or has the wrong type
        """
        if not isinstance(payload, Mapping):
            raise MalformedTokenError("JWT payload must be a JSON object")
        
        missing = [name for name in REQUIRED_CLAIMS if name not in payload]
        if missing:
            raise MalformedTokenError(
                f"JWT payload is missing required claims: {', '.join(missing)}",
                details={"missing": missing}
            )
        
        for name in ('iss', 'aud', 'nonce'):
            if not isinstance(payload[name], str):
                raise MalformedTokenError(f"JWT claim '{name}' must be a string", details={"claim": name})
        
        for name in ('iat', 'exp'):
            value = payload[name]
            if isinstance(value, bool) or not isinstance(value, Real):
                raise MalformedTokenError(f"JWT claim '{name}' must be a number", details={"claim": name})
            if isinstance(value, float) and not math.isfinite(value):
                raise MalformedTokenError(f"JWT claim '{name}' must be finite", details={"claim": name})
        
        return cls(
            issuer=payload['iss'],
            audience=payload['aud'],
            issued_at=payload['iat'],
            expires_at=payload['exp'],
            nonce=payload['nonce'],
            extra={k: v for k, v in payload.items() if k not in REQUIRED_CLAIMS},
        )
    
    def to_dict(self) -> Dict[str, Any]:
        """Return the claims as the original JWT payload."""
        payload = dict(self.extra)
        payload.update({
            'iss': self.issuer,
            'aud': self.audience,
            'iat': self.issued_at,
            'exp': self.expires_at,
            'nonce': self.nonce,
        })
        return payload
    
    def __getitem__(self, name: str) -> Any:
        return self.to_dict()[name]
    
    def get(self, name: str, default: Any = None) -> Any:
        return self.to_dict().get(name, default)
    
    @property
    def username(self) -> Optional[str]:
        return self.extra.get('username')
    
    @property
    def groups(self) -> List[str]:
        return list(self.extra.get('groups', []))
    
    @property
    def rights(self) -> List[str]:
        return list(self.extra.get('rights', []))


@dataclass(frozen=True)
class ClaimsValidationResult:
    """
    Outcome of claim validation
    
    Attributes:
        error: The specific validation failure, None when all checks passed
    """
    error: Optional[IdentityValidationError] = None
    
    @classmethod
    def success(cls) -> 'ClaimsValidationResult':
        return cls()
    
    @classmethod
    def failure(cls, error: IdentityValidationError) -> 'ClaimsValidationResult':
        return cls(error=error)
    
    @property
    def valid(self) -> bool:
        return self.error is None
    
    @property
    def reason(self) -> Optional[str]:
        """Error code of the failed check, e.g. ``INVALID_ISSUER``."""
        return self.error.error_code if self.error else None
    
    def raise_for_failure(self) -> None:
        """Raise the validation error if any check failed."""
        if self.error is not None:
            raise self.error
    
    def __bool__(self) -> bool:
        return self.valid
