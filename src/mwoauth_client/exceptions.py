"""
Exception classes for the MediaWiki OAuth client
"""

from typing import Optional, Dict, Any


class MWOAuthError(Exception):
    """Base exception for all MediaWiki OAuth client errors"""
    
    default_code = "UNKNOWN_ERROR"
    
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}


class ConfigurationError(MWOAuthError):
    """Exception raised for invalid or missing client configuration"""
    default_code = "INVALID_CONFIG"


class SigningError(MWOAuthError):
    """Exception raised when the OAuth signer cannot produce a signed call"""
    default_code = "SIGNING_FAILED"


class TransportError(MWOAuthError):
    """Exception raised for network, TLS or HTTP status failures"""
    
    default_code = "TRANSPORT_ERROR"
    
    def __init__(self, message: str, error_code: Optional[str] = None,
                 http_status: int = 0, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status


class CallbackNotConfirmedError(MWOAuthError):
    """The provider did not confirm the out-of-band callback; restart the handshake"""
    default_code = "CALLBACK_NOT_CONFIRMED"


class MalformedResponseError(MWOAuthError):
    """Exception raised when a provider response does not have the expected shape"""
    default_code = "MALFORMED_RESPONSE"


class ProviderError(MalformedResponseError):
    """The provider answered with an error document instead of the expected payload"""
    default_code = "PROVIDER_ERROR"


class MalformedTokenError(MWOAuthError):
    """Exception raised when an identity JWT cannot be decoded"""
    default_code = "MALFORMED_TOKEN"


class IdentityValidationError(MWOAuthError):
    """Base exception for identity assertion validation failures"""
    default_code = "IDENTITY_INVALID"


class InvalidSignatureError(IdentityValidationError):
    """JWT algorithm is not HS256 or its signature does not match"""
    default_code = "INVALID_SIGNATURE"


class InvalidIssuerError(IdentityValidationError):
    """JWT was not issued by the expected canonical server"""
    default_code = "INVALID_ISSUER"


class InvalidAudienceError(IdentityValidationError):
    """JWT was minted for a different consumer"""
    default_code = "INVALID_AUDIENCE"


class ExpiredOrNotYetValidError(IdentityValidationError):
    """Current time is outside the JWT's issued-at/expiry window"""
    default_code = "INVALID_TIME"


class ReplayNonceError(IdentityValidationError):
    """JWT nonce does not match the nonce of the identify request"""
    default_code = "INVALID_NONCE"
