"""
MediaWiki OAuth client
OAuth 1.0a three-legged handshake with verified identity assertions
"""

from .version import __version__
from .tokens import (
    Credential,
    ConsumerToken,
    RequestToken,
    AccessToken,
)
from .exceptions import (
    MWOAuthError,
    ConfigurationError,
    SigningError,
    TransportError,
    CallbackNotConfirmedError,
    MalformedResponseError,
    ProviderError,
    MalformedTokenError,
    IdentityValidationError,
    InvalidSignatureError,
    InvalidIssuerError,
    InvalidAudienceError,
    ExpiredOrNotYetValidError,
    ReplayNonceError,
)
from .config import (
    ClientConfig,
    ClientSettings,
    load_settings_from_dict,
    load_settings_from_json,
    load_settings_from_file,
    load_settings_from_env,
)
from .signing import (
    HttpMethod,
    SignedCall,
    Signer,
    OAuth1Signer,
    create_signer,
    generate_nonce,
)
from .http_client import (
    Transport,
    RequestsTransport,
)
from .verification import (
    IdentityClaims,
    ClaimsValidationResult,
    IdentityVerifier,
    decode_jwt,
    validate_claims,
    constant_time_compare,
)
from .handshaker import (
    Handshaker,
    HandshakeState,
    OAuthResponse,
)

# Public API exports
__all__ = [
    '__version__',
    # Tokens
    'Credential',
    'ConsumerToken',
    'RequestToken',
    'AccessToken',
    # Exceptions
    'MWOAuthError',
    'ConfigurationError',
    'SigningError',
    'TransportError',
    'CallbackNotConfirmedError',
    'MalformedResponseError',
    'ProviderError',
    'MalformedTokenError',
    'IdentityValidationError',
    'InvalidSignatureError',
    'InvalidIssuerError',
    'InvalidAudienceError',
    'ExpiredOrNotYetValidError',
    'ReplayNonceError',
    # Configuration
    'ClientConfig',
    'ClientSettings',
    'load_settings_from_dict',
    'load_settings_from_json',
    'load_settings_from_file',
    'load_settings_from_env',
    # Signing
    'HttpMethod',
    'SignedCall',
    'Signer',
    'OAuth1Signer',
    'create_signer',
    'generate_nonce',
    # Transport
    'Transport',
    'RequestsTransport',
    # Identity verification
    'IdentityClaims',
    'ClaimsValidationResult',
    'IdentityVerifier',
    'decode_jwt',
    'validate_claims',
    'constant_time_compare',
    # Handshake
    'Handshaker',
    'HandshakeState',
    'OAuthResponse',
]
