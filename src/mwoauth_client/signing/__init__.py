"""
MediaWiki OAuth client - Request Signing Module

OAuth 1.0a HMAC-SHA1 request signing.  The handshake depends only on the
:class:`Signer` interface; :class:`OAuth1Signer` is the default implementation.
"""

from .types import (
    HttpMethod,
    SignedCall,
    Signer,
    NonceGenerator,
    TimestampGenerator,
)

from .oauth1_signer import (
    OAuth1Signer,
    create_signer,
)

from .utils import (
    generate_nonce,
    generate_timestamp,
    split_url,
    merge_params,
    append_query,
)

# Public API exports
__all__ = [
    # Core signing functionality
    'OAuth1Signer',
    'create_signer',
    # Types
    'HttpMethod',
    'SignedCall',
    'Signer',
    'NonceGenerator',
    'TimestampGenerator',
    # Utilities
    'generate_nonce',
    'generate_timestamp',
    'split_url',
    'merge_params',
    'append_query',
]
