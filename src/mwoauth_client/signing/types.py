"""
Type definitions for OAuth 1.0a request signing

This module defines the signed-call value produced by a signer and the
:class:`Signer` interface the handshake depends on.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional, Protocol, runtime_checkable

from ..tokens import ConsumerToken, Credential


class HttpMethod(str, Enum):
    """HTTP methods used for signed calls"""
    GET = "GET"
    POST = "POST"


@dataclass(frozen=True)
class SignedCall:
    """
    A request signed for a single round trip
    
    Attributes:
        method: HTTP method
        url: Final request URL, including the signed query parameters
        params: Merged query/extra parameters covered by the signature
        headers: Headers to send, including ``Authorization``
        nonce: The ``oauth_nonce`` generated for this call
        token: Request or access token used to sign, None for unauthenticated calls
        body: Form-encoded body for POST calls
    """
    method: HttpMethod
    url: str
    params: Dict[str, str]
    headers: Dict[str, str]
    nonce: str
    token: Optional[Credential] = None
    body: Optional[str] = None
    
    def __post_init__(self):
        if not self.url:
            raise ValueError("Signed call URL cannot be empty")
        if not self.nonce:
            raise ValueError("Signed call nonce cannot be empty")


@runtime_checkable
class Signer(Protocol):
    """Produces signed calls from a consumer credential and an optional token"""
    
    def sign(
        self,
        consumer: ConsumerToken,
        token: Optional[Credential],
        method: HttpMethod,
        url: str,
        params: Dict[str, str],
        body: Optional[str] = None,
    ) -> SignedCall:
        """Sign a request; ``params`` is the complete query parameter set."""
        ...


# Type aliases for convenience
NonceGenerator = Callable[[], str]
TimestampGenerator = Callable[[], int]
HeaderDict = Dict[str, str]
