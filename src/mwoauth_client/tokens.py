"""
Key/secret pairs used to identify the actors of an OAuth handshake.

:class:`ConsumerToken` represents the application (you), as registered on the
wiki's ``Special:OAuthConsumerRegistration``.  :class:`RequestToken` is the
temporary credential returned by ``initiate``, and :class:`AccessToken` the
authorized credential returned by ``complete``.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Credential:
    """
    Immutable key/secret pair
    
    Attributes:
        key: Public identifier of the credential
        secret: Shared secret used to sign requests
    """
    key: str
    secret: str
    
    def __post_init__(self):
        if not isinstance(self.key, str) or not self.key:
            raise ValueError("Credential key must be a non-empty string")
        if not isinstance(self.secret, str):
            raise ValueError("Credential secret must be a string")
    
    def __iter__(self):
        # Allows ``key, secret = token``
        yield self.key
        yield self.secret
    
    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.key!r}, secret='***')"


class ConsumerToken(Credential):
    """The consumer's own credential, long-lived for the process lifetime."""


class RequestToken(Credential):
    """Temporary credential from ``initiate``; traded for an AccessToken by ``complete``."""


class AccessToken(Credential):
    """Authorized credential from ``complete``; used for all subsequent signed calls."""
