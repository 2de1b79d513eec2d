"""
OAuth 1.0a HMAC-SHA1 signer

Signs calls with :mod:`oauthlib` and serializes the protocol parameters into
an ``Authorization`` header.  The nonce for every call is generated here and
returned on the :class:`SignedCall`, so callers can bind a response to the
exact request that produced it.
"""

import logging
from typing import Dict, Optional

from oauthlib.oauth1 import Client, SIGNATURE_HMAC_SHA1, SIGNATURE_TYPE_AUTH_HEADER

from ..exceptions import SigningError
from ..tokens import ConsumerToken, Credential
from .types import HttpMethod, NonceGenerator, SignedCall, TimestampGenerator
from .utils import append_query, generate_nonce, generate_timestamp, split_url

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'

# Protocol parameters carried in the Authorization header rather than the query
HEADER_PARAMS = ('oauth_callback', 'oauth_verifier')


class OAuth1Signer:
    """
    OAuth 1.0a signer using HMAC-SHA1 and header-based parameter transmission

    Attributes:
        nonce_generator: Callable producing a fresh nonce per call
        timestamp_generator: Callable producing the Unix timestamp per call
    """

    def __init__(
        self,
        nonce_generator: Optional[NonceGenerator] = None,
        timestamp_generator: Optional[TimestampGenerator] = None,
        signature_method: str = SIGNATURE_HMAC_SHA1,
    ):
        self.nonce_generator = nonce_generator or generate_nonce
        self.timestamp_generator = timestamp_generator or generate_timestamp
        self.signature_method = signature_method

    def sign(
        self,
        consumer: ConsumerToken,
        token: Optional[Credential],
        method: HttpMethod,
        url: str,
        params: Dict[str, str],
        body: Optional[str] = None,
    ) -> SignedCall:
        """
        Sign a request.

        Args:
            consumer: The consumer credential
            token: Request or access token, or None for unauthenticated calls
            method: HTTP method
            url: Target URL; its query string is replaced by ``params``
            params: Complete parameter set to sign. ``oauth_callback`` and
                ``oauth_verifier`` travel in the Authorization header, all
                other parameters in the query string.
            body: Form-encoded POST body

        Returns:
            SignedCall: Signed request including the generated nonce

        Raises:
            SigningError: If the request cannot be signed
        """
        method = HttpMethod(method)
        base_url, _ = split_url(url)
        query = {k: v for k, v in params.items() if k not in HEADER_PARAMS}
        signed_url = append_query(base_url, query)

        nonce = self.nonce_generator()
        client = Client(
            consumer.key,
            client_secret=consumer.secret,
            resource_owner_key=token.key if token else None,
            resource_owner_secret=token.secret if token else None,
            callback_uri=params.get('oauth_callback'),
            verifier=params.get('oauth_verifier'),
            signature_method=self.signature_method,
            signature_type=SIGNATURE_TYPE_AUTH_HEADER,
            nonce=nonce,
            timestamp=str(self.timestamp_generator()),
        )

        headers = {'Content-Type': FORM_CONTENT_TYPE} if body is not None else {}
        try:
            signed_uri, signed_headers, signed_body = client.sign(
                signed_url,
                http_method=method.value,
                body=body,
                headers=headers,
            )
        except ValueError as e:
            raise SigningError(
                f"Request signing failed: {e}",
                details={"url": base_url, "method": method.value, "original_error": str(e)}
            )

        logger.debug(f"Signed {method.value} request to {base_url}")
        return SignedCall(
            method=method,
            url=signed_uri,
            params=dict(params),
            headers=dict(signed_headers),
            nonce=nonce,
            token=token,
            body=signed_body,
        )


def create_signer(
    nonce_generator: Optional[NonceGenerator] = None,
    timestamp_generator: Optional[TimestampGenerator] = None,
) -> OAuth1Signer:
    """Create the default HMAC-SHA1 signer."""
    return OAuth1Signer(nonce_generator=nonce_generator, timestamp_generator=timestamp_generator)
