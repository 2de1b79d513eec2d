"""
Three-legged OAuth handshake with a MediaWiki OAuth provider

:Example:

    settings = load_settings_from_env()
    handshaker = Handshaker.from_settings(settings)

    # Step 1: Initiate -- ask MediaWiki for a temporary key/secret
    redirect, request_token = handshaker.initiate()

    # Step 2: Authorize -- send the user to MediaWiki to confirm authorization
    print(f"Point your browser to: {redirect}")
    verifier = input("Verification code: ")

    # Step 3: Complete -- obtain the authorized key/secret
    access_token = handshaker.complete(request_token, verifier)

    # Step 4: Identify -- (optional) get identifying information about the user
    identity = handshaker.identify(access_token)
    print(f"Identified as {identity.username}.")

Request tokens must be kept by the caller between ``initiate`` and
``complete``; nothing is persisted here.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar
from urllib.parse import urlencode

from .config import ClientConfig, ClientSettings, default_canonical_server
from .exceptions import (
    CallbackNotConfirmedError,
    MalformedResponseError,
    MalformedTokenError,
    ProviderError,
)
from .http_client import RequestsTransport, Transport
from .signing import HttpMethod, OAuth1Signer, SignedCall, Signer, append_query, merge_params, split_url
from .tokens import AccessToken, ConsumerToken, Credential, RequestToken
from .verification import IdentityClaims, IdentityVerifier

logger = logging.getLogger(__name__)

TokenT = TypeVar('TokenT', bound=Credential)


class HandshakeState(str, Enum):
    """Progress of the three-legged handshake"""
    UNSTARTED = "unstarted"
    REQUEST_TOKEN_OBTAINED = "request_token_obtained"
    ACCESS_TOKEN_OBTAINED = "access_token_obtained"


@dataclass(frozen=True)
class OAuthResponse:
    """Raw response body together with the signed call that produced it"""
    body: bytes
    call: SignedCall

    @property
    def nonce(self) -> str:
        return self.call.nonce

    def json(self) -> Dict[str, Any]:
        """
        Parse the body as a JSON object.

        Raises:
            ProviderError: If the provider returned an error document
            MalformedResponseError: If the body is not a JSON object
        """
        try:
            data = json.loads(self.body.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedResponseError(f"Invalid JSON response: {e}")

        if not isinstance(data, dict):
            raise MalformedResponseError("Expected a JSON object in response")

        if 'error' in data:
            error = data['error']
            message = data.get('message') or error
            raise ProviderError(
                f"Provider returned an error: {message}",
                details={'error': error, 'message': data.get('message')}
            )

        return data


def _parse_token(data: Mapping[str, Any], token_type: Type[TokenT]) -> TokenT:
    key = data.get('key')
    secret = data.get('secret')
    if not isinstance(key, str) or not key or not isinstance(secret, str):
        raise MalformedResponseError(
            f"Response does not contain a valid {token_type.__name__} key/secret",
            details={'fields': sorted(data.keys())}
        )
    return token_type(key, secret)


class Handshaker:
    """
    Drives the OAuth handshake for one consumer.

    Extra parameters set with :meth:`set_extra_param` or
    :meth:`set_extra_params` are merged into every signed call until cleared.
    ``complete`` clears them after use.

    Instances are not meant to be shared between threads running concurrent
    handshakes, since the extra-parameter map is per instance.  Nonces are
    never stored on the instance.
    """

    def __init__(
        self,
        config: ClientConfig,
        consumer: ConsumerToken,
        signer: Optional[Signer] = None,
        transport: Optional[Transport] = None,
        verifier: Optional[IdentityVerifier] = None,
    ):
        """
        Initialize the handshaker.

        Args:
            config: Provider configuration
            consumer: The consumer credential
            signer: OAuth signer (HMAC-SHA1 via oauthlib if None)
            transport: HTTP transport (requests-based if None)
            verifier: Identity verifier (built from config and consumer if None)
        """
        self.config = config
        self.consumer = consumer
        self.signer = signer or OAuth1Signer()
        self.transport = transport or RequestsTransport.from_config(config)
        self.verifier = verifier or IdentityVerifier(
            consumer,
            config.canonical_server_url,
            leeway=config.leeway,
        )
        self._extra_params: Dict[str, str] = {}
        self._state = HandshakeState.UNSTARTED

        logger.info(f"Initialized OAuth handshaker for endpoint: {config.endpoint_url}")

    @classmethod
    def from_settings(cls, settings: ClientSettings, **kwargs) -> 'Handshaker':
        """Create a handshaker from loaded client settings."""
        return cls(settings.config, settings.consumer, **kwargs)

    @classmethod
    def from_key_and_secret(
        cls,
        endpoint_url: str,
        key: str,
        secret: str,
        canonical_server_url: Optional[str] = None,
        **kwargs
    ) -> 'Handshaker':
        """
        Create a handshaker with default settings.

        Args:
            endpoint_url: URL of the OAuth special page
            key: Consumer key
            secret: Consumer secret
            canonical_server_url: Expected identity issuer; defaults to the
                endpoint's scheme and host
        """
        config = ClientConfig(
            endpoint_url=endpoint_url,
            canonical_server_url=canonical_server_url or default_canonical_server(endpoint_url),
        )
        return cls(config, ConsumerToken(key, secret), **kwargs)

    @property
    def state(self) -> HandshakeState:
        return self._state

    @property
    def extra_params(self) -> Dict[str, str]:
        """Copy of the extra parameters merged into each signed call."""
        return dict(self._extra_params)

    def set_extra_param(self, key: str, value: str) -> None:
        self._extra_params[key] = str(value)

    def set_extra_params(self, params: Mapping[str, str]) -> None:
        """Replace all extra parameters."""
        self._extra_params = {k: str(v) for k, v in params.items()}

    def clear_extra_params(self) -> None:
        self._extra_params = {}

    def endpoint_url(self, path: str, params: Optional[Mapping[str, str]] = None) -> str:
        """Build ``{endpoint}/{path}`` with optional query parameters."""
        return append_query(f"{self.config.endpoint_url}/{path}", params or {})

    def initiate(self) -> Tuple[str, RequestToken]:
        """
        First leg: obtain a request token.

        Redirect the user to the returned URL and keep the request token,
        it is needed by :meth:`complete`.

        Returns:
            tuple: ``(authorize_url, request_token)``

        Raises:
            CallbackNotConfirmedError: If the provider did not confirm the
                out-of-band callback
            TransportError: On network or HTTP errors
            MalformedResponseError: If the response has an unexpected shape
        """
        url = self.endpoint_url('initiate', {'format': 'json', 'oauth_callback': 'oob'})
        logger.info("Requesting OAuth request token")
        data = self.make_oauth_call(None, url).json()

        if data.get('oauth_callback_confirmed') != 'true':
            raise CallbackNotConfirmedError(
                "Callback wasn't confirmed",
                details={'oauth_callback_confirmed': data.get('oauth_callback_confirmed')}
            )

        request_token = _parse_token(data, RequestToken)
        self._state = HandshakeState.REQUEST_TOKEN_OBTAINED
        return self.authorize_url(request_token), request_token

    def authorize_url(self, request_token: RequestToken) -> str:
        """URL the user's browser is sent to in order to authorize the request token."""
        return append_query(self.config.authorize_url, {
            'oauth_token': request_token.key,
            'oauth_consumer_key': self.consumer.key,
        })

    def complete(self, request_token: RequestToken, verify_code: str) -> AccessToken:
        """
        Final leg: exchange the request token and the verification code the
        user received for an access token.

        Args:
            request_token: Token returned by :meth:`initiate`
            verify_code: The ``oauth_verifier`` shown to or returned for the user

        Returns:
            AccessToken: Authorized credential for subsequent calls

        Raises:
            TransportError: On network or HTTP errors
            MalformedResponseError: If the response has an unexpected shape
        """
        url = self.endpoint_url('token', {'format': 'json'})
        self.set_extra_param('oauth_verifier', verify_code)
        try:
            logger.info("Exchanging request token for access token")
            data = self.make_oauth_call(request_token, url).json()
        finally:
            self.clear_extra_params()

        access_token = _parse_token(data, AccessToken)
        self._state = HandshakeState.ACCESS_TOKEN_OBTAINED
        return access_token

    def identify(self, access_token: AccessToken) -> IdentityClaims:
        """
        Optional step: fetch and verify a signed statement of the authorizing
        user's identity (username, groups, rights, ...).

        Args:
            access_token: Token returned by :meth:`complete`

        Returns:
            IdentityClaims: Validated identity claims

        Raises:
            IdentityValidationError: If signature, issuer, audience, time
                window or nonce validation fails
            MalformedTokenError: If the response is not a well-formed JWT
            ProviderError: If the provider returned an error document
            TransportError: On network or HTTP errors
        """
        response = self.make_oauth_call(access_token, self.endpoint_url('identify'))

        if response.body.lstrip().startswith(b'{'):
            try:
                response.json()
            except ProviderError:
                raise
            except MalformedResponseError as e:
                raise MalformedTokenError(f"Identify endpoint returned neither a JWT nor JSON: {e}")
            raise MalformedTokenError("Identify endpoint returned JSON instead of a JWT")

        return self.verifier.verify(response.body, response.nonce)

    def make_oauth_call(
        self,
        token: Optional[Credential],
        url: str,
        is_post: bool = False,
        post_fields: Optional[Mapping[str, str]] = None,
    ) -> OAuthResponse:
        """
        Make a signed request.

        Args:
            token: Token to sign with besides the consumer token; the request
                token while completing the handshake, the access token
                afterwards, None for initiate
            url: URL to call; its query parameters are signed
            is_post: Send a POST with ``post_fields`` as form body
            post_fields: POST parameters, only used when ``is_post`` is true

        Returns:
            OAuthResponse: Response body and the signed call, including its nonce
        """
        _, url_params = split_url(url)
        params = merge_params(url_params, self._extra_params)

        if is_post:
            method = HttpMethod.POST
            body = urlencode(post_fields or {})
        else:
            method = HttpMethod.GET
            body = None

        call = self.signer.sign(self.consumer, token, method, url, params, body=body)
        response_body = self.transport.execute(call.method.value, call.url, call.headers, call.body)
        return OAuthResponse(body=response_body, call=call)

    def close(self) -> None:
        """Release transport resources."""
        close = getattr(self.transport, 'close', None)
        if close is not None:
            close()

    def __enter__(self) -> 'Handshaker':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
