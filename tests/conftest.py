"""
Shared fixtures for the MediaWiki OAuth client tests

Provides a deterministic signer, a scripted transport and a JWT builder so
handshake and identity logic can be tested without network access.
"""

import json
import time
from typing import Any, Callable, Dict, List, Optional, Union

import jwt
import pytest
from jwt.algorithms import HMACAlgorithm
from jwt.utils import base64url_encode

from mwoauth_client.config import ClientConfig
from mwoauth_client.handshaker import Handshaker
from mwoauth_client.signing import HttpMethod, SignedCall, append_query, split_url
from mwoauth_client.tokens import ConsumerToken

ENDPOINT_URL = "https://wiki.example.org/w/index.php?title=Special:OAuth"
CANONICAL_SERVER = "https://wiki.example.org"
CONSUMER_KEY = "consumer-key"
CONSUMER_SECRET = "consumer-secret"


def b64url(data: bytes) -> str:
    return base64url_encode(data).decode('ascii')


def make_jwt(payload: Dict[str, Any], secret: str = CONSUMER_SECRET) -> str:
    """Build an HS256 compact JWT the way MediaWiki's /identify does."""
    return jwt.encode(payload, secret, algorithm="HS256")


def sign_segments(header_b64: str, payload_b64: str, secret: str = CONSUMER_SECRET) -> str:
    """HMAC-SHA256 sign arbitrary segments, bypassing PyJWT's header and payload handling."""
    signature = HMACAlgorithm(HMACAlgorithm.SHA256).sign(
        f"{header_b64}.{payload_b64}".encode('ascii'), secret.encode('utf-8'))
    return f"{header_b64}.{payload_b64}.{b64url(signature)}"


def forge_jwt(header: Dict[str, Any], payload: Dict[str, Any], secret: str = CONSUMER_SECRET) -> str:
    """Build a token with an arbitrary header, e.g. a substituted ``alg``."""
    return sign_segments(b64url(json.dumps(header).encode('utf-8')),
                         b64url(json.dumps(payload).encode('utf-8')), secret)


def identity_payload(nonce: str, now: Optional[int] = None, **overrides) -> Dict[str, Any]:
    """Identity claims as sent by MediaWiki's /identify."""
    now = int(time.time()) if now is None else now
    payload = {
        "iss": CANONICAL_SERVER,
        "sub": "12345",
        "aud": CONSUMER_KEY,
        "exp": now + 100,
        "iat": now,
        "username": "Example User",
        "editcount": 42,
        "confirmed_email": True,
        "blocked": False,
        "registered": "20140101000000",
        "groups": ["*", "user", "autoconfirmed"],
        "rights": ["read", "edit"],
        "grants": ["basic"],
        "nonce": nonce,
    }
    payload.update(overrides)
    return payload


class FakeSigner:
    """Signer producing deterministic nonces ``nonce-1``, ``nonce-2``, ..."""

    def __init__(self):
        self.calls: List[SignedCall] = []
        self._counter = 0

    def sign(self, consumer, token, method, url, params, body=None) -> SignedCall:
        self._counter += 1
        nonce = f"nonce-{self._counter}"
        base_url, _ = split_url(url)
        call = SignedCall(
            method=HttpMethod(method),
            url=append_query(base_url, params),
            params=dict(params),
            headers={'Authorization': f'OAuth oauth_consumer_key="{consumer.key}", oauth_nonce="{nonce}"'},
            nonce=nonce,
            token=token,
            body=body,
        )
        self.calls.append(call)
        return call

    @property
    def last_call(self) -> SignedCall:
        return self.calls[-1]


Response = Union[bytes, str, Exception, Callable[..., Union[bytes, str]]]


class FakeTransport:
    """Transport returning scripted responses in order"""

    def __init__(self, *responses: Response):
        self.responses = list(responses)
        self.requests: List[Dict[str, Any]] = []

    def queue(self, *responses: Response) -> None:
        self.responses.extend(responses)

    def execute(self, method, url, headers, body=None) -> bytes:
        self.requests.append({'method': method, 'url': url, 'headers': headers, 'body': body})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(method, url, headers, body)
        if isinstance(response, str):
            response = response.encode('utf-8')
        return response


def json_body(data: Dict[str, Any]) -> bytes:
    return json.dumps(data).encode('utf-8')


@pytest.fixture
def consumer():
    return ConsumerToken(CONSUMER_KEY, CONSUMER_SECRET)


@pytest.fixture
def config():
    return ClientConfig(endpoint_url=ENDPOINT_URL, canonical_server_url=CANONICAL_SERVER)


@pytest.fixture
def fake_signer():
    return FakeSigner()


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def handshaker(config, consumer, fake_signer, fake_transport):
    return Handshaker(config, consumer, signer=fake_signer, transport=fake_transport)
