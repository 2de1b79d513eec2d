"""
HTTP transport for MediaWiki OAuth calls

This module provides the transport the handshake uses to execute signed calls.
It performs exactly one attempt per call; retry policy belongs to the caller.
"""

import logging
from typing import Dict, Optional, Protocol, runtime_checkable

import requests

from .config import ClientConfig, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from .exceptions import TransportError

logger = logging.getLogger(__name__)

# Maximum number of response body characters kept in error details
ERROR_BODY_LIMIT = 500


@runtime_checkable
class Transport(Protocol):
    """Executes an HTTP request and returns the raw response body"""

    def execute(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[str] = None,
    ) -> bytes:
        """Execute a request; raise TransportError on failure."""
        ...


class RequestsTransport:
    """
    Transport backed by a :class:`requests.Session`.

    TLS verification follows ``verify_ssl``.  Non-2xx responses and empty
    bodies are reported as :class:`TransportError`.
    """

    def __init__(
        self,
        verify_ssl: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the transport.

        Args:
            verify_ssl: Verify TLS certificates and host names
            timeout: Request timeout in seconds
            user_agent: User-Agent header value
            session: Optional pre-configured session
        """
        self.verify_ssl = verify_ssl
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': user_agent})

        if not verify_ssl:
            logger.warning("TLS certificate verification is disabled; use only against test servers")

    @classmethod
    def from_config(cls, config: ClientConfig) -> 'RequestsTransport':
        """Create a transport using the TLS, timeout and user agent settings of a client config."""
        return cls(verify_ssl=config.verify_ssl, timeout=config.timeout, user_agent=config.user_agent)

    def execute(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[str] = None,
    ) -> bytes:
        """
        Execute a request.

        Args:
            method: HTTP method (GET or POST)
            url: Request URL
            headers: Signed request headers
            body: Optional form-encoded body

        Returns:
            bytes: Raw response body

        Raises:
            TransportError: On network, TLS or HTTP errors, or an empty body
        """
        try:
            logger.debug(f"Making {method} request to {url}")
            response = self.session.request(
                method,
                url,
                headers=headers,
                data=body,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
        except requests.exceptions.SSLError as e:
            raise TransportError(f"TLS error: {e}", "TLS_ERROR")
        except requests.exceptions.Timeout:
            raise TransportError(f"Request timeout after {self.timeout} seconds", "TIMEOUT")
        except requests.exceptions.ConnectionError as e:
            raise TransportError(f"Connection error: {e}", "CONNECTION_ERROR")
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request failed: {e}")

        if not response.ok:
            raise TransportError(
                f"Server request failed: HTTP {response.status_code}: {response.reason}",
                "HTTP_ERROR",
                http_status=response.status_code,
                details={'body': response.text[:ERROR_BODY_LIMIT]}
            )

        if not response.content:
            raise TransportError(
                "Server returned an empty response",
                "EMPTY_RESPONSE",
                http_status=response.status_code
            )

        return response.content

    def close(self):
        """Close the HTTP session."""
        self.session.close()
        logger.debug("HTTP session closed")
