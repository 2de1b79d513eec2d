"""
Client configuration for the MediaWiki OAuth client

Provides the immutable :class:`ClientConfig` and loaders that build it, along
with the consumer credential, from a dictionary, JSON text, a JSON file or the
process environment.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlparse

from ..exceptions import ConfigurationError
from ..tokens import ConsumerToken

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "mwoauth-client-python"

ENV_PREFIX = "MWOAUTH_"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class ClientConfig:
    """
    Connection settings for a MediaWiki OAuth provider
    
    Attributes:
        endpoint_url: URL of the OAuth special page, e.g.
            ``https://www.mediawiki.org/w/index.php?title=Special:OAuth``
        canonical_server_url: The wiki's canonical server, expected as the
            ``iss`` claim of identity assertions
        redirect_url: Where users are sent to authorize; defaults to
            ``endpoint_url + "/authorize"``
        verify_ssl: Verify TLS certificates and host names. Only disable this
            when testing against servers with self-signed certificates.
        timeout: Transport timeout in seconds
        leeway: Clock skew allowance in seconds for identity time checks
        user_agent: User-Agent header sent with every request
    """
    endpoint_url: str
    canonical_server_url: str
    redirect_url: Optional[str] = None
    verify_ssl: bool = True
    timeout: float = DEFAULT_TIMEOUT
    leeway: float = 0.0
    user_agent: str = DEFAULT_USER_AGENT
    
    def __post_init__(self):
        """Validate client configuration."""
        if not self.endpoint_url:
            raise ConfigurationError("Endpoint URL cannot be empty")
        
        parsed = urlparse(self.endpoint_url)
        if not parsed.scheme or not parsed.netloc:
            raise ConfigurationError(f"Invalid endpoint URL format: {self.endpoint_url}")
        
        if not self.canonical_server_url:
            raise ConfigurationError("Canonical server URL cannot be empty")
        
        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive")
        
        if self.leeway < 0:
            raise ConfigurationError("Leeway must be non-negative")
    
    @property
    def insecure(self) -> bool:
        """True when TLS verification is disabled (testing only)."""
        return not self.verify_ssl
    
    @property
    def authorize_url(self) -> str:
        """Base URL the user's browser is redirected to for authorization."""
        return self.redirect_url or self.endpoint_url + "/authorize"


@dataclass(frozen=True)
class ClientSettings:
    """Client configuration bundled with the consumer credential"""
    config: ClientConfig
    consumer: ConsumerToken


def default_canonical_server(endpoint_url: str) -> str:
    """Derive ``scheme://host`` from an endpoint URL."""
    parsed = urlparse(endpoint_url)
    return f"{parsed.scheme}://{parsed.netloc}"


def parse_bool(value: Union[str, bool]) -> bool:
    """Parse a boolean setting written as text."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean value: {value!r}", "INVALID_FORMAT")


def _require(data: Mapping[str, Any], name: str, source: str) -> Any:
    value = data.get(name)
    if value is None or value == "":
        raise ConfigurationError(
            f"Missing required setting '{name}' in {source}",
            "MISSING_SETTING",
            {"setting": name}
        )
    return value


def load_settings_from_dict(data: Mapping[str, Any], source: str = "configuration") -> ClientSettings:
    """
    Build client settings from a mapping.
    
    Args:
        data: Mapping with ``endpoint_url``, ``consumer_key`` and
            ``consumer_secret`` keys, and optionally ``canonical_server_url``,
            ``redirect_url``, ``verify_ssl``, ``timeout``, ``leeway`` and
            ``user_agent``
        source: Description of where the data came from, used in errors
    
    Returns:
        ClientSettings: Validated configuration and consumer credential
    
    Raises:
        ConfigurationError: If a setting is missing or invalid
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Invalid configuration format in {source}: expected an object", "INVALID_FORMAT")
    
    endpoint_url = _require(data, "endpoint_url", source)
    consumer_key = _require(data, "consumer_key", source)
    consumer_secret = _require(data, "consumer_secret", source)
    
    try:
        config = ClientConfig(
            endpoint_url=endpoint_url,
            canonical_server_url=data.get("canonical_server_url") or default_canonical_server(endpoint_url),
            redirect_url=data.get("redirect_url") or None,
            verify_ssl=parse_bool(data.get("verify_ssl", True)),
            timeout=float(data.get("timeout", DEFAULT_TIMEOUT)),
            leeway=float(data.get("leeway", 0.0)),
            user_agent=data.get("user_agent") or DEFAULT_USER_AGENT,
        )
        consumer = ConsumerToken(consumer_key, consumer_secret)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration format in {source}: {e}", "INVALID_FORMAT")
    
    if config.insecure:
        logger.warning(f"TLS verification is disabled for {config.endpoint_url}; do not use this in production")
    
    return ClientSettings(config=config, consumer=consumer)


def load_settings_from_json(json_string: str) -> ClientSettings:
    """Load client settings from a JSON document."""
    try:
        data = json.loads(json_string)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR")
    return load_settings_from_dict(data, "JSON configuration")


def load_settings_from_file(file_path: Union[str, Path]) -> ClientSettings:
    """Load client settings from a JSON file."""
    path = Path(file_path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            json_string = f.read()
    except OSError as e:
        raise ConfigurationError(f"Failed to read configuration file: {e}", "FILE_ERROR", {"path": str(path)})
    
    logger.debug(f"Loaded configuration from {path}")
    return load_settings_from_json(json_string)


def load_settings_from_env(environ: Optional[Mapping[str, str]] = None) -> ClientSettings:
    """
    Load client settings from ``MWOAUTH_*`` environment variables.
    
    Args:
        environ: Environment mapping (uses ``os.environ`` if None)
    
    Returns:
        ClientSettings: Validated configuration and consumer credential
    """
    if environ is None:
        environ = os.environ
    
    data: Dict[str, Any] = {}
    for name in ("endpoint_url", "canonical_server_url", "redirect_url", "verify_ssl",
                 "timeout", "leeway", "user_agent", "consumer_key", "consumer_secret"):
        value = environ.get(ENV_PREFIX + name.upper())
        if value is not None:
            data[name] = value
    
    return load_settings_from_dict(data, "environment")
