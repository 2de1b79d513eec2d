"""
Configuration management for the MediaWiki OAuth client
"""

from .client_config import (
    ClientConfig,
    ClientSettings,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    default_canonical_server,
    parse_bool,
    load_settings_from_dict,
    load_settings_from_json,
    load_settings_from_file,
    load_settings_from_env,
)

__all__ = [
    'ClientConfig',
    'ClientSettings',
    'DEFAULT_TIMEOUT',
    'DEFAULT_USER_AGENT',
    'default_canonical_server',
    'parse_bool',
    'load_settings_from_dict',
    'load_settings_from_json',
    'load_settings_from_file',
    'load_settings_from_env',
]
