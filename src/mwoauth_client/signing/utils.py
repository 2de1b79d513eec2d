"""
Utility functions for request signing

Nonce and timestamp generation and the URL/query helpers used to assemble
signed calls.
"""

import time
from typing import Dict, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from oauthlib.common import generate_nonce as _oauthlib_nonce


def generate_nonce() -> str:
    """
    Generate a random nonce for replay protection.
    
    Returns:
        str: 30 character random string from the OAuth library's CSPRNG
    """
    return _oauthlib_nonce()


def generate_timestamp() -> int:
    """
    Generate current Unix timestamp.
    
    Returns:
        int: Current Unix timestamp (seconds since epoch)
    """
    return int(time.time())


def split_url(url: str) -> Tuple[str, Dict[str, str]]:
    """
    Split a URL into its query-less part and its query parameters.
    
    Args:
        url: URL that may carry a query string
    
    Returns:
        tuple: ``(url_without_query, params)``; repeated names keep the last value
    """
    parts = urlsplit(url)
    params = dict(parse_qsl(parts.query, keep_blank_values=True))
    base = urlunsplit((parts.scheme, parts.netloc, parts.path, '', ''))
    return base, params


def merge_params(url_params: Mapping[str, str], extra_params: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Merge extra parameters over URL parameters; extra parameters win."""
    merged = dict(url_params)
    if extra_params:
        merged.update({k: str(v) for k, v in extra_params.items()})
    return merged


def append_query(url: str, params: Mapping[str, str]) -> str:
    """
    Append query parameters to a URL that may already have a query string.
    
    MediaWiki endpoints commonly look like ``index.php?title=Special:OAuth``,
    so paths are appended to the URL text and parameters joined with ``&``.
    """
    if not params:
        return url
    if url.endswith(('?', '&')):
        separator = ''
    else:
        separator = '&' if '?' in url else '?'
    return f"{url}{separator}{urlencode(params)}"
