"""
Query parameter injection for c_http_builder.
"""

import logging
from typing import Optional
from urllib.parse import SplitResult, quote, urlsplit, urlunsplit

from .http_primitives import Params, PairsInput

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("http", "https")

# Characters left unescaped inside a query component.
_QUERY_SAFE = "!$'()*,/:;?@"

# Characters left unescaped when canonicalizing an existing path, query or
# fragment. Existing escapes ('%') are kept as they are.
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"
_QUERY_FRAGMENT_SAFE = _PATH_SAFE + "?"


def parse_url(url: Optional[str]) -> Optional[SplitResult]:
    """
    Parse and canonicalize an absolute http(s) URL.

    Returns None when the URL is missing, relative, uses another scheme,
    has no host, has a host IDNA cannot encode or carries an invalid port.
    Characters that are not legal in a request target (spaces, non-ASCII
    text) are percent-encoded in the path, query and fragment.
    """
    if not isinstance(url, str):
        return None

    try:
        parsed = urlsplit(url.strip())
        # Accessing port validates it.
        parsed.port
        if parsed.hostname:
            parsed.hostname.encode("idna")
    except ValueError as e:
        # UnicodeError from the idna codec is a ValueError too.
        logger.debug(f"Could not parse URL {url!r}: {e}")
        return None

    if parsed.scheme.lower() not in SUPPORTED_SCHEMES or not parsed.hostname:
        return None

    return parsed._replace(
        path=quote(parsed.path, safe=_PATH_SAFE),
        query=quote(parsed.query, safe=_QUERY_FRAGMENT_SAFE),
        fragment=quote(parsed.fragment, safe=_QUERY_FRAGMENT_SAFE),
    )


def _encode_component(text: str) -> str:
    return quote(text, safe=_QUERY_SAFE)


def apply(url: Optional[str], params: Optional[PairsInput]) -> Optional[str]:
    """
    Append params to the query string of url.

    Pairs with a None key or value are skipped; duplicate keys become
    repeated query entries in insertion order. Returns None if url
    cannot be parsed, and the canonicalized URL without further changes if
    there are no params.
    """
    parsed = parse_url(url)
    if parsed is None:
        return None

    params = Params.of(params)
    if params is None or params.is_empty():
        return urlunsplit(parsed)

    query_parts = [parsed.query] if parsed.query else []
    for key, value in params:
        if key is None or value is None:
            continue
        query_parts.append(f"{_encode_component(key)}={_encode_component(value)}")

    return urlunsplit(parsed._replace(query="&".join(query_parts)))
