"""
Header sanitization for c_http_builder.

The transport rejects header names and values that contain control
characters, non-ASCII text or embedded line breaks. Instead of failing
the request, these helpers strip line breaks and, when anything illegal
remains, percent-encode the whole text as UTF-8 so the information
survives in a legal form.
"""

import logging
from typing import List, Optional, Tuple
from urllib.parse import quote_plus

from .http_primitives import Headers, PairsInput

logger = logging.getLogger(__name__)

_LINE_BREAKS = str.maketrans("", "", "\r\n")


def _strip_line_breaks(text: str) -> str:
    return text.translate(_LINE_BREAKS)


def _percent_encode(text: str) -> str:
    """Percent-encode text as UTF-8, falling back to the text itself."""
    try:
        return quote_plus(text, safe="*", encoding="utf-8", errors="strict")
    except UnicodeEncodeError as e:
        logger.warning(f"Header text could not be percent-encoded, sending as is: {e}")
        return text


def _is_illegal_value_char(c: str) -> bool:
    return (c <= "\x1f" and c != "\t") or c >= "\x7f"


def _is_illegal_key_char(c: str) -> bool:
    return c <= " " or c >= "\x7f"


def sanitize_value(value: str) -> str:
    """
    Make a header value safe for the wire.

    Line breaks are removed first. If a control character other than tab
    or a character outside printable ASCII remains, the whole value is
    percent-encoded; otherwise it is returned unchanged.
    """
    new_value = _strip_line_breaks(value)
    if any(_is_illegal_value_char(c) for c in new_value):
        return _percent_encode(new_value)
    return new_value


def sanitize_key(key: str) -> str:
    """
    Make a header name safe for the wire.

    Same as sanitize_value but stricter: spaces and tabs also force
    percent-encoding.
    """
    new_key = _strip_line_breaks(key)
    if any(_is_illegal_key_char(c) for c in new_key):
        return _percent_encode(new_key)
    return new_key


def _to_bytes(text: str) -> bytes:
    # Only reached with unencodable text after the percent-encoding fallback.
    return text.encode("ascii", errors="backslashreplace")


def attach(headers: Optional[PairsInput]) -> List[Tuple[bytes, bytes]]:
    """
    Sanitize headers into raw (name, value) byte pairs.

    Pairs with a None key or value are dropped. Order and duplicates are
    preserved.

    The result is always ASCII and free of line breaks, but names are only
    checked for controls, spaces and non-ASCII text. Separator characters
    such as ``:``, ``(`` or ``"`` are printable ASCII and pass through
    unchanged; h11 refuses them in header names, so Request.to_h11()
    raises ProtocolError for such a request.
    """
    raw: List[Tuple[bytes, bytes]] = []
    headers = Headers.of(headers)
    if headers is None or headers.is_empty():
        return raw

    for key, value in headers:
        if key is None or value is None:
            continue
        raw.append((_to_bytes(sanitize_key(key)), _to_bytes(sanitize_value(value))))

    return raw
