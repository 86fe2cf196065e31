"""
Media type negotiation for c_http_builder.

Two independent resolutions live here: the content type of a scalar
body comes from the caller's Content-Type header (JSON by default), and
the content type of a file part comes from its file name extension
(octet-stream by default).
"""

import codecs
import logging
import mimetypes
import re
from typing import NamedTuple, Optional, Tuple

from .http_primitives import Headers, PairsInput

logger = logging.getLogger(__name__)

_TOKEN = r"([a-zA-Z0-9-!#$%&'*+.^_`{|}~]+)"
_QUOTED = r'"([^"]*)"'
_TYPE_SUBTYPE = re.compile(_TOKEN + "/" + _TOKEN)
_PARAMETER = re.compile(r";\s*(?:" + _TOKEN + "=(?:" + _TOKEN + "|" + _QUOTED + "))?")


class MediaType(NamedTuple):
    """An RFC 2045 media type such as ``text/plain; charset=utf-8``."""
    value: str
    type: str
    subtype: str
    parameters: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["MediaType"]:
        """Parse a media type, returning None if it is not well-formed."""
        if value is None:
            return None
        value = value.strip()
        match = _TYPE_SUBTYPE.match(value)
        if match is None:
            return None

        parameters = []
        pos = match.end()
        while pos < len(value):
            param = _PARAMETER.match(value, pos)
            if param is None:
                return None
            pos = param.end()
            name = param.group(1)
            if name is None:
                continue
            token = param.group(2)
            parameters.append((name.lower(), token if token is not None else param.group(3)))

        return cls(
            value=value,
            type=match.group(1).lower(),
            subtype=match.group(2).lower(),
            parameters=tuple(parameters),
        )

    @classmethod
    def get(cls, value: str) -> "MediaType":
        """
        Parse a media type.

        Raises:
            ValueError: If value is not a well-formed media type
        """
        media_type = cls.parse(value)
        if media_type is None:
            raise ValueError(f"Invalid media type: {value!r}")
        return media_type

    @property
    def essence(self) -> str:
        """The ``type/subtype`` part without parameters."""
        return f"{self.type}/{self.subtype}"

    @property
    def charset(self) -> Optional[str]:
        for name, param_value in self.parameters:
            if name == "charset":
                return param_value
        return None

    def charset_or(self, default: str) -> str:
        """Get the declared charset if Python knows the codec, else default."""
        charset = self.charset
        if charset is None:
            return default
        try:
            return codecs.lookup(charset).name
        except LookupError:
            return default

    def encode(self, text: str, default: str = "utf-8") -> bytes:
        """
        Encode text with this media type's charset.

        Characters the charset cannot represent are replaced rather than
        failing the request.
        """
        charset = self.charset_or(default)
        try:
            return text.encode(charset)
        except UnicodeEncodeError as e:
            logger.warning(f"Body text not representable in {charset}, replacing characters: {e}")
            return text.encode(charset, errors="replace")

    def __str__(self) -> str:
        return self.value


APPLICATION_JSON = MediaType.get("application/json; charset=utf-8")
OCTET_STREAM = MediaType.get("application/octet-stream; charset=utf-8")
FORM_URLENCODED = MediaType.get("application/x-www-form-urlencoded")


def resolve(headers: Optional[PairsInput]) -> MediaType:
    """
    Resolve the media type of a scalar body.

    Uses the Content-Type header when it is present, non-empty and
    parsable; otherwise JSON as UTF-8.
    """
    headers = Headers.of(headers)
    if headers is None:
        return APPLICATION_JSON

    media_type = MediaType.parse(headers.get_content_type())
    if media_type is None:
        return APPLICATION_JSON
    return media_type


def guess_file_type(file_name: Optional[str]) -> MediaType:
    """
    Guess the media type of a file part from its name's extension.

    Unknown or missing extensions fall back to octet-stream.
    """
    if not file_name:
        return OCTET_STREAM

    content_type, _ = mimetypes.guess_type(file_name, strict=False)
    media_type = MediaType.parse(content_type)
    if media_type is None:
        return OCTET_STREAM
    return media_type
