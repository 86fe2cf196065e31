"""
Form and multipart bodies for c_http_builder.
"""

import re
import uuid
from typing import Iterable, Iterator, List, NamedTuple, Optional, Tuple
from urllib.parse import urlencode

from .headers import sanitize_value
from .http_primitives import PairsInput, Params
from .media_types import FORM_URLENCODED, MediaType
from .streams import BytesBody, RequestBody

CRLF = b"\r\n"
DASHDASH = b"--"

_QUOTED_ESCAPES = str.maketrans({"\n": "%0A", "\r": "%0D", '"': "%22"})
_DISPOSITION_PARAM = re.compile(r';\s*([\w*-]+)="([^"]*)"')


def _present_pairs(params: Optional[PairsInput]) -> List[Tuple[str, str]]:
    params = Params.of(params)
    if params is None:
        return []
    return [(key, value) for key, value in params if key is not None and value is not None]


class FormBody(BytesBody):
    """
    A URL-encoded form body.

    Pairs with a None key or value are skipped.
    """

    def __init__(self, params: Optional[PairsInput] = None) -> None:
        self.fields = _present_pairs(params)
        super().__init__(urlencode(self.fields).encode("ascii"), FORM_URLENCODED)

    def __repr__(self) -> str:
        return f"FormBody(fields={self.fields!r})"


def quoted(text: str) -> str:
    """Quote text for a Content-Disposition parameter."""
    return '"' + text.translate(_QUOTED_ESCAPES) + '"'


class Part(NamedTuple):
    """One part of a multipart body: extra headers plus a body."""
    headers: Tuple[Tuple[str, str], ...]
    body: RequestBody

    @classmethod
    def form_data(cls, name: str, file_name: Optional[str], body: RequestBody) -> "Part":
        """
        Create a form-data part.

        The name and file name are sanitized like header values, since
        they travel inside the part's Content-Disposition header.
        """
        disposition = "form-data; name=" + quoted(sanitize_value(name))
        if file_name is not None:
            disposition += "; filename=" + quoted(sanitize_value(file_name))
        return cls(headers=(("Content-Disposition", disposition),), body=body)

    @classmethod
    def form_field(cls, name: str, value: str) -> "Part":
        return cls.form_data(name, None, BytesBody(value.encode("utf-8")))

    @property
    def name(self) -> Optional[str]:
        return self._disposition_param("name")

    @property
    def file_name(self) -> Optional[str]:
        return self._disposition_param("filename")

    def _disposition_param(self, param: str) -> Optional[str]:
        for header_name, header_value in self.headers:
            if header_name.lower() != "content-disposition":
                continue
            for key, value in _DISPOSITION_PARAM.findall(header_value):
                if key == param:
                    return value
        return None

    def head(self) -> bytes:
        """Boundary-free header block of the part, ending with the blank line."""
        lines = [f"{name}: {value}" for name, value in self.headers]
        if self.body.content_type is not None:
            lines.append(f"Content-Type: {self.body.content_type}")
        if self.body.is_length_exact:
            lines.append(f"Content-Length: {self.body.content_length}")
        return "".join(line + "\r\n" for line in lines).encode("utf-8") + CRLF


class MultipartBody(RequestBody):
    """
    A multipart/form-data body.

    Parts are written in order; part bodies are read only while the
    multipart body is written. The length is exact only when every part's
    length is exact.
    """

    def __init__(self, parts: Iterable[Part], boundary: Optional[str] = None) -> None:
        self.parts = list(parts)
        if not self.parts:
            raise ValueError("Multipart body must have at least one part")
        self.boundary = boundary or uuid.uuid4().hex
        self._content_type = MediaType.get(f"multipart/form-data; boundary={self.boundary}")

    @property
    def content_type(self) -> MediaType:
        return self._content_type

    @property
    def is_length_exact(self) -> bool:
        return all(part.body.is_length_exact for part in self.parts)

    @property
    def content_length(self) -> int:
        boundary = self.boundary.encode("ascii")
        length = 0
        for part in self.parts:
            length += len(DASHDASH + boundary + CRLF) + len(part.head())
            length += part.body.content_length + len(CRLF)
        return length + len(DASHDASH + boundary + DASHDASH + CRLF)

    def iter_chunks(self) -> Iterator[bytes]:
        boundary = self.boundary.encode("ascii")
        for part in self.parts:
            yield DASHDASH + boundary + CRLF + part.head()
            yield from part.body.iter_chunks()
            yield CRLF
        yield DASHDASH + boundary + DASHDASH + CRLF

    def __repr__(self) -> str:
        return f"MultipartBody(boundary={self.boundary!r}, parts={len(self.parts)})"
