"""
HTTP primitives for c_http_builder.

This module defines the data structures that describe a request on
its way in (method, headers, params, file attachments) and the
immutable, transport-ready Request produced by the builder.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    BinaryIO,
    Iterable,
    Iterator,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Tuple,
    Union,
)
from urllib.parse import urlsplit

import h11

from .exceptions import InvalidMethodError, ProtocolError

if TYPE_CHECKING:
    from .streams import RequestBody


# Type aliases for better readability
RawHeaders = Tuple[Tuple[bytes, bytes], ...]
Pair = Tuple[Optional[str], Optional[str]]
PairsInput = Union["OrderedPairs", Mapping[Optional[str], Optional[str]], Iterable[Pair]]

DEFAULT_PORTS = {b"http": 80, b"https": 443}

# Framing headers are derived from the body, never copied from the caller.
_FRAMING_HEADERS = (b"content-type", b"content-length", b"transfer-encoding")


class Method(Enum):
    """Supported HTTP request methods."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, method: Union["Method", str, bytes, Any]) -> "Method":
        """
        Resolve a method from an enum member, str or bytes.

        Raises:
            InvalidMethodError: If the value is not a supported method
        """
        if isinstance(method, cls):
            return method
        if isinstance(method, bytes):
            try:
                method = method.decode("ascii")
            except UnicodeDecodeError:
                raise InvalidMethodError(method) from None
        if isinstance(method, str):
            try:
                return cls(method.strip().upper())
            except ValueError:
                pass
        raise InvalidMethodError(method)

    @property
    def permits_body(self) -> bool:
        """GET and DELETE never carry a payload."""
        return self not in (Method.GET, Method.DELETE)


class OrderedPairs:
    """
    Ordered multi-mapping of text keys to text values.

    Duplicate keys are kept in insertion order. Keys and values may be
    None; consumers drop such pairs instead of failing.
    """

    def __init__(self, items: Optional[PairsInput] = None) -> None:
        self._items: List[Pair] = []
        if items is None:
            return
        if isinstance(items, OrderedPairs):
            self._items.extend(items)
        elif isinstance(items, Mapping):
            self._items.extend(items.items())
        else:
            for key, value in items:
                self._items.append((key, value))

    @classmethod
    def of(cls, items: Optional[PairsInput]):
        """Coerce caller input into an instance, keeping None as None."""
        if items is None or isinstance(items, cls):
            return items
        return cls(items)

    def add(self, key: Optional[str], value: Optional[str]):
        """Append a pair and return self for chaining."""
        self._items.append((key, value))
        return self

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get the first value stored under key."""
        for item_key, item_value in self._items:
            if item_key == key:
                return item_value
        return default

    def get_all(self, key: str) -> List[Optional[str]]:
        """Get every value stored under key, in order."""
        return [item_value for item_key, item_value in self._items if item_key == key]

    def items(self) -> List[Pair]:
        return list(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def __iter__(self) -> Iterator[Pair]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return any(item_key == key for item_key, _ in self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedPairs):
            return NotImplemented
        return type(self) is type(other) and self._items == other._items

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"


class Headers(OrderedPairs):
    """Request headers as supplied by the caller, before sanitization."""

    def get_content_type(self) -> Optional[str]:
        """Get the Content-Type value (case-insensitive), or None if unset or empty."""
        for key, value in self:
            if key is not None and key.lower() == "content-type" and value:
                return value
        return None

    def contains_content_type(self) -> bool:
        """Check whether a non-empty Content-Type entry exists."""
        return self.get_content_type() is not None


class Params(OrderedPairs):
    """Query parameters or form fields."""


@dataclass(frozen=True)
class FileParam:
    """
    A file attachment for a multipart body.

    Exactly one of ``path`` (an on-disk file) or ``stream`` (an open,
    single-consumption binary stream) must be given. The builder never
    closes a caller-supplied stream.
    """

    name: str
    file_name: Optional[str]
    path: Optional[Union[str, "os.PathLike[str]"]] = None
    stream: Optional[BinaryIO] = None

    def __post_init__(self) -> None:
        if (self.path is None) == (self.stream is None):
            raise ValueError("FileParam needs exactly one of path or stream")

    @classmethod
    def from_path(
        cls,
        name: str,
        path: Union[str, "os.PathLike[str]"],
        file_name: Optional[str] = None,
    ) -> "FileParam":
        """Attach an on-disk file; file_name defaults to the path's base name."""
        if file_name is None:
            file_name = os.path.basename(os.fspath(path))
        return cls(name=name, file_name=file_name, path=path)

    @classmethod
    def from_stream(cls, name: str, stream: BinaryIO, file_name: Optional[str]) -> "FileParam":
        """Attach an open binary stream."""
        return cls(name=name, file_name=file_name, stream=stream)


class URLComponents(NamedTuple):
    """Immutable representation of URL components."""
    scheme: bytes
    host: bytes
    port: int
    path: bytes
    query: bytes = b""

    @classmethod
    def from_url(cls, url: str) -> "URLComponents":
        """
        Create URLComponents from an absolute URL string.

        Raises:
            ValueError: If the port is out of range or not numeric
        """
        parsed = urlsplit(url)
        scheme = parsed.scheme.lower().encode() if parsed.scheme else b"http"
        host = parsed.hostname.encode("idna") if parsed.hostname else b""
        port = parsed.port or DEFAULT_PORTS.get(scheme, 80)
        path = parsed.path.encode() if parsed.path else b"/"
        query = parsed.query.encode()

        return cls(scheme=scheme, host=host, port=port, path=path, query=query)

    @property
    def target(self) -> bytes:
        """Request target (path plus query) as sent on the request line."""
        if self.query:
            return self.path + b"?" + self.query
        return self.path

    @property
    def authority(self) -> bytes:
        """Host header value; the port is omitted when it is the scheme default."""
        host = self.host
        if b":" in host:
            host = b"[" + host + b"]"
        if DEFAULT_PORTS.get(self.scheme) == self.port:
            return host
        return host + b":" + str(self.port).encode()


@dataclass(frozen=True)
class Request:
    """
    Immutable, transport-ready HTTP request.

    Headers are already sanitized to legal header bytes. The body, when
    present, is a RequestBody whose bytes are only read when the
    transport writes it.
    """

    method: Method
    url: str
    headers: RawHeaders = field(default_factory=tuple)
    body: Optional["RequestBody"] = None

    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if not isinstance(self.method, Method):
            raise ValueError("method must be a Method")

        if not isinstance(self.url, str):
            raise ValueError("url must be a string")

        if not isinstance(self.headers, tuple):
            raise ValueError("headers must be a tuple")

        for name, value in self.headers:
            if not isinstance(name, bytes) or not isinstance(value, bytes):
                raise ValueError("header names and values must be bytes")

        if self.body is not None and not self.method.permits_body:
            raise ValueError(f"{self.method.value} requests cannot carry a body")

    @property
    def components(self) -> URLComponents:
        return URLComponents.from_url(self.url)

    @property
    def scheme(self) -> bytes:
        """Get the URL scheme."""
        return self.components.scheme

    @property
    def host(self) -> bytes:
        """Get the URL host."""
        return self.components.host

    @property
    def port(self) -> int:
        """Get the URL port."""
        return self.components.port

    @property
    def target(self) -> bytes:
        """Get the request target (path and query)."""
        return self.components.target

    def get_header(self, name: Union[str, bytes]) -> Optional[bytes]:
        """Get a header value by name (case-insensitive)."""
        if isinstance(name, str):
            name = name.encode()

        name_lower = name.lower()
        for header_name, header_value in self.headers:
            if header_name.lower() == name_lower:
                return header_value

        return None

    def has_header(self, name: Union[str, bytes]) -> bool:
        """Check if a header exists (case-insensitive)."""
        return self.get_header(name) is not None

    def framing_headers(self) -> List[Tuple[bytes, bytes]]:
        """
        Build the full header list the transport sends.

        Host is added unless the caller set one. When a body is present its
        content type and framing replace any caller-supplied values:
        Content-Length when the length is exact, chunked transfer otherwise.
        """
        from .headers import sanitize_value

        components = self.components
        headers: List[Tuple[bytes, bytes]] = []
        if not self.has_header(b"host"):
            headers.append((b"Host", components.authority))

        for name, value in self.headers:
            if self.body is not None and name.lower() in _FRAMING_HEADERS:
                continue
            headers.append((name, value))

        if self.body is not None:
            content_type = self.body.content_type
            if content_type is not None:
                value = sanitize_value(str(content_type))
                headers.append((b"Content-Type", value.encode("ascii", errors="backslashreplace")))
            if self.body.is_length_exact:
                headers.append((b"Content-Length", str(self.body.content_length).encode()))
            else:
                headers.append((b"Transfer-Encoding", b"chunked"))

        return headers

    def to_h11(self) -> h11.Request:
        """
        Create the h11 Request event for this request.

        Raises:
            ProtocolError: If h11 rejects the request line or headers
        """
        try:
            return h11.Request(
                method=self.method.value.encode(),
                target=self.target,
                headers=self.framing_headers(),
            )
        except h11.LocalProtocolError as e:
            raise ProtocolError(str(e), cause=e) from e

    def h11_events(self) -> Iterator[Any]:
        """
        Yield the h11 events that transmit this request.

        Body chunks are produced lazily, so a stream-backed body is read
        only while the caller iterates.
        """
        yield self.to_h11()
        if self.body is not None:
            for chunk in self.body.iter_chunks():
                yield h11.Data(data=chunk)
        yield h11.EndOfMessage()
