"""
Body payload variants for c_http_builder.

Callers state the shape of a request body explicitly by wrapping it in
one of the variants below; the builder never guesses a payload's shape
from its runtime type. Structured objects are handed to a Serializer.
"""

import json
from dataclasses import dataclass
from typing import Any, BinaryIO, Union

from typing_extensions import Protocol, runtime_checkable

from .media_types import MediaType


@runtime_checkable
class Serializer(Protocol):
    """Turns an arbitrary object into body bytes for a given media type."""

    def serialize(self, obj: Any, media_type: MediaType) -> bytes:
        ...


class JSONSerializer:
    """
    Default serializer: encodes objects as JSON.

    The text is encoded with the media type's charset, UTF-8 when it
    declares none.
    """

    def __init__(self, **dumps_kwargs: Any) -> None:
        dumps_kwargs.setdefault("ensure_ascii", False)
        dumps_kwargs.setdefault("separators", (",", ":"))
        self._dumps_kwargs = dumps_kwargs

    def serialize(self, obj: Any, media_type: MediaType) -> bytes:
        text = json.dumps(obj, **self._dumps_kwargs)
        return media_type.encode(text)


@dataclass(frozen=True)
class Text:
    """Text body, encoded with the negotiated media type's charset."""
    value: str


@dataclass(frozen=True)
class Bytes:
    """Raw bytes body."""
    value: bytes


@dataclass(frozen=True)
class ByteString:
    """Opaque byte buffer (bytearray or memoryview), sent as-is."""
    value: Union[bytearray, memoryview]


@dataclass(frozen=True)
class Stream:
    """
    An open binary stream, read lazily when the request is written.

    The stream must stay open until the transport is done with the
    request. Seekable streams can be written repeatedly; others only once.
    """
    value: BinaryIO


@dataclass(frozen=True)
class Structured:
    """Any other object, encoded by the builder's Serializer."""
    value: Any


Payload = Union[Text, Bytes, ByteString, Stream, Structured]
