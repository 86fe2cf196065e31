"""
Pytest configuration for c_http_builder tests.

This file contains shared fixtures and helpers
for all tests in the project.
"""

import email
import io
from email.message import Message
from typing import List

import pytest

from c_http_builder.builder import RequestBuilder
from c_http_builder.http_primitives import Headers, Params
from c_http_builder.streams import RequestBody


class OneShotStream(io.RawIOBase):
    """Non-seekable binary stream that counts read calls."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0
        self.reads = 0

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        self.reads += 1
        chunk = self._data[self._pos:self._pos + len(buffer)]
        buffer[:len(chunk)] = chunk
        self._pos += len(chunk)
        return len(chunk)


class CountingBytesIO(io.BytesIO):
    """Seekable stream that counts read calls."""

    def __init__(self, data: bytes) -> None:
        super().__init__(data)
        self.reads = 0

    def read(self, size=-1) -> bytes:
        self.reads += 1
        return super().read(size)


def parse_multipart(body: RequestBody) -> List[Message]:
    """Parse a multipart body into its parts using the email package."""
    head = f"Content-Type: {body.content_type}\r\n\r\n".encode("ascii")
    message = email.message_from_bytes(head + body.read())
    assert message.is_multipart()
    return message.get_payload()


@pytest.fixture
def builder() -> RequestBuilder:
    """Create a RequestBuilder with default configuration."""
    return RequestBuilder()


@pytest.fixture
def one_shot_stream():
    """Create a non-seekable stream for testing."""
    def _create_stream(data: bytes) -> OneShotStream:
        return OneShotStream(data)
    return _create_stream


@pytest.fixture
def counting_stream():
    """Create a seekable stream that records reads."""
    def _create_stream(data: bytes) -> CountingBytesIO:
        return CountingBytesIO(data)
    return _create_stream


@pytest.fixture
def sample_headers() -> Headers:
    """Sample headers for testing."""
    return Headers([
        ("Authorization", "Bearer token123"),
        ("User-Agent", "c_http_builder/0.1.0"),
        ("Accept", "*/*"),
    ])


@pytest.fixture
def sample_params() -> Params:
    """Sample params for testing."""
    return Params([
        ("name", "alice"),
        ("role", "admin"),
    ])


@pytest.fixture
def sample_file(tmp_path):
    """Write a small file to disk and return its path."""
    path = tmp_path / "report.csv"
    path.write_bytes(b"id,value\n1,42\n")
    return path
