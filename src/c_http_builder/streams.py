"""
Request body framework for c_http_builder.

This module provides the RequestBody capability shared by every body
the builder produces, plus the single-part bodies: in-memory bytes,
on-disk files and open streams. Bodies are read only when written, so
building a request never consumes a caller's stream.
"""

import io
import logging
import os
from abc import ABC, abstractmethod
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    BinaryIO,
    Iterator,
    Optional,
    Tuple,
    Union,
)

from .exceptions import StreamError
from .media_types import MediaType

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024  # 64 KiB


class RequestBody(ABC):
    """
    Base interface for all request bodies.

    A body knows its content type and (best-effort) length and can write
    itself any number of times, either to a sink with a ``write`` method
    or as a sequence of chunks.
    """

    @property
    @abstractmethod
    def content_type(self) -> Optional[MediaType]:
        """Media type of the body, or None if it has none."""
        pass

    @property
    @abstractmethod
    def content_length(self) -> int:
        """Length in bytes; for streams this is advisory and may be 0."""
        pass

    @property
    def is_length_exact(self) -> bool:
        """Whether content_length can be used for Content-Length framing."""
        return True

    @abstractmethod
    def iter_chunks(self) -> Iterator[bytes]:
        """Yield the body bytes. Reading happens here, never earlier."""
        pass

    def write_to(self, sink: Any) -> int:
        """
        Write the whole body to sink.

        Args:
            sink: Any object with a ``write(bytes)`` method

        Returns:
            Number of bytes written
        """
        written = 0
        for chunk in self.iter_chunks():
            sink.write(chunk)
            written += len(chunk)
        return written

    def read(self) -> bytes:
        """Write the body into memory and return it."""
        sink = io.BytesIO()
        self.write_to(sink)
        return sink.getvalue()

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self.iter_chunks():
            yield chunk

    async def aread(self) -> bytes:
        """Read entire body and return as bytes."""
        return await read_stream_to_bytes(self)


class BytesBody(RequestBody):
    """Body backed by an in-memory byte buffer."""

    def __init__(
        self,
        content: Union[bytes, bytearray, memoryview],
        content_type: Optional[MediaType] = None,
    ) -> None:
        self._content = content
        self._content_type = content_type

    @property
    def content_type(self) -> Optional[MediaType]:
        return self._content_type

    @property
    def content_length(self) -> int:
        return memoryview(self._content).nbytes

    def iter_chunks(self) -> Iterator[bytes]:
        if self.content_length:
            yield bytes(self._content)

    def __repr__(self) -> str:
        return f"BytesBody(content_type={self._content_type}, content_length={self.content_length})"


class FileBody(RequestBody):
    """
    Body backed by a file on disk.

    The size is queried when the body is created; the file itself is
    opened and read each time the body is written.
    """

    def __init__(
        self,
        path: Union[str, "os.PathLike[str]"],
        content_type: Optional[MediaType] = None,
        chunk_size: Optional[int] = None,
    ) -> None:
        """
        Initialize FileBody.

        Raises:
            StreamError: If the file size cannot be determined
        """
        self._path = path
        self._content_type = content_type
        self._chunk_size = chunk_size or DEFAULT_CHUNK_SIZE
        try:
            self._size = os.path.getsize(path)
        except OSError as e:
            raise StreamError(f"Cannot stat file {os.fspath(path)!r}: {e}", cause=e) from e

    @property
    def content_type(self) -> Optional[MediaType]:
        return self._content_type

    @property
    def content_length(self) -> int:
        return self._size

    def iter_chunks(self) -> Iterator[bytes]:
        try:
            with open(self._path, "rb") as f:
                while True:
                    chunk = f.read(self._chunk_size)
                    if not chunk:
                        break
                    yield chunk
        except OSError as e:
            raise StreamError(f"Error reading file {os.fspath(self._path)!r}: {e}", cause=e) from e

    def __repr__(self) -> str:
        return f"FileBody(path={os.fspath(self._path)!r}, content_type={self._content_type})"


class StreamBody(RequestBody):
    """
    Body backed by an open binary stream.

    Nothing is read when the body is created. Each write clones the
    stream's remaining bytes: for a seekable stream the body rewinds to
    the position captured at creation, copies chunk by chunk, then puts
    the caller's position back, so the body can be written any number of
    times. A stream that cannot seek can be written exactly once.

    The body never closes the stream.
    """

    def __init__(
        self,
        stream: BinaryIO,
        content_type: Optional[MediaType] = None,
        chunk_size: Optional[int] = None,
    ) -> None:
        self._stream = stream
        self._content_type = content_type
        self._chunk_size = chunk_size or DEFAULT_CHUNK_SIZE
        self._start = self._initial_position(stream)
        self._consumed = False

    @staticmethod
    def _initial_position(stream: BinaryIO) -> Optional[int]:
        try:
            if stream.seekable():
                return stream.tell()
        except (AttributeError, OSError, ValueError) as e:
            logger.debug(f"Stream position unavailable, treating as one-shot: {e}")
        return None

    @property
    def seekable(self) -> bool:
        return self._start is not None

    def _probe_length(self) -> Tuple[int, bool]:
        """Return (length, exact). Failures report (0, False)."""
        try:
            if self._start is not None:
                current = self._stream.tell()
                end = self._stream.seek(0, io.SEEK_END)
                self._stream.seek(current)
                return max(end - self._start, 0), True
            peek = getattr(self._stream, "peek", None)
            if peek is not None:
                return len(peek()), False
        except (OSError, ValueError) as e:
            logger.debug(f"Could not measure stream length: {e}")
        return 0, False

    @property
    def content_type(self) -> Optional[MediaType]:
        return self._content_type

    @property
    def content_length(self) -> int:
        return self._probe_length()[0]

    @property
    def is_length_exact(self) -> bool:
        return self._probe_length()[1]

    def iter_chunks(self) -> Iterator[bytes]:
        if self._start is not None:
            yield from self._iter_seekable(self._start)
        else:
            yield from self._iter_once()

    def _iter_seekable(self, start: int) -> Iterator[bytes]:
        try:
            original = self._stream.tell()
            self._stream.seek(start)
        except (OSError, ValueError) as e:
            raise StreamError(f"Cannot rewind body stream: {e}", cause=e) from e

        try:
            yield from self._read_chunks()
        finally:
            try:
                self._stream.seek(original)
            except (OSError, ValueError) as e:
                logger.debug(f"Could not restore body stream position: {e}")

    def _iter_once(self) -> Iterator[bytes]:
        if self._consumed:
            raise StreamError(
                "Body stream is not seekable and was already written; "
                "supply a seekable stream or bytes to send it again"
            )
        self._consumed = True
        yield from self._read_chunks()

    def _read_chunks(self) -> Iterator[bytes]:
        while True:
            try:
                chunk = self._stream.read(self._chunk_size)
            except (OSError, ValueError) as e:
                raise StreamError(f"Error reading from body stream: {e}", cause=e) from e
            if not chunk:
                break
            yield bytes(chunk)

    def __repr__(self) -> str:
        return f"StreamBody(content_type={self._content_type}, seekable={self.seekable})"


# Utility functions for working with streams
async def read_stream_to_bytes(stream: AsyncIterable[bytes]) -> bytes:
    """
    Read entire stream and return as bytes.

    Args:
        stream: Async iterable of bytes

    Returns:
        All bytes from the stream concatenated
    """
    chunks = []
    async for chunk in stream:
        chunks.append(chunk)
    return b"".join(chunks)
