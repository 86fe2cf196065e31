"""
c_http_builder - HTTP request construction library

Turns a logical description of an outgoing request (method, headers,
params, body payload, file attachments) into an immutable request with
legal header bytes, a negotiated content type and a framed body.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

# Import main components for easy access
from .builder import RequestBuilder, build
from .exceptions import (
    HTTPBuilderError,
    InvalidMethodError,
    MalformedURLError,
    ProtocolError,
    StreamError,
)
from .headers import attach, sanitize_key, sanitize_value
from .http_primitives import FileParam, Headers, Method, Params, Request, URLComponents
from .media_types import APPLICATION_JSON, OCTET_STREAM, MediaType, guess_file_type, resolve
from .multipart import FormBody, MultipartBody, Part
from .payloads import (
    ByteString,
    Bytes,
    JSONSerializer,
    Serializer,
    Stream,
    Structured,
    Text,
)
from .streams import (
    BytesBody,
    FileBody,
    RequestBody,
    StreamBody,
    read_stream_to_bytes,
)

__all__ = [
    "RequestBuilder",
    "build",
    "HTTPBuilderError",
    "InvalidMethodError",
    "MalformedURLError",
    "ProtocolError",
    "StreamError",
    "attach",
    "sanitize_key",
    "sanitize_value",
    "FileParam",
    "Headers",
    "Method",
    "Params",
    "Request",
    "URLComponents",
    "APPLICATION_JSON",
    "OCTET_STREAM",
    "MediaType",
    "guess_file_type",
    "resolve",
    "FormBody",
    "MultipartBody",
    "Part",
    "ByteString",
    "Bytes",
    "JSONSerializer",
    "Serializer",
    "Stream",
    "Structured",
    "Text",
    "BytesBody",
    "FileBody",
    "RequestBody",
    "StreamBody",
    "read_stream_to_bytes",
]
