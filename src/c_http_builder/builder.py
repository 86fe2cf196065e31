"""
Request builder for c_http_builder.

This module implements the RequestBuilder, which turns a logical
description of a request into an immutable, transport-ready Request.
It picks exactly one body strategy per request from the method, the
presence of a body and files, the declared content type and the shape
of the payload.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Union

from . import query
from .exceptions import InvalidMethodError, MalformedURLError
from .headers import attach
from .http_primitives import FileParam, Headers, Method, PairsInput, Params, Request
from .media_types import MediaType, guess_file_type, resolve
from .multipart import FormBody, MultipartBody, Part
from .payloads import (
    ByteString,
    Bytes,
    JSONSerializer,
    Payload,
    Serializer,
    Stream,
    Structured,
    Text,
)
from .streams import DEFAULT_CHUNK_SIZE, BytesBody, FileBody, RequestBody, StreamBody

logger = logging.getLogger(__name__)

Strategy = Callable[
    [Method, str, Optional[Headers], Optional[Params], Optional[Payload], List[FileParam]],
    Request,
]


class RequestBuilder:
    """
    Builds requests from method, URL, headers, params, body and files.

    GET and DELETE never carry a payload: params go to the query string and
    any body or files are ignored. POST, PUT and PATCH send files as a
    multipart body (files win over a body), params as a form body when
    there is no body, and otherwise the body itself, with params appended
    to the query string.

    A builder holds no per-request state and can be shared between threads.
    """

    # Default configuration
    DEFAULT_CHUNK_SIZE = DEFAULT_CHUNK_SIZE

    def __init__(
        self,
        serializer: Optional[Serializer] = None,
        chunk_size: Optional[int] = None,
    ) -> None:
        """
        Initialize RequestBuilder.

        Args:
            serializer: Encodes Structured payloads; JSON when omitted
            chunk_size: Read size for stream and file bodies
        """
        if serializer is None:
            serializer = JSONSerializer()
        if not isinstance(serializer, Serializer):
            raise TypeError("serializer must provide serialize(obj, media_type)")
        if chunk_size is not None and chunk_size <= 0:
            raise ValueError("chunk_size must be positive")

        self._serializer = serializer
        self._chunk_size = chunk_size or self.DEFAULT_CHUNK_SIZE
        self._strategies: Dict[Method, Strategy] = {
            Method.GET: self._build_without_payload,
            Method.DELETE: self._build_without_payload,
            Method.POST: self._build_with_payload,
            Method.PUT: self._build_with_payload,
            Method.PATCH: self._build_with_payload,
        }

    def build(
        self,
        method: Union[Method, str, bytes],
        url: str,
        headers: Optional[PairsInput] = None,
        params: Optional[PairsInput] = None,
        body: Optional[Payload] = None,
        file_params: Optional[Iterable[Optional[FileParam]]] = None,
    ) -> Request:
        """
        Build a transport-ready request.

        Args:
            method: HTTP method
            url: Absolute http(s) URL
            headers: Caller headers; sanitized before use
            params: Query parameters, or form fields for bodiless writes
            body: Payload variant (Text, Bytes, ByteString, Stream, Structured)
            file_params: File attachments for a multipart body

        Returns:
            New Request instance

        Raises:
            InvalidMethodError: If the method is not supported
            MalformedURLError: If the URL cannot be parsed
            TypeError: If body is not a payload variant
        """
        method = Method.parse(method)
        strategy = self._strategies.get(method)
        if strategy is None:
            raise InvalidMethodError(method)

        files = [file_param for file_param in (file_params or ()) if file_param is not None]
        return strategy(method, url, Headers.of(headers), Params.of(params), body, files)

    def _build_without_payload(
        self,
        method: Method,
        url: str,
        headers: Optional[Headers],
        params: Optional[Params],
        body: Optional[Payload],
        files: List[FileParam],
    ) -> Request:
        if body is not None or files:
            logger.debug(f"{method.value} carries no payload, ignoring body and files")

        raw_headers = tuple(attach(headers))
        return Request(method=method, url=self._with_query(url, params), headers=raw_headers)

    def _build_with_payload(
        self,
        method: Method,
        url: str,
        headers: Optional[Headers],
        params: Optional[Params],
        body: Optional[Payload],
        files: List[FileParam],
    ) -> Request:
        raw_headers = tuple(attach(headers))

        if files:
            if body is not None:
                logger.debug(f"{method.value} has file attachments, ignoring body")
            request_body: RequestBody = self.multipart_body(params, files)
            final_url = self._with_query(url, None)
        elif body is None:
            request_body = FormBody(params)
            final_url = self._with_query(url, None)
        else:
            request_body = self.payload_body(body, resolve(headers))
            final_url = self._with_query(url, params)

        logger.debug(f"{method.value} {final_url} using {request_body!r}")
        return Request(method=method, url=final_url, headers=raw_headers, body=request_body)

    def payload_body(self, body: Payload, media_type: MediaType) -> RequestBody:
        """Encode a payload variant as a body tagged with media_type."""
        if isinstance(body, Text):
            return BytesBody(media_type.encode(body.value), media_type)
        if isinstance(body, (Bytes, ByteString)):
            return BytesBody(body.value, media_type)
        if isinstance(body, Stream):
            return StreamBody(body.value, media_type, self._chunk_size)
        if isinstance(body, Structured):
            return BytesBody(self._serializer.serialize(body.value, media_type), media_type)
        raise TypeError(
            "body must be Text, Bytes, ByteString, Stream or Structured, "
            f"got {type(body).__name__}"
        )

    def multipart_body(self, params: Optional[Params], files: List[FileParam]) -> MultipartBody:
        """Build a multipart body of params fields followed by file parts."""
        parts = []
        if params is not None:
            for key, value in params:
                if key is not None and value is not None:
                    parts.append(Part.form_field(key, value))
        for file_param in files:
            parts.append(self.file_part(file_param))
        return MultipartBody(parts)

    def file_part(self, file_param: FileParam) -> Part:
        """Build the multipart part for one file attachment."""
        media_type = guess_file_type(file_param.file_name)
        if file_param.path is not None:
            body: RequestBody = FileBody(file_param.path, media_type, self._chunk_size)
        else:
            body = StreamBody(file_param.stream, media_type, self._chunk_size)
        return Part.form_data(file_param.name, file_param.file_name, body)

    @staticmethod
    def _with_query(url: str, params: Optional[Params]) -> str:
        final_url = query.apply(url, params)
        if final_url is None:
            raise MalformedURLError(url)
        return final_url


_default_builder = RequestBuilder()


def build(
    method: Union[Method, str, bytes],
    url: str,
    headers: Optional[PairsInput] = None,
    params: Optional[PairsInput] = None,
    body: Optional[Payload] = None,
    file_params: Optional[Iterable[Optional[FileParam]]] = None,
) -> Request:
    """Build a request with the default builder (JSON serializer)."""
    return _default_builder.build(method, url, headers, params, body, file_params)
