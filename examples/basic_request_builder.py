"""
Basic request building example using c_http_builder.

This example demonstrates how to build requests for each body
strategy and serialize them to HTTP/1.1 bytes with h11.
"""

import io
import logging

import h11

from c_http_builder import FileParam, Method, RequestBuilder, Stream, Structured, Text

# Configure logging
logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)


def to_wire(request) -> bytes:
    """Serialize a request the way an HTTP/1.1 client would send it."""
    connection = h11.Connection(h11.CLIENT)
    return b"".join(connection.send(event) for event in request.h11_events())


def main():
    builder = RequestBuilder()

    # GET: params land in the query string
    request = builder.build(Method.GET, "https://httpbin.org/get", params={"q": "python"})
    logger.info(f"GET url: {request.url}")

    # POST without body: params become a form
    request = builder.build(Method.POST, "https://httpbin.org/post", params={"user": "alice"})
    logger.info(f"Form body: {request.body.read()!r}")

    # PUT with a declared content type
    request = builder.build(
        Method.PUT,
        "https://httpbin.org/put",
        headers={"Content-Type": "application/xml", "X-Client": "démo"},
        body=Text("<a/>"),
    )
    logger.info(f"Wire bytes:\n{to_wire(request).decode()}")

    # POST a structured object as JSON
    request = builder.build(Method.POST, "https://httpbin.org/post", body=Structured({"id": 1}))
    logger.info(f"JSON body: {request.body.read()!r}")

    # Stream-backed body: read only while the request is written
    stream = io.BytesIO(b"streamed payload")
    request = builder.build(Method.POST, "https://httpbin.org/post", body=Stream(stream))
    logger.info(f"First write: {request.body.read()!r}, second write: {request.body.read()!r}")

    # Multipart upload
    upload = io.BytesIO(b"file contents")
    request = builder.build(
        Method.POST,
        "https://httpbin.org/post",
        params={"description": "monthly report"},
        file_params=[FileParam.from_stream("file", upload, "report.txt")],
    )
    logger.info(f"Multipart ({request.body.content_type}):\n{request.body.read().decode()}")


if __name__ == "__main__":
    main()
