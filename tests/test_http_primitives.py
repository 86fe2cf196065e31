"""
Unit tests for HTTP primitives.

Tests Method, Headers, Params, FileParam, URLComponents and Request,
including how a Request is framed into h11 events.
"""

import dataclasses
import io

import h11
import pytest

from c_http_builder.exceptions import InvalidMethodError, ProtocolError
from c_http_builder.http_primitives import (
    FileParam,
    Headers,
    Method,
    Params,
    Request,
    URLComponents,
)
from c_http_builder.media_types import APPLICATION_JSON
from c_http_builder.streams import BytesBody, StreamBody


class TestMethod:
    """Test Method enum."""

    @pytest.mark.parametrize("value", ["GET", "get", b"POST", " put ", Method.PATCH])
    def test_parse_valid(self, value) -> None:
        """Test resolving supported methods."""
        assert isinstance(Method.parse(value), Method)

    @pytest.mark.parametrize("value", ["HEAD", "TRACE", "", None, 42, b"\xff"])
    def test_parse_invalid(self, value) -> None:
        """Test that unsupported methods raise InvalidMethodError."""
        with pytest.raises(InvalidMethodError):
            Method.parse(value)

    def test_permits_body(self) -> None:
        """Test which methods may carry a payload."""
        assert not Method.GET.permits_body
        assert not Method.DELETE.permits_body
        assert Method.POST.permits_body
        assert Method.PUT.permits_body
        assert Method.PATCH.permits_body


class TestHeadersAndParams:
    """Test the ordered pair containers."""

    def test_from_mapping(self) -> None:
        """Test building from a dict keeps order."""
        headers = Headers({"A": "1", "B": "2"})
        assert headers.items() == [("A", "1"), ("B", "2")]
        assert len(headers) == 2

    def test_duplicates(self) -> None:
        """Test that duplicate keys are preserved."""
        params = Params([("a", "1"), ("a", "2")]).add("b", "3")
        assert params.get("a") == "1"
        assert params.get_all("a") == ["1", "2"]
        assert "b" in params
        assert list(params) == [("a", "1"), ("a", "2"), ("b", "3")]

    def test_of(self) -> None:
        """Test coercion of caller input."""
        params = Params({"a": "1"})
        assert Params.of(None) is None
        assert Params.of(params) is params
        assert Params.of({"a": "1"}) == params

    def test_content_type_lookup(self) -> None:
        """Test the Content-Type helpers."""
        assert Headers({"content-TYPE": "text/csv"}).get_content_type() == "text/csv"
        assert Headers({"Content-Type": "application/xml"}).contains_content_type()
        assert not Headers({"Content-Type": ""}).contains_content_type()
        assert not Headers({"Content-Type": None}).contains_content_type()
        assert not Headers().contains_content_type()


class TestFileParam:
    """Test FileParam construction."""

    def test_from_path_defaults_file_name(self, sample_file) -> None:
        """Test that the file name defaults to the base name."""
        file_param = FileParam.from_path("report", sample_file)
        assert file_param.file_name == "report.csv"
        assert file_param.stream is None

    def test_from_stream(self) -> None:
        """Test attaching a stream."""
        stream = io.BytesIO(b"x")
        file_param = FileParam.from_stream("f", stream, "t.txt")
        assert file_param.stream is stream
        assert file_param.path is None

    def test_requires_exactly_one_source(self, sample_file) -> None:
        """Test that path and stream are mutually exclusive."""
        with pytest.raises(ValueError):
            FileParam(name="f", file_name="t.txt")
        with pytest.raises(ValueError):
            FileParam(name="f", file_name="t.txt", path=sample_file, stream=io.BytesIO())


class TestURLComponents:
    """Test URLComponents class functionality."""

    def test_from_url_with_https(self) -> None:
        """Test creating URLComponents from HTTPS URL."""
        url = URLComponents.from_url("https://example.com:8443/api/v1?x=1")
        assert url.scheme == b"https"
        assert url.host == b"example.com"
        assert url.port == 8443
        assert url.path == b"/api/v1"
        assert url.target == b"/api/v1?x=1"
        assert url.authority == b"example.com:8443"

    def test_from_url_without_path(self) -> None:
        """Test default port and path."""
        url = URLComponents.from_url("https://example.com")
        assert url.port == 443
        assert url.path == b"/"
        assert url.authority == b"example.com"


class TestRequest:
    """Test Request class functionality."""

    def test_create(self) -> None:
        """Test creating a bodiless request."""
        request = Request(Method.GET, "http://example.com/api?q=1", ((b"Accept", b"*/*"),))
        assert request.host == b"example.com"
        assert request.port == 80
        assert request.scheme == b"http"
        assert request.target == b"/api?q=1"
        assert request.get_header("accept") == b"*/*"
        assert request.has_header(b"ACCEPT")
        assert request.get_header("missing") is None

    def test_immutability(self) -> None:
        """Test that Request is immutable."""
        request = Request(Method.GET, "http://example.com/")
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.url = "http://other.example/"

    def test_validation(self) -> None:
        """Test validation of constructor arguments."""
        with pytest.raises(ValueError):
            Request("GET", "http://example.com/")
        with pytest.raises(ValueError):
            Request(Method.GET, "http://example.com/", [(b"A", b"1")])
        with pytest.raises(ValueError):
            Request(Method.GET, "http://example.com/", (("A", "1"),))

    @pytest.mark.parametrize("method", [Method.GET, Method.DELETE])
    def test_no_body_on_bodiless_methods(self, method: Method) -> None:
        """Test that GET and DELETE refuse a body."""
        with pytest.raises(ValueError):
            Request(method, "http://example.com/", body=BytesBody(b"x"))


class TestH11Framing:
    """Test conversion of requests into h11 events."""

    def test_get_request(self) -> None:
        """Test a GET request gets a Host header and no framing."""
        request = Request(Method.GET, "https://api.example.com/items?a=1", ((b"Accept", b"*/*"),))
        event = request.to_h11()
        assert event.method == b"GET"
        assert event.target == b"/items?a=1"
        assert list(event.headers) == [(b"host", b"api.example.com"), (b"accept", b"*/*")]

    def test_caller_host_kept(self) -> None:
        """Test that an explicit Host header is not duplicated."""
        request = Request(Method.GET, "http://example.com/", ((b"Host", b"virtual.example"),))
        assert request.framing_headers() == [(b"Host", b"virtual.example")]

    def test_exact_body_uses_content_length(self) -> None:
        """Test Content-Length framing for sized bodies."""
        request = Request(
            Method.POST,
            "http://example.com:8080/data",
            ((b"Content-Type", b"text/plain"), (b"X-Id", b"7")),
            BytesBody(b'{"a":1}', APPLICATION_JSON),
        )
        assert request.framing_headers() == [
            (b"Host", b"example.com:8080"),
            (b"X-Id", b"7"),
            (b"Content-Type", b"application/json; charset=utf-8"),
            (b"Content-Length", b"7"),
        ]

    def test_inexact_body_uses_chunked(self, one_shot_stream) -> None:
        """Test chunked framing when the stream length is not exact."""
        request = Request(Method.PUT, "http://example.com/", body=StreamBody(one_shot_stream(b"abc")))
        headers = dict(request.framing_headers())
        assert headers[b"Transfer-Encoding"] == b"chunked"
        assert b"Content-Length" not in headers

    def test_events_serialize(self, one_shot_stream) -> None:
        """Test that h11 accepts and serializes every event."""
        request = Request(Method.POST, "http://example.com/up", body=StreamBody(one_shot_stream(b"abc")))
        connection = h11.Connection(h11.CLIENT)
        wire = b"".join(connection.send(event) for event in request.h11_events())
        assert wire.startswith(b"POST /up HTTP/1.1\r\n")
        assert b"transfer-encoding: chunked\r\n" in wire.lower()
        assert wire.endswith(b"3\r\nabc\r\n0\r\n\r\n")

    def test_illegal_header_name(self) -> None:
        """Test that h11 rejections surface as ProtocolError."""
        request = Request(Method.GET, "http://example.com/", ((b"Bad(Name", b"x"),))
        with pytest.raises(ProtocolError) as exc_info:
            request.to_h11()
        assert isinstance(exc_info.value.cause, h11.LocalProtocolError)
