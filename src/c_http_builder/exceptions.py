"""
Custom exceptions for c_http_builder.

This module defines the exception hierarchy used throughout
the library. Structural errors (bad method, bad URL) are fatal and
raised to the caller; data-quality problems are resolved locally
and never reach this hierarchy.
"""

from typing import Any, Optional


class HTTPBuilderError(Exception):
    """Base exception for all c_http_builder errors."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class InvalidMethodError(HTTPBuilderError):
    """Raised when a request method is outside the supported set."""
    
    def __init__(self, method: Any) -> None:
        super().__init__(f"Invalid method: unsupported request method {method!r}")
        self.method = method


class MalformedURLError(HTTPBuilderError):
    """Raised when the base URL of a request cannot be parsed."""
    
    def __init__(self, url: Any, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Malformed URL: {url!r}", cause)
        self.url = url


class ProtocolError(HTTPBuilderError):
    """Raised when the transport rejects an assembled request."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Protocol error: {message}", cause)


class StreamError(HTTPBuilderError):
    """Raised when there's an error with body stream operations."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Stream error: {message}", cause)
