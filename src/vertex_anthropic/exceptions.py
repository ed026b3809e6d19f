"""Custom exceptions for vertex-anthropic."""

from __future__ import annotations

from typing import Any

__all__ = [
    "ConfigurationError",
    "StreamProtocolError",
    "StreamServerError",
    "TransportError",
    "UnsupportedEventError",
    "VertexAnthropicError",
    "VertexApiError",
]


class VertexAnthropicError(Exception):
    """Base exception for all vertex-anthropic errors."""


class ConfigurationError(VertexAnthropicError):
    """Raised when settings or chat options are missing or inconsistent."""


class StreamProtocolError(VertexAnthropicError):
    """Raised when the event stream breaks its sequencing contract.

    Examples are a delta for a content block that was never started, or a
    second tool invocation opened while another one is still in flight.
    The whole stream reduction is aborted.
    """


class UnsupportedEventError(StreamProtocolError):
    """Raised when an event carries a content or delta type we cannot classify."""


class StreamServerError(VertexAnthropicError):
    """Raised when the server sends an ``error`` event mid-stream."""

    def __init__(self, error_type: str, message: str) -> None:
        super().__init__(f"{error_type}: {message}")
        self.error_type = error_type
        self.message = message


class VertexApiError(VertexAnthropicError):
    """Non-success HTTP response from the Vertex AI endpoint."""

    def __init__(self, status_code: int, body: Any = None) -> None:
        super().__init__(f"Vertex AI request failed with status {status_code}: {body!r}")
        self.status_code = status_code
        self.body = body


class TransportError(VertexAnthropicError):
    """Connection, timeout or other transport-level failure."""
