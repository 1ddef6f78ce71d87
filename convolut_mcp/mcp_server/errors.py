"""Exception types raised by the Convolut MCP server."""

from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
)


class ConvolutError(Exception):
    """Base exception for everything that goes wrong talking to Convolut."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(ConvolutError):
    """Raised when the server cannot be configured (e.g. missing API key)."""


class ToolValidationError(ConvolutError):
    """Raised when tool arguments fail validation, before any remote call."""


class ContextNotFound(ConvolutError):
    """Raised when a context id is not among the listed contexts."""

    def __init__(self, context_id: str):
        self.context_id = context_id
        super().__init__(f"Context with ID {context_id} not found", status_code=404)


class TransportError(ConvolutError):
    """Raised when an HTTP exchange with the Convolut API fails."""


class RequestTimeout(TransportError):
    """The request did not complete within its timeout."""


class ConnectionFailed(TransportError):
    """The API host could not be reached."""


class TooManyRedirects(TransportError):
    """The redirect chain exceeded the configured hop limit."""


class MalformedRedirect(TransportError):
    """A redirect response did not carry a Location header."""


class ApiError(TransportError):
    """The API answered with a non-2xx, non-redirect status."""

    def __init__(self, status_code: int, body: str):
        self.body = body
        super().__init__(
            f"API Error {status_code}: {body}",
            status_code=status_code,
            details={"body": body},
        )


class InvalidResponse(TransportError):
    """The API answered 2xx with a body that is not usable JSON."""

    def __init__(self, body: str, reason: str = "Invalid JSON response"):
        self.body = body
        super().__init__(f"{reason}: {body}", details={"body": body})


class ProtocolError(Exception):
    """A JSON-RPC level failure, reported as an ``error`` object."""

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(message)

    @classmethod
    def parse_error(cls, message: str) -> "ProtocolError":
        return cls(PARSE_ERROR, f"Parse error: {message}")

    @classmethod
    def invalid_request(cls, message: str) -> "ProtocolError":
        return cls(INVALID_REQUEST, f"Invalid request: {message}")

    @classmethod
    def method_not_found(cls, method: str) -> "ProtocolError":
        return cls(METHOD_NOT_FOUND, f"Method not found: {method}")

    @classmethod
    def tool_not_found(cls, name: str) -> "ProtocolError":
        return cls(METHOD_NOT_FOUND, f"Tool not found: {name}")

    @classmethod
    def invalid_params(cls, message: str) -> "ProtocolError":
        return cls(INVALID_PARAMS, message)

    @classmethod
    def internal_error(cls, message: str) -> "ProtocolError":
        return cls(INTERNAL_ERROR, f"Internal error: {message}")
