"""
=============================================================================
HTTP RESPONSE FORMATTING
=============================================================================

This module turns a status code and a body into the exact bytes written
back on the socket.

=============================================================================
WIRE FORMAT
=============================================================================

Every response has the same shape, in the same header order:

    ┌─────────────────────────────────────────────────────────────────┐
    │  HTTP/1.1 200 OK\r\n                    ← Status line           │
    │  Server: RustRawHTTP/1.0\r\n            ← Fixed identification  │
    │  Content-Length: 43\r\n                 ← BYTES, not characters │
    │  Content-Type: text/html; charset=utf-8\r\n                     │
    │  Connection: close\r\n                  ← No keep-alive         │
    │  \r\n                                   ← End of headers        │
    │  <!DOCTYPE html><html>...</html>        ← Body, verbatim        │
    └─────────────────────────────────────────────────────────────────┘

CONTENT-LENGTH COUNTS BYTES:
────────────────────────────

    body = "héllo"
    len(body)                  → 5 characters
    len(body.encode("utf-8"))  → 6 bytes   ← what the client must read

A client that trusts a character count would stop reading one byte
early and leave the last byte on the wire.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional

from .status_codes import HTTPStatus
from .content_type import classify_body


HTTP_VERSION = "HTTP/1.1"
SERVER_NAME = "RustRawHTTP/1.0"

BAD_REQUEST_BODY = "Invalid request format"
METHOD_NOT_ALLOWED_BODY = "Only GET method is supported"
SERVICE_UNAVAILABLE_BODY = "Server overloaded"


@dataclass
class HTTPResponse:
    """
    An HTTP response, built fresh for each request and never reused.

    Attributes:
        status: Status code.
        body: Response body as text. Encoded as UTF-8 on the wire.
        reason: Reason phrase. Defaults to the standard phrase for status.
        content_type: Content-Type header. When None, it is sniffed from
                      the body when the response is serialized.
    """

    status: HTTPStatus = HTTPStatus.OK
    body: str = ""
    reason: Optional[str] = None
    content_type: Optional[str] = None
    version: str = HTTP_VERSION

    def __post_init__(self):
        self.status = HTTPStatus(self.status)
        if self.reason is None:
            self.reason = self.status.phrase

    @property
    def status_line(self) -> str:
        """
        Get the status line, e.g. "HTTP/1.1 404 Not Found".
        """
        return f"{self.version} {self.status.value} {self.reason}"

    @property
    def body_bytes(self) -> bytes:
        """The body as it goes on the wire."""
        return self.body.encode("utf-8")

    @property
    def content_length(self) -> int:
        """Body length in bytes."""
        return len(self.body_bytes)

    @property
    def headers(self) -> dict[str, str]:
        """
        Response headers, in wire order.

        The set is fixed: no Date, no caching headers, no keep-alive.
        """
        return {
            "Server": SERVER_NAME,
            "Content-Length": str(self.content_length),
            "Content-Type": self.content_type or classify_body(self.body),
            "Connection": "close",
        }

    def to_bytes(self) -> bytes:
        """
        Serialize the response for a single socket.sendall().

        Returns:
            Status line, headers, blank line and body as bytes.
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        # Empty line separates headers from body
        lines.append("")

        head = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return head + self.body_bytes


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# One function per answer the server can give. The fixed bodies live here
# so the connection handler never spells them out.
#
# =============================================================================

def ok(body: str, content_type: Optional[str] = None) -> HTTPResponse:
    """200 OK with the given body."""
    return HTTPResponse(status=HTTPStatus.OK, body=body, content_type=content_type)


def bad_request(message: str = BAD_REQUEST_BODY) -> HTTPResponse:
    """400 Bad Request for a request line with fewer than two tokens."""
    return HTTPResponse(status=HTTPStatus.BAD_REQUEST, body=message)


def not_found(message: str) -> HTTPResponse:
    """404 Not Found."""
    return HTTPResponse(status=HTTPStatus.NOT_FOUND, body=message)


def method_not_allowed(message: str = METHOD_NOT_ALLOWED_BODY) -> HTTPResponse:
    """405 Method Not Allowed for anything other than GET."""
    return HTTPResponse(status=HTTPStatus.METHOD_NOT_ALLOWED, body=message)


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    """500 Internal Server Error."""
    return HTTPResponse(status=HTTPStatus.INTERNAL_SERVER_ERROR, body=message)


def service_unavailable(message: str = SERVICE_UNAVAILABLE_BODY) -> HTTPResponse:
    """503 Service Unavailable, sent when no worker can take the connection."""
    return HTTPResponse(status=HTTPStatus.SERVICE_UNAVAILABLE, body=message)
