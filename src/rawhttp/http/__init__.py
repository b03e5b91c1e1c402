"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything that knows about HTTP itself, and nothing about sockets:

    request.py        Request line → tokens → HTTPRequest
    status_codes.py   The status codes we answer with
    content_type.py   text/html vs text/plain
    response.py       HTTPResponse → exact wire bytes

Because none of these modules touch the network, they are tested
without starting a server.

=============================================================================
"""

from .status_codes import HTTPStatus
from .request import HTTPRequest, HTTPParseError, split_request_line, parse_request
from .content_type import classify_body, content_type_for
from .response import (
    HTTPResponse,
    ok,
    bad_request,
    not_found,
    method_not_allowed,
    internal_error,
    service_unavailable,
)

__all__ = [
    "HTTPStatus",
    "HTTPRequest",
    "HTTPParseError",
    "split_request_line",
    "parse_request",
    "classify_body",
    "content_type_for",
    "HTTPResponse",
    "ok",
    "bad_request",
    "not_found",
    "method_not_allowed",
    "internal_error",
    "service_unavailable",
]
