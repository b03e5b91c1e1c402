"""
=============================================================================
REQUEST LINE PARSING
=============================================================================

This server only looks at the FIRST line of a request. Headers and body
are read off the wire (as part of the single recv) but never interpreted.

=============================================================================
THE REQUEST LINE
=============================================================================

    GET /notes.txt HTTP/1.1\r\n
    └─┘ └────────┘ └──────┘
   Method   Path    Version (kept, but never checked)

Parsing is deliberately lenient:

    ┌────────────────────────────────────────────────────────────────────┐
    │  INPUT (first line)          TOKENS                   RESULT       │
    ├────────────────────────────────────────────────────────────────────┤
    │  "GET / HTTP/1.1"            ["GET", "/", "HTTP/1.1"] GET /        │
    │  "GET  /a.txt"               ["GET", "/a.txt"]        GET /a.txt   │
    │  "DELETE /x HTTP/1.1"        ["DELETE", "/x", ...]    405 later    │
    │  "GET"                       ["GET"]                  400          │
    │  ""                          []                       400          │
    └────────────────────────────────────────────────────────────────────┘

=============================================================================
BYTES FIRST, TEXT LATER
=============================================================================

Request bytes are not guaranteed to be valid UTF-8. Instead of decoding
the whole buffer and then splitting, we split the RAW bytes on ASCII
whitespace and decode only the tokens we keep. Invalid sequences become
U+FFFD; decoding never raises.

    b"GET /caf\\xe9 HTTP/1.1"  →  ["GET", "/caf\\ufffd", "HTTP/1.1"]

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional


class HTTPParseError(Exception):
    """
    Raised when a request line cannot be turned into a request.

    Carries the HTTP status code that should be sent back, so the caller
    does not have to map exception types to codes.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    A parsed request line.

    Attributes:
        method: First token, e.g. "GET". Not validated.
        path: Second token, e.g. "/index.html". Not normalized.
        version: Third token if present, otherwise "".
        client_address: (ip, port) of the peer, when known.
    """

    method: str
    path: str
    version: str = ""
    client_address: Optional[tuple[str, int]] = None


def first_line(raw: bytes) -> bytes:
    """
    Get the first line of the buffer, without its line terminator.

    Lines end at "\\n"; a "\\r" right before it belongs to the terminator.
    With no "\\n" at all, the whole buffer is the first line.
    """
    line, _, _ = raw.partition(b"\n")
    if line.endswith(b"\r"):
        line = line[:-1]
    return line


def split_request_line(raw: bytes) -> list[str]:
    """
    Split the first line of a raw request into whitespace-separated tokens.

    No validation happens here: the method may be anything, the path may
    be anything, and there may be any number of tokens.

    Args:
        raw: Bytes actually read from the socket.

    Returns:
        Tokens in order, decoded leniently as UTF-8. Empty list for an
        empty or blank first line.
    """
    # bytes.split() with no separator splits on ASCII whitespace and
    # drops empty tokens
    return [token.decode("utf-8", errors="replace") for token in first_line(raw).split()]


def parse_request(raw: bytes, client_address: Optional[tuple[str, int]] = None) -> HTTPRequest:
    """
    Parse a raw request buffer into an HTTPRequest.

    Raises:
        HTTPParseError: (400) if the first line has fewer than two tokens.
    """
    tokens = split_request_line(raw)
    if len(tokens) < 2:
        raise HTTPParseError("Invalid request format", status_code=400)

    method, path = tokens[0], tokens[1]
    version = tokens[2] if len(tokens) > 2 else ""
    return HTTPRequest(method=method, path=path, version=version, client_address=client_address)
