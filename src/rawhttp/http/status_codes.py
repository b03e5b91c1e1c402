"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The small set of status codes this server can answer with.

=============================================================================
WHICH CODES, AND WHEN
=============================================================================

    ┌────────────────────────────────────────────────────────────────────┐
    │  CODE  REASON                  WHEN                                │
    ├────────────────────────────────────────────────────────────────────┤
    │  200   OK                      File read successfully              │
    │  400   Bad Request             Request line has < 2 tokens         │
    │  404   Not Found               File missing or unreadable          │
    │  405   Method Not Allowed      Anything other than GET             │
    │  500   Internal Server Error   Bug in the handler (never expected) │
    │  503   Service Unavailable     Worker queue is full                │
    └────────────────────────────────────────────────────────────────────┘

A static file server only needs a handful of codes. Keeping the enum
small makes it obvious, at a glance, every answer a client can get.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server.

    IntEnum means a member compares and formats like a plain int:

        HTTPStatus.NOT_FOUND == 404        → True
        f"{HTTPStatus.NOT_FOUND}"          → "404"

    which is exactly what the status line needs.
    """

    OK = 200                        # File found and read
    BAD_REQUEST = 400               # Malformed request line
    NOT_FOUND = 404                 # File missing or unreadable
    METHOD_NOT_ALLOWED = 405        # Only GET is supported
    INTERNAL_SERVER_ERROR = 500     # Unexpected handler failure
    SERVICE_UNAVAILABLE = 503       # Worker pool saturated

    def __str__(self) -> str:
        return str(self.value)

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
}
