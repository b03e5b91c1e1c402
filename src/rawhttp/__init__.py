"""
=============================================================================
RAWHTTP - A Static File Server on Raw Sockets
=============================================================================

A deliberately small HTTP/1.1 origin server: it accepts a TCP connection,
reads one request, finds the file, writes one response, and closes.

=============================================================================
WHAT IT DOES
=============================================================================

    $ python -m rawhttp --root ./public
    $ curl -i http://127.0.0.1:8080/

    HTTP/1.1 200 OK
    Server: RustRawHTTP/1.0
    Content-Length: 43
    Content-Type: text/html; charset=utf-8
    Connection: close

    <!DOCTYPE html><html><body>Hi</body></html>

=============================================================================
WHAT IT DOES NOT DO
=============================================================================

- Keep-alive             (every response carries Connection: close)
- Header parsing         (only the request line is read)
- Request bodies, chunked encoding, ranges, caching headers
- TLS
- Directory listings
- A MIME table           (HTML or plain text, nothing else)

=============================================================================
PACKAGE LAYOUT
=============================================================================

    rawhttp/
    ├── config.py          ServerConfig
    ├── server.py          HTTPServer: the per-connection pipeline
    ├── core/              sockets, connections, worker threads
    ├── http/              request line, status codes, responses
    └── handlers/          FileResolver

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
