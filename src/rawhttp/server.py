"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together: the listener accepts, the pool runs a worker,
and the worker walks one connection through parse → route → resolve →
respond.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   HTTPServer    │                          │
    │                        └────────┬────────┘                          │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐        │
    │    │ SocketServer │    │  ThreadPool  │    │ FileResolver │        │
    │    │ (accepting)  │    │ (concurrency)│    │   (files)    │        │
    │    └──────────────┘    └──────────────┘    └──────────────┘        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ONE CONNECTION, START TO FINISH
=============================================================================

    1. ACCEPT            SocketServer hands us a Connection
    2. DISPATCH          Connection queued for a worker (503 if queue full)
    3. READ              one recv() of up to buffer_size bytes
                         └── fails → log, close, NO response
    4. PARSE             first line → tokens
                         └── < 2 tokens → 400 "Invalid request format"
    5. ROUTE             method == "GET"?
                         └── no → 405 "Only GET method is supported"
    6. RESOLVE           "public" + path → read file
                         └── fails → 404 "The requested file was not found"
    7. RESPOND           one sendall() of the formatted response
    8. CLOSE             always, whatever happened above

Every failure is handled at the step that detects it. Nothing a client
does can raise into the accept loop.

=============================================================================
"""

import logging
import time
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, ThreadPool
from .handlers import FileResolver
from .http import (
    HTTPRequest, HTTPResponse, HTTPParseError,
    parse_request, bad_request, method_not_allowed, internal_error, service_unavailable,
)


logger = logging.getLogger(__name__)
access_logger = logging.getLogger(f"{__name__}.access")


class HTTPServer:
    """
    Static file server.

    =========================================================================
    USAGE
    =========================================================================

        # Serve ./public on 127.0.0.1:8080 (blocks until Ctrl+C)
        HTTPServer().run()

        # Tests: free port, temporary root, run in a thread
        server = HTTPServer(ServerConfig(port=0, document_root=str(tmp)))
        threading.Thread(target=server.run, daemon=True).start()
        server.wait_until_ready(5.0)
        host, port = server.address
        ...
        server.shutdown()

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Initialize the server.

        Args:
            config: Server configuration. Defaults are used if not provided.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
        )
        self._resolver = FileResolver(
            self.config.document_root,
            index_file=self.config.index_file,
            contain_paths=self.config.contain_paths,
        )

        self._running = False

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listener is bound. False on timeout."""
        return self._socket_server.wait_until_ready(timeout)

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Returns after shutdown() or Ctrl+C.

        Raises:
            OSError: If the listening address cannot be bound.
        """
        self._setup_logging()
        self._running = True
        self._thread_pool.start()

        try:
            self._socket_server.start(self._handle_connection, on_ready=self._announce)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Stop accepting; run() returns once in-flight connections finish."""
        self._socket_server.shutdown()

    def _announce(self):
        """Log and print where the server is listening. Runs after listen()."""
        host, port = self.address
        logger.info(f"Serving {self.config.document_root} at http://{host}:{port}")

        print()
        print("╔══════════════════════════════════════════════════════════════╗")
        print("║  rawhttp static file server                                  ║")
        print(f"║  📍 http://{host}:{port}")
        print(f"║  📁 Document root: {self.config.document_root}")
        print(f"║  👷 Workers: {self.config.min_workers}-{self.config.max_workers} threads")
        print("║  Press Ctrl+C to stop                                        ║")
        print("╚══════════════════════════════════════════════════════════════╝")
        print()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("rawhttp").setLevel(level)

    def _shutdown(self):
        """Stop the pool, letting queued connections finish first."""
        logger.info("Shutting down server...")
        self._running = False
        self._thread_pool.shutdown(wait=True, timeout=self.config.timeout)
        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Hand a freshly accepted connection to a worker.

        Runs on the accept loop thread, so it must not block.
        """
        try:
            submitted = self._thread_pool.submit(self._process_connection, conn)
        except RuntimeError:
            submitted = False  # Pool already shutting down

        if not submitted:
            logger.warning(f"[{conn.id}] No worker available, rejecting {conn.peer}")
            try:
                conn.send_response(service_unavailable().to_bytes())
            finally:
                # Still on the accept thread: discard only buffered input
                conn.close(drain_timeout=0)

    def _process_connection(self, conn: Connection):
        """
        Serve one connection (runs on a worker thread).

        Sends exactly one response, or none if the read fails. The
        connection is closed on the way out in every case.
        """
        started = time.time()

        with conn:
            try:
                raw = conn.read_once()
            except OSError as e:
                logger.error(f"[{conn.id}] Failed to read from connection: {e}")
                return

            logger.debug(f"[{conn.id}] Request:\n{raw.decode('utf-8', errors='replace')}")

            try:
                request, response = self.dispatch(raw, conn.address)
            except Exception as e:
                logger.exception(f"[{conn.id}] Handler error: {e}")
                request, response = None, internal_error()

            if request is not None:
                conn.state = ConnectionState.ROUTED

            sent = conn.send_response(response.to_bytes())
            if sent:
                logger.debug(f"[{conn.id}] Response sent successfully")

            self._log_access(conn, request, response, started)

    def dispatch(
        self,
        raw: bytes,
        client_address: Optional[Tuple[str, int]] = None,
    ) -> Tuple[Optional[HTTPRequest], HTTPResponse]:
        """
        Turn raw request bytes into a response. No socket involved.

        Returns:
            (request, response). request is None when the request line
            could not be parsed.
        """
        try:
            request = parse_request(raw, client_address)
        except HTTPParseError as e:
            logger.info(f"Rejected request line ({e.status_code}): {e}")
            return None, bad_request(str(e))

        logger.info(f"Method: {request.method}, Path: {request.path}")

        if request.method != "GET":
            return request, method_not_allowed()

        return request, self._resolver.read(request.path)

    def _log_access(
        self,
        conn: Connection,
        request: Optional[HTTPRequest],
        response: HTTPResponse,
        started: float,
    ):
        """
        One line per response, Apache-style:

            127.0.0.1:53122 "GET /notes.txt" 200 11 0.42ms
        """
        line = f"{request.method} {request.path}" if request else "-"
        duration_ms = (time.time() - started) * 1000
        access_logger.info(
            f'{conn.peer} "{line}" {response.status.value} '
            f"{response.content_length} {duration_ms:.2f}ms"
        )


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """Factory for an HTTPServer."""
    return HTTPServer(config)
