"""
=============================================================================
TCP LISTENER AND ACCEPT LOOP
=============================================================================

Owns the listening socket. Binds, listens, and hands every accepted
connection to a callback. It knows nothing about HTTP.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create a TCP socket
    2. bind()      Reserve host:port          ◄── failure here is FATAL
    3. listen()    Let the kernel queue incoming connections
    4. accept()    Take one connection off the queue (repeat forever)
    5. close()     Release the listening socket on shutdown

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Created once at startup
                    │   127.0.0.1:8080      │     Never sends/receives data
                    └───────────┬───────────┘
                                │ accept()
        ┌───────────────────────┼───────────────────────┐
        ▼                       ▼                       ▼
   ┌─────────┐            ┌─────────┐            ┌─────────┐
   │ Client  │            │ Client  │            │ Client  │
   │ socket  │            │ socket  │            │ socket  │
   └─────────┘            └─────────┘            └─────────┘
   One per connection, wrapped in Connection and handed to the callback.

=============================================================================
ERROR POLICY
=============================================================================

    bind() fails      → log, re-raise. The process entry point exits.
    accept() fails    → log, keep accepting. One bad accept (e.g. the
                        client reset before we got to it, or we ran out
                        of file descriptors for a moment) must not take
                        the server down.

=============================================================================
"""

import socket
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP listener.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    start(callback)                                                   │
    │        ├──► _create_socket()   socket() + SO_REUSEADDR               │
    │        ├──► bind()             raises OSError on failure             │
    │        ├──► listen()                                                 │
    │        └──► _accept_loop()     blocks until shutdown()               │
    │                 └──► accept() → Connection → callback(conn)          │
    │                                                                      │
    │    shutdown()        stop the loop (takes effect within 1 second)    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown()
    """

    # accept() wakes up this often to notice shutdown()
    poll_interval = 1.0

    def __init__(self, config: ServerConfig):
        """
        Initialize the socket server. No socket is created until start().
        """
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set once listen() succeeds, so tests can wait for the port
        self._ready_event = threading.Event()

    @property
    def address(self) -> Tuple[str, int]:
        """
        Get the bound (host, port).

        With port 0 in the config the OS picks the port; once listening,
        the real port is reported.
        """
        if self._socket is not None:
            host, port = self._socket.getsockname()[:2]
            return (host, port)
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create the listening TCP socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restarting the server must not fail with "Address already in use"
        # while old connections sit in TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.settimeout(self.poll_interval)
        return sock

    def start(
        self,
        connection_handler: Callable[[Connection], None],
        on_ready: Optional[Callable[[], None]] = None,
    ):
        """
        Bind, listen and run the accept loop. Blocks until shutdown().

        Args:
            connection_handler: Called with each accepted Connection. It
                                must return quickly (hand the connection to
                                a worker) or acceptance stalls.
            on_ready: Called once listen() has succeeded, before
                      wait_until_ready() returns. Never called if bind fails.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)

        self._running = True

        host, port = self.address
        logger.info(f"Listening on {host}:{port}")

        try:
            if on_ready is not None:
                on_ready()
            self._ready_event.set()
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections until shutdown() is called.

            while running:
                accept()          (wakes every poll_interval)
                Connection(...)   (applies buffer size and deadline)
                handler(conn)     (hands off to a worker)
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                # Normal: lets us check self._running
                continue
            except OSError as e:
                if not self._running:
                    break  # Socket closed by shutdown
                logger.error(f"Connection failed: {e}")
                continue

            logger.info(f"New connection: {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
            )
            connection_handler(conn)

    def shutdown(self):
        """
        Stop accepting connections.

        Safe to call from any thread, and more than once. The loop notices
        within poll_interval and closes the listening socket.
        """
        if self._running:
            logger.info("Shutting down listener...")
        self._running = False

    def _cleanup(self):
        """Close the listening socket."""
        self._running = False
        self._ready_event.clear()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        logger.info("Listener stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the socket is bound and listening.

        Returns:
            True if listening, False on timeout.
        """
        return self._ready_event.wait(timeout)
