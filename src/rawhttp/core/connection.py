"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for the lifetime of one request.

=============================================================================
ONE READ, ONE RESPONSE
=============================================================================

TCP is a byte stream: a single recv() may return part of a request, all
of it, or (with pipelining) more than one. A full HTTP server loops until
it sees "\\r\\n\\r\\n". This server does NOT:

    recv(1024) ──► whatever arrived ──► first line only

    ┌─────────────────────────────────────────────────────────────────┐
    │  Client sends 3000 bytes of headers                             │
    │                                                                  │
    │  recv(1024) → first 1024 bytes   ← interpreted                   │
    │               remaining 1976     ← never read, drained on close  │
    └─────────────────────────────────────────────────────────────────┘

Only the request line matters, and it nearly always fits in the first
segment. Truncation of longer requests is an accepted limitation.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    ACCEPTED ──► READING ──► ROUTED ──► RESPONDING ──► CLOSED
                    │                       ▲
                    ├───────────────────────┘
                    │   (400 for a malformed line)
                    │
                    └──► READ_FAILED ──────────────────► CLOSED
                         (no response is sent)

=============================================================================
DEADLINES
=============================================================================

A client that connects and never sends anything would hold its worker
forever on a blocking recv(). ServerConfig.timeout is applied to the
client socket, so recv() and sendall() raise socket.timeout once the
deadline passes and the connection is dropped.

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional


logger = logging.getLogger(__name__)


# Bounds on what close() discards: a client that keeps streaming or
# trickles bytes cannot hold the socket past either limit
_DRAIN_LIMIT = 64 * 1024
DRAIN_TIMEOUT = 0.5


class ConnectionState(Enum):
    """Where a connection is in its single request/response cycle."""

    ACCEPTED = "accepted"        # Just accepted, nothing read yet
    READING = "reading"          # Waiting on the single recv()
    READ_FAILED = "read_failed"  # recv() raised; no response will be sent
    ROUTED = "routed"            # Request line parsed, method checked
    RESPONDING = "responding"    # Writing the response bytes
    CLOSED = "closed"            # Socket released


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The client socket returned by accept().
        address: Client's (ip, port) tuple.
        id: Short identifier used to correlate log lines.
        state: Current ConnectionState.
        created_at: Time the connection was accepted.
        buffer_size: Capacity of the single read.
        timeout: Read/write deadline in seconds, None for no deadline.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.ACCEPTED
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 1024
    timeout: Optional[float] = 30.0

    def __post_init__(self):
        # Accepted sockets can inherit the listener's polling timeout;
        # reset to blocking, then apply our own deadline
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def client_port(self) -> int:
        """Get the client port."""
        return self.address[1]

    @property
    def peer(self) -> str:
        """Client address as "ip:port" for log lines."""
        return f"{self.client_ip}:{self.client_port}"

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    def read_once(self) -> bytes:
        """
        Perform the single read of this connection.

        Returns:
            Up to buffer_size bytes. b"" if the client closed its side
            without sending anything.

        Raises:
            OSError: If the read fails, including socket.timeout when the
                     deadline passes. State is READ_FAILED afterwards.
        """
        self.state = ConnectionState.READING
        try:
            data = self.socket.recv(self.buffer_size)
        except OSError:
            self.state = ConnectionState.READ_FAILED
            raise

        logger.debug(f"[{self.id}] Received {len(data)} bytes")
        return data

    def send_response(self, data: bytes) -> bool:
        """
        Write the full response in one sendall().

        A failed write is logged and not retried.

        Returns:
            True if every byte was handed to the kernel, False otherwise.
        """
        self.state = ConnectionState.RESPONDING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Failed to send response: {e}")
            return False

    def close(self, drain_timeout: float = DRAIN_TIMEOUT):
        """
        Close the connection.

        1. shutdown(SHUT_WR)   send FIN so the client sees end-of-response
        2. drain               read what the client sent past our buffer,
                               otherwise the kernel answers with RST and the
                               client may lose the response
        3. close()             release the file descriptor

        Args:
            drain_timeout: Total time the drain may take. 0 discards only
                           what is already buffered and never waits.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        self._drain(drain_timeout)

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def _drain(self, timeout: float):
        """Discard unread input until EOF or until a drain limit is hit."""
        deadline = time.monotonic() + timeout
        drained = 0
        try:
            while drained < _DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining > 0:
                    self.socket.settimeout(remaining)
                else:
                    # Past the deadline: take what is buffered, never wait
                    self.socket.setblocking(False)
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # Timeout, would-block or reset; we're closing anyway

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Always close, never swallow the exception."""
        self.close()
        return False
