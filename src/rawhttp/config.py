"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Everything the server needs to know before it binds a socket lives in
one dataclass, passed explicitly to every component that reads it.

=============================================================================
WHY NOT MODULE CONSTANTS?
=============================================================================

A server with compiled-in constants like

    ADDRESS = "127.0.0.1:8080"
    ROOT = "public"

cannot be tested in parallel: two test servers fight over port 8080 and
share one document root. Threading a ServerConfig through the server lets
tests bind port 0 (any free port) and point at a temporary directory.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION SOURCES                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m rawhttp --port 3000 --root ./site               │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTP_PORT=3000 HTTP_DOCUMENT_ROOT=./site python -m rawhttp│
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The configuration is read-only once the server starts. Worker threads
share it without locks because nobody writes to it.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


# --workers N / HTTP_WORKERS=N means N to N * WORKER_SCALE threads
WORKER_SCALE = 4


@dataclass
class ServerConfig:
    """
    Configuration for the static file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK
    - host, port, backlog, buffer_size, timeout

    FILES
    - document_root, index_file, contain_paths

    THREADING
    - min_workers, max_workers, queue_size

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Address to bind. Loopback only by default."""

    port: int = 8080
    """Port to listen on. 0 lets the OS pick a free port (tests)."""

    backlog: int = 128
    """Maximum number of connections queued by the kernel before accept()."""

    buffer_size: int = 1024
    """
    Capacity of the single recv() per connection.
    Anything beyond this many bytes is never read (requests are truncated).
    """

    timeout: Optional[float] = 30.0
    """
    Read/write deadline in seconds for each client socket.
    None = block forever (a silent client then holds its worker indefinitely).
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "public"
    """
    Directory prefix joined to every request path by plain concatenation:
    "public" + "/notes.txt" → "public/notes.txt".
    """

    index_file: str = "index.html"
    """File served for the path "/"."""

    contain_paths: bool = False
    """
    Reject resolved paths that escape document_root (e.g. "/../secret").
    Off by default: plain concatenation does not stop ".." segments.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    """Worker threads started with the server."""

    max_workers: int = 16
    """Upper bound on worker threads when all workers are busy."""

    queue_size: int = 128
    """Connections waiting for a worker before new ones get 503."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG shows raw request bytes and worker activity."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_HOST           Bind address (default: 127.0.0.1)
        HTTP_PORT           Port (default: 8080)
        HTTP_WORKERS        Initial worker threads; max is 4x (default: 4)
        HTTP_TIMEOUT        Per-connection deadline in seconds (default: 30)
        HTTP_DOCUMENT_ROOT  Directory to serve (default: public)
        HTTP_LOG_LEVEL      Logging level (default: INFO)

        =====================================================================
        """
        config = cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "8080")),
            timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
            document_root=os.getenv("HTTP_DOCUMENT_ROOT", "public"),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

        workers = os.getenv("HTTP_WORKERS")
        if workers is not None:
            config.set_workers(int(workers))

        return config

    def set_workers(self, workers: int) -> None:
        """
        Size the pool from one number, as HTTP_WORKERS and --workers do.

        workers threads start with the server; up to WORKER_SCALE times as
        many may run under load.
        """
        self.min_workers = workers
        self.max_workers = workers * WORKER_SCALE

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at server construction so a bad value stops the
        process before any socket is opened.

        Raises:
            ValueError: On the first invalid value.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not self.index_file or "/" in self.index_file:
            raise ValueError(f"Invalid index_file: {self.index_file!r}")
