"""
pytest configuration and fixtures.
"""

import socket
import threading
from dataclasses import dataclass, replace
from typing import Callable, Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rawhttp import HTTPServer, ServerConfig


INDEX_HTML = "<!DOCTYPE html><html><body>Hi</body></html>"
NOTES_TXT = "hello world"


@dataclass
class Reply:
    """A response as seen by a raw-socket client."""
    status: int
    reason: str
    headers: dict
    body: bytes
    raw: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    @classmethod
    def parse(cls, raw: bytes) -> "Reply":
        head, _, body = raw.partition(b"\r\n\r\n")
        lines = head.decode("utf-8").split("\r\n")
        _version, code, reason = lines[0].split(" ", 2)
        headers = dict(line.split(": ", 1) for line in lines[1:])
        return cls(status=int(code), reason=reason, headers=headers, body=body, raw=raw)


class RunningServer:
    """Server running on a background thread, bound to a free port."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> tuple:
        return self.server.address

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def connect(self, timeout: float = 5.0) -> socket.socket:
        """Open a client connection without sending anything."""
        return socket.create_connection(self.address, timeout=timeout)

    def send_raw(self, data: bytes, timeout: float = 5.0) -> bytes:
        """Send data, half-close, and read until the server closes."""
        with self.connect(timeout) as sock:
            sock.sendall(data)
            sock.shutdown(socket.SHUT_WR)
            return read_all(sock)

    def request(self, data: bytes) -> Reply:
        return Reply.parse(self.send_raw(data))

    def receive(self, sock: socket.socket) -> Reply:
        """Read a reply on an open connection without sending anything."""
        return Reply.parse(read_all(sock))

    def get(self, path: str) -> Reply:
        return self.request(f"GET {path} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode())


def read_all(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


@pytest.fixture
def document_root(tmp_path: Path) -> Path:
    """A document root with index.html and notes.txt."""
    root = tmp_path / "public"
    root.mkdir()
    (root / "index.html").write_text(INDEX_HTML, encoding="utf-8")
    (root / "notes.txt").write_text(NOTES_TXT, encoding="utf-8")
    return root


@pytest.fixture
def config(document_root: Path) -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        document_root=str(document_root),
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def server_factory(config: ServerConfig) -> Generator[Callable[..., RunningServer], None, None]:
    """Start servers with config overrides; all are stopped after the test."""
    started = []

    def factory(**overrides) -> RunningServer:
        running = RunningServer(HTTPServer(replace(config, **overrides)))
        running.start()
        started.append(running)
        return running

    yield factory

    for running in started:
        running.stop()


@pytest.fixture
def running_server(server_factory) -> RunningServer:
    """A server with the default test configuration."""
    return server_factory()


@pytest.fixture
def trickle() -> Generator[Callable[..., threading.Thread], None, None]:
    """
    Start a thread that sends one byte on a socket every interval seconds,
    until the test ends or the peer goes away.
    """
    stop = threading.Event()
    threads = []

    def start(sock: socket.socket, interval: float = 0.2) -> threading.Thread:
        def run():
            while not stop.wait(interval):
                try:
                    sock.send(b"x")
                except OSError:
                    return

        thread = threading.Thread(target=run, daemon=True)
        thread.start()
        threads.append(thread)
        return thread

    yield start

    stop.set()
    for thread in threads:
        thread.join(timeout=2.0)
