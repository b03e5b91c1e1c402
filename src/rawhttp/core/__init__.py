"""
=============================================================================
CORE NETWORKING
=============================================================================

The socket-level half of the server. Nothing in here parses HTTP.

    socket_server.py   Bind, listen, accept loop
    connection.py      One client socket: single read, single write, close
    thread_pool.py     Worker threads, one connection per task

    ┌──────────────┐   Connection   ┌──────────────┐   task   ┌──────────┐
    │ SocketServer │ ─────────────► │  HTTPServer  │ ───────► │  Worker  │
    │ accept()     │                │  submit()    │          │  thread  │
    └──────────────┘                └──────────────┘          └──────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
]
