"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    # Serve ./public on 127.0.0.1:8080
    python -m rawhttp

    # Another directory and port
    python -m rawhttp --root ./site --port 3000

    # Refuse paths that escape the document root
    python -m rawhttp --contain

Settings come from the environment first (see ServerConfig.from_env),
then command-line flags override them.

Exit status is 1 when the configuration is invalid or the address
cannot be bound; otherwise the server runs until interrupted.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rawhttp",
        description="Minimal HTTP/1.1 static file server on raw sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m rawhttp                         # public/ on 127.0.0.1:8080
  python -m rawhttp --port 3000             # Custom port
  python -m rawhttp --root ./site           # Another document root
  python -m rawhttp --workers 8             # 8 worker threads
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--host", "-H", help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, help="Port to listen on (default: 8080)")
    parser.add_argument(
        "--timeout", "-t",
        type=float,
        help="Per-connection read/write deadline in seconds (default: 30)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # FILE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--root", "-r", help="Document root (default: public)")
    parser.add_argument(
        "--contain",
        action="store_true",
        help="Reject request paths that resolve outside the document root",
    )

    # ─────────────────────────────────────────────────────────────────────
    # PERFORMANCE / LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--workers", "-w",
        type=int,
        help="Initial worker threads (default: 4, max will be 4x this)",
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument("--version", "-v", action="version", version=f"rawhttp {__version__}")

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment defaults, overridden by whatever flags were given."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.root is not None:
        config.document_root = args.root
    if args.contain:
        config.contain_paths = True
    if args.workers is not None:
        config.set_workers(args.workers)
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def main(argv=None) -> int:
    """
    Run the server. Returns the process exit status.
    """
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        server = HTTPServer(config)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        server.run()
    except OSError as e:
        # Bind failure: already logged by the listener
        print(f"Failed to bind to address: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
