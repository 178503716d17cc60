"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    # Run with defaults (127.0.0.1:7878, pages from the current directory)
    python -m hellohttp

    # Custom port and document root
    python -m hellohttp --port 3000 --root ./public

    # Listen on all interfaces (for containers)
    python -m hellohttp --host 0.0.0.0

Environment variables (HELLOHTTP_HOST, HELLOHTTP_PORT, ...) supply the
defaults; command-line flags override them.

Exit status is 1 if the server can't bind or stops accepting, 0 after a
clean shutdown (Ctrl+C / SIGTERM).

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import LOG_LEVELS, ServerConfig
from .exceptions import FatalServerError
from .server import HTTPServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hellohttp",
        description="Serve hello.html for GET / and 404.html for everything else",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m hellohttp                       # Run with defaults
  python -m hellohttp --port 3000           # Custom port
  python -m hellohttp --root ./public       # Pages from ./public
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=defaults.timeout,
        help="Per-connection socket timeout in seconds (default: none)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT / LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.document_root,
        help="Directory containing hello.html and 404.html (default: %(default)s)"
    )

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=defaults.log_level.upper(),
        help="Logging level (default: %(default)s)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"hellohttp {__version__}"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, build the server, run it until it stops."""
    parser = build_parser(ServerConfig.from_env())
    args = parser.parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        timeout=args.timeout,
        document_root=args.root,
        log_level=args.log_level,
    )

    try:
        server = HTTPServer(config)
    except ValueError as e:
        # Bad config or missing document root
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        server.run()
    except FatalServerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
