"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    # Serve the current directory on localhost:8080
    python -m webworker

    # Custom port and document root
    python -m webworker --port 3000 --root ./www

    # Listen on all interfaces, verbose logging
    python -m webworker --host 0.0.0.0 --log-level DEBUG

Defaults come from the WEBWORKER_* environment variables (see config.py);
command-line flags override them.

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig
from .server import WebServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """Build the argument parser, with defaults taken from defaults."""
    parser = argparse.ArgumentParser(
        prog="webworker",
        description="Single-request-per-connection HTTP/1.1 file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m webworker                       # Serve . on 127.0.0.1:8080
  python -m webworker --port 3000           # Custom port
  python -m webworker --root ./www          # Custom document root
  python -m webworker --host 0.0.0.0        # Listen on all interfaces
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})",
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=defaults.timeout,
        help=f"Socket idle timeout in seconds (default: {defaults.timeout})",
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.document_root,
        help=f"Document root directory (default: {defaults.document_root})",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"webworker {__version__}",
    )

    return parser


def parse_config(argv: Optional[List[str]] = None) -> ServerConfig:
    """Build a validated ServerConfig from the environment and argv."""
    config = ServerConfig.from_env()
    args = build_parser(config).parse_args(argv)

    config.host = args.host
    config.port = args.port
    config.timeout = args.timeout
    config.document_root = args.root
    config.log_level = args.log_level

    config.validate()
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    try:
        config = parse_config(argv)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        WebServer(config).run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
