"""
=============================================================================
MINIHTTP CLI ENTRY POINT
=============================================================================

    # Defaults: tcp://0.0.0.0:4221, file routes disabled
    python -m minihttp

    # Serve and store files under /tmp/files
    python -m minihttp --directory /tmp/files

    # Different address
    python -m minihttp --host 127.0.0.1 --port 8080

Every flag falls back to its MINIHTTP_* environment variable, then to the
ServerConfig default.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import LOG_FORMATS, LOG_LEVELS, PROTOCOLS, ServerConfig
from .server import HTTPServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """
    Build the argument parser.

    Args:
        defaults: Config whose values become the flag defaults (usually
                  ServerConfig.from_env()).
    """
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Minimal HTTP/1.1 server: echo, user-agent and file routes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  minihttp                              # tcp://0.0.0.0:4221
  minihttp --directory /tmp/files       # enable /files/ routes
  minihttp --host 127.0.0.1 --port 8080
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--protocol",
        choices=PROTOCOLS,
        default=defaults.protocol,
        help=f"Protocol to listen with (default: {defaults.protocol})"
    )

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
        "--buffer-size",
        type=int,
        default=defaults.buffer_size,
        help=f"Bytes read per connection; larger requests are cut (default: {defaults.buffer_size})"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=defaults.timeout,
        help="Client socket timeout in seconds (default: none)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # FILE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory", "-d",
        default=defaults.directory,
        help="Directory with files to serve and store (default: disabled)"
    )

    parser.add_argument(
        "--confine-files",
        action="store_true",
        default=defaults.confine_files,
        help="Answer 404 for /files/ names that resolve outside --directory"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level.upper()})"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=defaults.log_format,
        help=f"Access log format (default: {defaults.log_format})"
    )

    parser.add_argument(
        "--no-access-log",
        dest="access_log",
        action="store_false",
        default=defaults.access_log,
        help="Do not log one line per request"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}"
    )

    return parser


def config_from_args(argv=None) -> ServerConfig:
    """
    Build a ServerConfig from the command line (and environment).

    Args:
        argv: Argument list, sys.argv[1:] when None.
    """
    defaults = ServerConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    return ServerConfig(
        protocol=args.protocol,
        host=args.host,
        port=args.port,
        backlog=defaults.backlog,
        buffer_size=args.buffer_size,
        timeout=args.timeout,
        shutdown_grace=defaults.shutdown_grace,
        directory=args.directory,
        confine_files=args.confine_files,
        log_level=args.log_level,
        log_format=args.log_format,
        access_log=args.access_log,
    )


def main(argv=None):
    """Main CLI entry point."""
    try:
        config = config_from_args(argv)
        server = HTTPServer(config)
        server.run()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
