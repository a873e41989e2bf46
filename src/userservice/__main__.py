"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    python -m userservice [options]
    userservice [options]

=============================================================================
STARTUP SEQUENCE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   1. ServiceConfig.from_env(), then CLI overrides                   │
    │   2. configure_logging(log_level)                                   │
    │   3. validate() + create engine + bootstrap (CREATE TABLE)          │
    │         └── any failure → "Failed to set up the database."         │
    │                           on stderr, exit status 1                  │
    │   4. Bind, then "Listening on port <port>..."                       │
    │   5. Serve until Ctrl+C                                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The port is never bound unless the database is usable.

=============================================================================
"""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .app import create_server
from .config import ServiceConfig
from .db import bootstrap, create_db_engine
from .server import configure_logging


logger = logging.getLogger("userservice")


SETUP_FAILED_MESSAGE = "Failed to set up the database."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="userservice",
        description="User CRUD service over raw HTTP/1.1",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  DATABASE_URL=postgres://user:pw@db/users python -m userservice
  python -m userservice --database-url sqlite:///users.db --port 3000
  python -m userservice --workers 8 --log-level DEBUG
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: $HTTP_HOST or 0.0.0.0)",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: $HTTP_PORT or 8080)",
    )
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Number of worker threads (default: $HTTP_WORKERS or 4)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # DATABASE
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--database-url",
        default=None,
        help="Database connection string (default: $DATABASE_URL)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # META
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: $LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"userservice {__version__}",
    )
    return parser


def load_config(args: argparse.Namespace) -> ServiceConfig:
    """Environment first, then whatever was given on the command line."""
    config = ServiceConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.workers is not None:
        config.workers = args.workers
    if args.database_url is not None:
        config.database_url = args.database_url
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def announce(address: Tuple[str, int]) -> None:
    """Printed once the socket is listening."""
    print(f"Listening on port {address[1]}...", flush=True)


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
    except ValueError as e:
        # Malformed numeric environment variable
        print(SETUP_FAILED_MESSAGE, file=sys.stderr)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.log_level)

    try:
        config.validate()
        engine = create_db_engine(config)
        bootstrap(engine)
    except (ValueError, SQLAlchemyError) as e:
        logger.error(f"Database setup failed: {e}")
        print(SETUP_FAILED_MESSAGE, file=sys.stderr)
        sys.exit(1)

    server = create_server(config, engine)

    try:
        server.run(on_ready=announce)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
