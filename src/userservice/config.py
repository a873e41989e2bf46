"""
=============================================================================
SERVICE CONFIGURATION
=============================================================================

Centralized configuration for the user service: where to listen, how many
worker threads to run, and which database to talk to.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m userservice --port 3000                         │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── DATABASE_URL=postgres://... python -m userservice         │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The database connection string is the one value without a default. The
service cannot do anything useful without it, so validate() rejects a
config that lacks it before any socket is opened.

=============================================================================
DATABASE URLS
=============================================================================

Deployments usually hand us a libpq-style URL:

    postgres://user:secret@db:5432/users

SQLAlchemy wants the dialect and driver spelled out:

    postgresql+psycopg://user:secret@db:5432/users

normalize_database_url() bridges the two. Anything that already names a
driver, or a different backend entirely (sqlite:///users.db), is left alone.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import make_url


DEFAULT_USERS_PATH = "/api/rust/users"

_POSTGRES_SCHEMES = {"postgres", "postgresql"}
_TRUTHY = {"1", "true", "yes", "on"}


def normalize_database_url(url: str) -> str:
    """
    Point bare PostgreSQL URLs at the psycopg driver.

    Args:
        url: Database URL as found in the environment.

    Returns:
        URL string SQLAlchemy can create an engine from.
    """
    parsed = make_url(url)
    if parsed.drivername in _POSTGRES_SCHEMES:
        parsed = parsed.set(drivername="postgresql+psycopg")
    return parsed.render_as_string(hide_password=False)


@dataclass
class ServiceConfig:
    """
    Configuration for the user service.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    THREADING SETTINGS
    - workers

    DATABASE SETTINGS
    - database_url, db_pool

    ROUTING
    - users_path

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # DATABASE SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    database_url: Optional[str] = None
    """
    Connection string for the users database (DATABASE_URL).
    postgres://, postgresql:// and sqlite:/// URLs are all accepted.
    """

    db_pool: bool = False
    """
    Keep database connections in a pool between requests.
    Off by default: every repository call opens and closes its own
    connection.
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to. All interfaces by default.
    """

    port: int = 8080
    """
    The port number to listen on.
    """

    backlog: int = 128
    """
    Maximum number of queued connections in the kernel accept queue.
    """

    buffer_size: int = 1024
    """
    Size of the single read performed per connection, in bytes.
    A request longer than this is truncated; there is no second read.
    """

    timeout: Optional[float] = None
    """
    Socket timeout in seconds for client connections.
    None = blocking, a stalled client holds its worker until it goes away.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    workers: int = 4
    """
    Number of worker threads. Each accepted connection is handled start
    to finish by one worker.
    """

    # ─────────────────────────────────────────────────────────────────────
    # ROUTING
    # ─────────────────────────────────────────────────────────────────────

    users_path: str = DEFAULT_USERS_PATH
    """
    Collection path of the user resource. Item paths are users_path + "/{id}".
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """

    @property
    def sqlalchemy_url(self) -> str:
        """The database URL in the form SQLAlchemy expects."""
        if not self.database_url:
            raise ValueError("DATABASE_URL is not set")
        return normalize_database_url(self.database_url)

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        DATABASE_URL   Database connection string (required)
        HTTP_HOST      Server host (default: 0.0.0.0)
        HTTP_PORT      Server port (default: 8080)
        HTTP_WORKERS   Worker threads (default: 4)
        HTTP_TIMEOUT   Client socket timeout in seconds (default: none)
        USERS_PATH     Users collection path (default: /api/rust/users)
        DB_POOL        Pool database connections (default: off)
        LOG_LEVEL      Logging level (default: INFO)

        =====================================================================
        """
        timeout = os.getenv("HTTP_TIMEOUT")
        return cls(
            database_url=os.getenv("DATABASE_URL"),
            host=os.getenv("HTTP_HOST", "0.0.0.0"),
            port=int(os.getenv("HTTP_PORT", "8080")),
            workers=int(os.getenv("HTTP_WORKERS", "4")),
            timeout=float(timeout) if timeout else None,
            users_path=os.getenv("USERS_PATH", DEFAULT_USERS_PATH),
            db_pool=os.getenv("DB_POOL", "").strip().lower() in _TRUTHY,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value stops the process before
        the database is touched or the port is bound.
        """
        if not self.database_url:
            raise ValueError("DATABASE_URL must be set")

        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 1-65535.")

        if self.workers < 1:
            raise ValueError("workers must be >= 1")

        if self.buffer_size < 64:
            raise ValueError("buffer_size must be >= 64")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not self.users_path.startswith("/"):
            raise ValueError(f"users_path must start with '/': {self.users_path}")
