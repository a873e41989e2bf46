"""
Engine construction.

With pooling off (the default) the engine uses NullPool: every
engine.connect() opens a fresh database connection and closing it really
closes it. That gives each request its own connection, nothing shared
between requests but the database itself.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

from ..config import ServiceConfig


logger = logging.getLogger(__name__)


def create_db_engine(config: ServiceConfig) -> Engine:
    """Create the SQLAlchemy engine described by config."""
    url = config.sqlalchemy_url
    if config.db_pool:
        engine = create_engine(url, pool_pre_ping=True)
    else:
        engine = create_engine(url, poolclass=NullPool)

    logger.debug(
        f"Created engine for {engine.url.render_as_string(hide_password=True)} "
        f"(pooling {'on' if config.db_pool else 'off'})"
    )
    return engine
