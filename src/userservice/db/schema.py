"""
=============================================================================
USERS TABLE AND SCHEMA BOOTSTRAP
=============================================================================

The whole persisted state of the service is one table:

    ┌───────────────────────────────────────────────┐
    │ users                                         │
    ├──────────┬────────────────────┬───────────────┤
    │ id       │ INTEGER (SERIAL)   │ PRIMARY KEY   │
    │ name     │ VARCHAR            │ NOT NULL      │
    │ email    │ VARCHAR            │ NOT NULL      │
    └──────────┴────────────────────┴───────────────┘

On PostgreSQL an integer primary key with autoincrement becomes SERIAL; on
SQLite it becomes the rowid alias. Either way the database hands out ids.

bootstrap() runs once at startup. create_all() checks for the table first,
so running it against an existing database is a no-op.

=============================================================================
"""

import logging

from sqlalchemy import Column, Integer, MetaData, String, Table
from sqlalchemy.engine import Engine


logger = logging.getLogger(__name__)


metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False),
    Column("email", String, nullable=False),
)


def bootstrap(engine: Engine) -> None:
    """
    Create the users table if it does not exist.

    Raises:
        sqlalchemy.exc.SQLAlchemyError: If the database cannot be reached
            or the DDL fails. Startup treats this as fatal.
    """
    logger.info("Ensuring users table exists")
    metadata.create_all(engine, checkfirst=True)
