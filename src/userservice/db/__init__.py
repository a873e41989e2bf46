"""
Database layer: the users table, engine construction and the repository.

    from userservice.db import create_db_engine, bootstrap, UserRepository

    engine = create_db_engine(config)
    bootstrap(engine)                 # CREATE TABLE IF NOT EXISTS
    repo = UserRepository(engine)
"""

from .engine import create_db_engine
from .repository import UserRepository, UserRetrievalError
from .schema import bootstrap, metadata, users

__all__ = [
    "create_db_engine",
    "bootstrap",
    "metadata",
    "users",
    "UserRepository",
    "UserRetrievalError",
]
