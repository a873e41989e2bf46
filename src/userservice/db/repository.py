"""
=============================================================================
USER REPOSITORY
=============================================================================

Parameterized SQL operations against the users table. One method per
operation the HTTP surface needs:

    ┌──────────────┬───────────────────────────────┬──────────────────────┐
    │ Method       │ SQL                           │ Returns              │
    ├──────────────┼───────────────────────────────┼──────────────────────┤
    │ create       │ INSERT ...; SELECT ... id = ? │ User                 │
    │ get_by_id    │ SELECT ... WHERE id = ?       │ User or None         │
    │ get_all      │ SELECT ...                    │ list of User         │
    │ update       │ UPDATE ... WHERE id = ?       │ rows affected        │
    │ delete       │ DELETE ... WHERE id = ?       │ rows affected        │
    └──────────────┴───────────────────────────────┴──────────────────────┘

=============================================================================
CONNECTIONS
=============================================================================

Each call checks a connection out of the engine and returns it when the
call ends. There is no connection held across requests and no caching, so
every read sees the latest committed state.

create() needs two round trips: the INSERT only reports the generated id,
and the canonical row (whatever the database actually stored) comes from a
SELECT on that id.

=============================================================================
ERRORS
=============================================================================

Database failures are not translated here. SQLAlchemyError (connection
refused, missing table, bad SQL) propagates to the caller, which decides
what the client sees. The only outcomes distinguished from failure are:

- get_by_id() → None when no row has that id
- update()/delete() → 0 when no row was touched

=============================================================================
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Engine, Row

from ..models import User
from .schema import users


logger = logging.getLogger(__name__)


class UserRetrievalError(RuntimeError):
    """The row written by create() could not be read back."""


class UserRepository:
    """
    CRUD access to the users table.

    Usage:
        repo = UserRepository(engine)

        user = repo.create("Ann", "a@x.com")
        repo.get_by_id(user.id)           # User(id=1, name='Ann', ...)
        repo.update(user.id, "Ann", "ann@x.com")   # 1
        repo.delete(user.id)              # 1
        repo.get_by_id(user.id)           # None
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def create(self, name: str, email: str) -> User:
        """
        Insert a user and return the stored row.

        Raises:
            UserRetrievalError: If the inserted row is not found on re-read.
            sqlalchemy.exc.SQLAlchemyError: On any database failure.
        """
        with self.engine.connect() as conn:
            result = conn.execute(insert(users).values(name=name, email=email))
            user_id = result.inserted_primary_key[0]
            conn.commit()

            row = conn.execute(select(users).where(users.c.id == user_id)).first()

        if row is None:
            raise UserRetrievalError(f"User {user_id} missing after insert")

        logger.debug(f"Created user {user_id}")
        return self._to_model(row)

    def get_by_id(self, user_id: int) -> Optional[User]:
        with self.engine.connect() as conn:
            row = conn.execute(select(users).where(users.c.id == user_id)).first()
        return self._to_model(row) if row is not None else None

    def get_all(self) -> List[User]:
        """Every user, in whatever order the database returns them."""
        with self.engine.connect() as conn:
            rows = conn.execute(select(users)).fetchall()
        return [self._to_model(row) for row in rows]

    def update(self, user_id: int, name: str, email: str) -> int:
        """
        Overwrite name and email of a user.

        No existence check: an unknown id simply updates zero rows.

        Returns:
            Number of rows affected.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                update(users)
                .where(users.c.id == user_id)
                .values(name=name, email=email)
            )
            affected = result.rowcount
            conn.commit()
        return affected

    def delete(self, user_id: int) -> int:
        """
        Delete a user by id.

        Returns:
            Number of rows affected (0 if the id did not exist).
        """
        with self.engine.connect() as conn:
            result = conn.execute(delete(users).where(users.c.id == user_id))
            affected = result.rowcount
            conn.commit()
        return affected

    def _to_model(self, row: Row) -> User:
        return User.model_validate(dict(row._mapping))
