"""
=============================================================================
USER HANDLERS
=============================================================================

The five operations of the user resource, each taking a RawRequest and
returning one of the three response templates.

    ┌──────────┬─────────────────────────┬──────────────────────────────────┐
    │ Handler  │ Success (200)           │ Failure                          │
    ├──────────┼─────────────────────────┼──────────────────────────────────┤
    │ create   │ stored User JSON        │ 500 Internal error               │
    │          │                         │ 500 Failed to retrieve user      │
    │ get_one  │ User JSON               │ 404 User not found               │
    │          │                         │ 500 Internal error               │
    │ get_all  │ JSON array of User      │ 500 Internal error               │
    │ update   │ User updated            │ 500 Internal error               │
    │ delete   │ User deleted            │ 404 User not found               │
    │          │                         │ 500 Internal error               │
    └──────────┴─────────────────────────┴──────────────────────────────────┘

=============================================================================
ERRORS
=============================================================================

    bad id / bad body      → ValueError (pydantic's ValidationError is one)
                           → logged at WARNING → 500 "Internal error"

    database failure       → SQLAlchemyError
                           → logged with traceback → 500 "Internal error"

Nothing else is caught here; an unexpected exception reaches the server,
which logs it and answers with the internal-error template.

=============================================================================
UPDATE vs DELETE ON A MISSING ID
=============================================================================

    PUT    /api/rust/users/999   → 200 "User updated"    (0 rows, still OK)
    DELETE /api/rust/users/999   → 404 "User not found"

Existing clients rely on both answers, so the asymmetry stays.

=============================================================================
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from ..config import DEFAULT_USERS_PATH
from ..db.repository import UserRepository, UserRetrievalError
from ..http.request import RawRequest, extract_resource_id, parse_user_id, resource_id_segment
from ..http.response import (
    HTTPResponse,
    ok,
    not_found,
    internal_error,
    USER_NOT_FOUND_BODY,
)
from ..models import encode_user, encode_users


logger = logging.getLogger(__name__)


USER_UPDATED_BODY = "User updated"
USER_DELETED_BODY = "User deleted"
RETRIEVAL_FAILED_BODY = "Failed to retrieve user"


class UserHandlers:
    """
    Request handlers bound to a repository.

    Usage:
        handlers = UserHandlers(UserRepository(engine), "/api/rust/users")

        router.post("/api/rust/users")(handlers.create)
        router.get("/api/rust/users/")(handlers.get_one)
        router.get("/api/rust/users")(handlers.get_all)
        router.put("/api/rust/users/")(handlers.update)
        router.delete("/api/rust/users/")(handlers.delete)
    """

    def __init__(self, repository: UserRepository, users_path: str = DEFAULT_USERS_PATH):
        self.repository = repository
        self.id_segment = resource_id_segment(users_path)

    def _resource_id(self, request: RawRequest) -> str:
        """The id segment as seen from this handler's users path."""
        if request.text:
            return extract_resource_id(request.text, self.id_segment)
        return request.resource_id

    def create(self, request: RawRequest) -> HTTPResponse:
        """POST: insert the body as a new user, answer with the stored row."""
        try:
            user = request.user()
        except ValueError as e:
            logger.warning(f"Rejected create body: {e}")
            return internal_error()

        try:
            created = self.repository.create(user.name, user.email)
        except UserRetrievalError as e:
            logger.error(str(e))
            return internal_error(RETRIEVAL_FAILED_BODY)
        except SQLAlchemyError:
            logger.exception("Create failed")
            return internal_error()

        logger.info(f"Created user {created.id}")
        return ok(encode_user(created))

    def get_one(self, request: RawRequest) -> HTTPResponse:
        resource_id = self._resource_id(request)
        try:
            user_id = parse_user_id(resource_id)
        except ValueError as e:
            logger.warning(f"Invalid user id {resource_id!r}: {e}")
            return internal_error()

        try:
            user = self.repository.get_by_id(user_id)
        except SQLAlchemyError:
            logger.exception(f"Read of user {user_id} failed")
            return internal_error()

        if user is None:
            return not_found(USER_NOT_FOUND_BODY)
        return ok(encode_user(user))

    def get_all(self, request: RawRequest) -> HTTPResponse:
        try:
            found = self.repository.get_all()
        except SQLAlchemyError:
            logger.exception("Listing users failed")
            return internal_error()

        return ok(encode_users(found))

    def update(self, request: RawRequest) -> HTTPResponse:
        """
        PUT: overwrite name and email.

        Answers "User updated" whether or not a row had that id.
        """
        resource_id = self._resource_id(request)
        try:
            user_id = parse_user_id(resource_id)
            user = request.user()
        except ValueError as e:
            logger.warning(f"Rejected update of {resource_id!r}: {e}")
            return internal_error()

        try:
            affected = self.repository.update(user_id, user.name, user.email)
        except SQLAlchemyError:
            logger.exception(f"Update of user {user_id} failed")
            return internal_error()

        logger.info(f"Updated user {user_id} ({affected} rows)")
        return ok(USER_UPDATED_BODY)

    def delete(self, request: RawRequest) -> HTTPResponse:
        resource_id = self._resource_id(request)
        try:
            user_id = parse_user_id(resource_id)
        except ValueError as e:
            logger.warning(f"Invalid user id {resource_id!r}: {e}")
            return internal_error()

        try:
            affected = self.repository.delete(user_id)
        except SQLAlchemyError:
            logger.exception(f"Delete of user {user_id} failed")
            return internal_error()

        if affected == 0:
            return not_found(USER_NOT_FOUND_BODY)

        logger.info(f"Deleted user {user_id}")
        return ok(USER_DELETED_BODY)


def preflight(request: RawRequest) -> HTTPResponse:
    """OPTIONS on any path: success template, empty body."""
    return ok()
