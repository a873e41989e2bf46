"""
User model shared by the repository, the handlers and the wire format.

The JSON shape is fixed by existing clients:

    {"id": 1, "name": "Ann", "email": "a@x.com"}

id is null on creation requests (or missing altogether) and always set on
anything read back from the database. Serialization is compact, with keys in
field order, so the same row always encodes to the same bytes.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, TypeAdapter


class User(BaseModel):
    """A row of the users table."""

    id: Optional[int] = None
    name: str
    email: str


_USER_LIST = TypeAdapter(List[User])


def decode_user(body: Union[str, bytes]) -> User:
    """
    Decode a request body into a User.

    Raises:
        pydantic.ValidationError: If the body is not JSON, or name/email
            are missing or not strings.
    """
    return User.model_validate_json(body)


def encode_user(user: User) -> str:
    return user.model_dump_json()


def encode_users(users: List[User]) -> str:
    return _USER_LIST.dump_json(users).decode("utf-8")
