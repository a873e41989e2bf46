"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the bytes of one read from a client socket into a RawRequest.

This is deliberately NOT a full RFC 7230 parser. The service needs four
things from a request and takes them straight out of the text:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   PUT /api/rust/users/42 HTTP/1.1\r\n                               │
    │   ─┬─ ─────────┬──────── ───────                                    │
    │    │           │                                                     │
    │  method       path                                                  │
    │                                                                      │
    │   "PUT /api/rust/users/42 HTTP/1.1\r\n...".split("/")               │
    │        [0]   [1]  [2]  [3]   [4]                                    │
    │       "PUT " api  rust users "42 HTTP"  → resource_id = "42"        │
    │                                                                      │
    │   Host: localhost:8080\r\n                                          │
    │   Content-Type: application/json\r\n                                │
    │   \r\n                          ◄── first blank line                │
    │   {"name": "Ann", "email": "a@x.com"}   → body                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
NOTHING IS REJECTED HERE
=============================================================================

A request with a non-numeric id or a broken JSON body parses fine. The
failure surfaces where the value is used (parse_user_id() or
RawRequest.user()) and the handler turns it into a 500. Headers are not
interpreted at all, Content-Length included: the body is whatever came in
with the single read, and a request larger than the read buffer arrives
truncated.

=============================================================================
"""

import re
from dataclasses import dataclass
from typing import Union

from ..models import User, decode_user


HEADER_TERMINATOR = "\r\n\r\n"

# Index of the id in text.split("/"): "GET ", "api", "rust", "users", "{id}..."
RESOURCE_ID_SEGMENT = 4

# ASCII digits with an optional sign, nothing else
USER_ID_PATTERN = re.compile(r"[+-]?[0-9]+")

# ids are 32-bit (SERIAL) in the users table
MAX_USER_ID = 2**31 - 1
MIN_USER_ID = -(2**31)


@dataclass
class RawRequest:
    """
    The parts of an HTTP request the router and handlers look at.

    Attributes:
        method:         Token before the first space ("GET", "POST", ...)
        path:           Token between the first and second space
        resource_id:    Fifth "/"-separated piece, cut at the first
                        whitespace; "" when the request has none. That
                        is the id for the default users path; handlers
                        serving another path take it out of text.
        body:           Everything after the first blank line
        text:           The whole decoded request
        client_address: (ip, port) of the peer, for logging
    """

    method: str
    path: str
    resource_id: str = ""
    body: str = ""
    text: str = ""
    client_address: tuple[str, int] = ("", 0)

    def user_id(self) -> int:
        """
        The resource id as an integer.

        Raises:
            ValueError: If the id segment is empty, not an integer, or
                outside the 32-bit range of the id column.
        """
        return parse_user_id(self.resource_id)

    def user(self) -> User:
        """
        The body decoded as a User.

        Raises:
            pydantic.ValidationError: If the body is not a valid user object.
        """
        return decode_user(self.body)


def parse_user_id(resource_id: str) -> int:
    """
    Convert an id segment to an integer.

    Only an optional sign followed by ASCII digits is accepted, so "4_2",
    "٤٢" and " 42" are rejected even though int() would take them.

    Raises:
        ValueError: If the segment is not such an integer or falls outside
            the 32-bit range of the id column.
    """
    if not USER_ID_PATTERN.fullmatch(resource_id):
        raise ValueError(f"Not an integer: {resource_id!r}")

    user_id = int(resource_id)
    if not MIN_USER_ID <= user_id <= MAX_USER_ID:
        raise ValueError(f"User id out of range: {user_id}")
    return user_id


def resource_id_segment(users_path: str) -> int:
    """
    Index of the id in text.split("/") for items under users_path.

        "/api/rust/users"  → 4
        "/users"           → 2
        "/v2/people/"      → 3
    """
    return users_path.rstrip("/").count("/") + 1


def extract_resource_id(text: str, segment: int = RESOURCE_ID_SEGMENT) -> str:
    """
    Take the id segment out of the request text.

        "GET /api/rust/users/42 HTTP/1.1..."        → "42"
        "GET /api/rust/users/42/posts HTTP/1.1..."  → "42"
        "GET /api/rust/users HTTP/1.1..."           → "1.1"
        "GET /api HTTP/1.1"                         → ""

    The split runs over the whole text, not just the path, so a collection
    path yields a piece of the protocol version. Collection routes never
    look at it.

    Args:
        text: The decoded request.
        segment: Index of the id piece, see resource_id_segment().
    """
    segments = text.split("/")
    if len(segments) <= segment:
        return ""
    words = segments[segment].split()
    return words[0] if words else ""


def extract_body(text: str) -> str:
    """Everything after the first blank line, or "" if there is none."""
    _, separator, body = text.partition(HEADER_TERMINATOR)
    return body if separator else ""


def parse_request(
    data: Union[bytes, str],
    client_address: tuple[str, int] = ("", 0),
) -> RawRequest:
    """
    Parse one raw request.

    Invalid UTF-8 is replaced rather than rejected, so any byte sequence
    produces a RawRequest.

    Args:
        data: Bytes read from the socket (or already-decoded text).
        client_address: Client's (ip, port) tuple.

    Returns:
        Parsed RawRequest.
    """
    if isinstance(data, bytes):
        text = data.decode("utf-8", errors="replace")
    else:
        text = data

    tokens = text.split(" ", 2)
    method = tokens[0]
    path = tokens[1] if len(tokens) > 1 else ""

    return RawRequest(
        method=method,
        path=path,
        resource_id=extract_resource_id(text),
        body=extract_body(text),
        text=text,
        client_address=client_address,
    )
