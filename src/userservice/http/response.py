"""
=============================================================================
HTTP RESPONSES
=============================================================================

Every response the service writes is one of three fixed templates followed
by a body.

=============================================================================
THE THREE TEMPLATES
=============================================================================

    SUCCESS (handlers that worked, OPTIONS preflight)
    ─────────────────────────────────────────────────
        HTTP/1.1 200 OK\r\n
        Content-Type: application/json\r\n
        Access-Control-Allow-Origin: *\r\n
        Access-Control-Allow-Methods: GET, POST, PUT, DELETE\r\n
        Access-Control-Allow-Headers: Content-Type\r\n
        \r\n
        {"id":1,"name":"Ann","email":"a@x.com"}

    NOT FOUND
    ─────────
        HTTP/1.1 404 NOT FOUND\r\n
        \r\n
        User not found

    INTERNAL ERROR
    ──────────────
        HTTP/1.1 500 INTERNAL ERROR\r\n
        \r\n
        Internal error

Only the success template carries CORS headers. A browser therefore sees
404/500 answers as CORS failures; existing clients depend on exactly these
bytes, so the asymmetry stays.

There is no Content-Length. The server closes the connection after every
response and the client reads the body up to EOF.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Union

from .status_codes import HTTPStatus


CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE",
    "Access-Control-Allow-Headers": "Content-Type",
}

NOT_FOUND_BODY = "404 not found"
USER_NOT_FOUND_BODY = "User not found"
INTERNAL_ERROR_BODY = "Internal error"


@dataclass
class HTTPResponse:
    """
    An HTTP response to be written to the client.

    Headers are emitted in insertion order and nothing is added at
    serialization time, so to_bytes() output is fully determined by
    status, headers and body.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """Example: "HTTP/1.1 404 NOT FOUND"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def text(self) -> str:
        """The body decoded as UTF-8."""
        return self.body.decode("utf-8")

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        if isinstance(body, str):
            self.body = body.encode("utf-8")
        else:
            self.body = body
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

            HTTP/1.1 200 OK\r\n          ← Status line
            Name: value\r\n              ← One line per header, in order
            \r\n                         ← Empty line (separator)
            <body>                       ← Body bytes
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")
        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


# =============================================================================
# TEMPLATES
# =============================================================================


def ok(body: Union[str, bytes] = "") -> HTTPResponse:
    """
    Success template: 200, JSON content type, permissive CORS headers.

    The body is written as given: serialized JSON from the user handlers,
    a short confirmation string for update/delete, nothing for preflight.
    """
    headers = {"Content-Type": "application/json"}
    headers.update(CORS_HEADERS)
    return HTTPResponse(status=HTTPStatus.OK, headers=headers).set_body(body)


def not_found(body: Union[str, bytes] = NOT_FOUND_BODY) -> HTTPResponse:
    """Not-found template: 404, no headers."""
    return HTTPResponse(status=HTTPStatus.NOT_FOUND).set_body(body)


def internal_error(body: Union[str, bytes] = INTERNAL_ERROR_BODY) -> HTTPResponse:
    """
    Internal-error template: 500, no headers.

    Keep the body generic; the cause goes to the log, not to the client.
    """
    return HTTPResponse(status=HTTPStatus.INTERNAL_SERVER_ERROR).set_body(body)
