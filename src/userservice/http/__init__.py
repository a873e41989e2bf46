"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

    userservice.http
    ├── request.py       # RawRequest + parse_request()
    ├── response.py      # HTTPResponse + the three templates
    ├── router.py        # Ordered prefix router
    └── status_codes.py  # HTTPStatus (200 / 404 / 500)

=============================================================================
"""

from .request import RawRequest, parse_request
from .response import (
    HTTPResponse,
    ok,
    not_found,
    internal_error,
    CORS_HEADERS,
    NOT_FOUND_BODY,
    USER_NOT_FOUND_BODY,
    INTERNAL_ERROR_BODY,
)
from .router import Router, Route, Handler
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "RawRequest",
    "parse_request",
    # Responses
    "HTTPResponse",
    "ok",
    "not_found",
    "internal_error",
    "CORS_HEADERS",
    "NOT_FOUND_BODY",
    "USER_NOT_FOUND_BODY",
    "INTERNAL_ERROR_BODY",
    # Routing
    "Router",
    "Route",
    "Handler",
    # Status codes
    "HTTPStatus",
]
