"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The service only ever answers with three status codes:

    ┌────────┬──────────────────────────────────────────────────────────┐
    │ Code   │ When                                                     │
    ├────────┼──────────────────────────────────────────────────────────┤
    │ 200    │ Handler succeeded, or CORS preflight (OPTIONS)           │
    │ 404    │ No route matched, user not found, delete hit no row      │
    │ 500    │ Bad id, bad JSON body, database failure                  │
    └────────┴──────────────────────────────────────────────────────────┘

The reason phrases are the ones deployed clients already receive
("NOT FOUND", "INTERNAL ERROR"), not the RFC 7231 spellings. HTTP clients
ignore the phrase, but anything comparing raw status lines does not.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so statuses compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'NOT FOUND'
    """

    OK = 200                        # Success (and preflight)
    NOT_FOUND = 404                 # Unknown route or missing user
    INTERNAL_SERVER_ERROR = 500     # Anything that went wrong

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line."""
        return _STATUS_PHRASES[self]

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "NOT FOUND",
    HTTPStatus.INTERNAL_SERVER_ERROR: "INTERNAL ERROR",
}
