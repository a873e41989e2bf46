"""
=============================================================================
HANDLERS
=============================================================================

    Request ──► Router ──► handler(request) ──► HTTPResponse

    UserHandlers   - create / get_one / get_all / update / delete,
                     bound to a UserRepository
    preflight      - OPTIONS on any path

=============================================================================
"""

from .users import (
    UserHandlers,
    preflight,
    USER_UPDATED_BODY,
    USER_DELETED_BODY,
    RETRIEVAL_FAILED_BODY,
)

__all__ = [
    "UserHandlers",
    "preflight",
    "USER_UPDATED_BODY",
    "USER_DELETED_BODY",
    "RETRIEVAL_FAILED_BODY",
]
