"""
=============================================================================
ACCESS LOG MIDDLEWARE
=============================================================================

One line per request on the "userservice.access" logger:

    127.0.0.1 - - [18/Oct/2026:14:02:11 +0000] "GET /api/rust/users/1" 200 39 1.84ms
    ─────┬───       ──────────┬───────────────  ───────────┬──────────  ─┬─ ─┬ ───┬───
      client            timestamp                   method + path      status │ duration
                                                                         body bytes

The line is written after the handler returns, so it carries the final
status. A request that raises is logged at ERROR and the exception
continues outward.

The middleware only observes. It adds no headers; response bytes are the
same with or without it.

    logging.getLogger("userservice.access").setLevel(logging.WARNING)

silences it without touching the rest of the service's logging.

=============================================================================
"""

import logging
import time
from dataclasses import dataclass

from ..http.request import RawRequest
from ..http.response import HTTPResponse
from .base import Middleware, NextHandler


logger = logging.getLogger("userservice.access")


@dataclass
class RequestLog:
    """One access log entry."""

    method: str
    path: str
    client_ip: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_text(self) -> str:
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Access logging.

    Should be first in the pipeline so the timing covers everything else.

    Args:
        log_level: Level the access lines are logged at (INFO by default).
    """

    def __init__(self, log_level: int = logging.INFO):
        self.log_level = log_level

    def __call__(self, request: RawRequest, next: NextHandler) -> HTTPResponse:
        start_time = time.time()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        entry = RequestLog(
            method=request.method,
            path=request.path,
            client_ip=request.client_address[0],
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=(time.time() - start_time) * 1000,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )
        logger.log(self.log_level, entry.to_text())

        return response
