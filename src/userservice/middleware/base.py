"""
=============================================================================
MIDDLEWARE PIPELINE
=============================================================================

Middleware wraps the router. Each one sees the request on the way in and
the response on the way out, and either calls the next layer or answers
on its own.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Request ──────────────────────────────────────────►               │
    │                                                                      │
    │   ┌──────────────┐    ┌──────────────┐    ┌──────────────┐          │
    │   │   Logging    │───►│    (more)    │───►│    Router    │          │
    │   │  [before]    │    │              │    │   .handle    │          │
    │   │  [after]     │◄───│              │◄───│              │          │
    │   └──────────────┘    └──────────────┘    └──────────────┘          │
    │                                                                      │
    │   ◄────────────────────────────────────────────── Response          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

First added = outermost. The pipeline is built once at startup with
wrap(); per request there is only the chain of closures to call.

=============================================================================
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, List

from ..http.request import RawRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


NextHandler = Callable[[RawRequest], HTTPResponse]


class Middleware(ABC):
    """
    Base class for middleware.

        class Timing(Middleware):
            def __call__(self, request, next):
                started = time.time()
                response = next(request)     # continue the chain
                ...
                return response
    """

    @abstractmethod
    def __call__(self, request: RawRequest, next: NextHandler) -> HTTPResponse:
        """
        Process one request.

        Args:
            request: The parsed request
            next: The rest of the chain; call it to continue

        Returns:
            The response, from next() or produced here
        """

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Ordered list of middleware around a final handler.

    Usage:
        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware())
        handler = pipeline.wrap(router.handle)
        response = handler(request)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def __len__(self) -> int:
        return len(self._middleware)

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """Append middleware (innermost so far). Returns self for chaining."""
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Build the chain around handler.

        Given [MW1, MW2] the result calls MW1 → MW2 → handler, so the list
        is wrapped in reverse.
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._bind(middleware, current)
        return current

    @staticmethod
    def _bind(middleware: Middleware, next_handler: NextHandler) -> NextHandler:
        def handler(request: RawRequest) -> HTTPResponse:
            return middleware(request, next_handler)
        return handler
