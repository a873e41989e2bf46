"""
=============================================================================
REQUEST ROUTER
=============================================================================

Maps a parsed request to a handler by method and path PREFIX.

=============================================================================
ROUTING FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Incoming Request                                                   │
    │   GET /api/rust/users/42                                            │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  ROUTER (checked top to bottom)                              │   │
    │   │                                                              │   │
    │   │  1. OPTIONS  (any path)          → preflight                │   │
    │   │  2. POST     /api/rust/users     → create                   │   │
    │   │  3. GET      /api/rust/users/    → get_user     ← MATCH!    │   │
    │   │  4. GET      /api/rust/users     → list_users               │   │
    │   │  5. PUT      /api/rust/users/    → update                   │   │
    │   │  6. DELETE   /api/rust/users/    → delete                   │   │
    │   │                                                              │   │
    │   │  (nothing matched)               → 404 "404 not found"      │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   get_user(request)                                                  │
    │   # request.resource_id == "42"                                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FIRST MATCH WINS
=============================================================================

Routes are prefix matches, tried in registration order. Because
"/api/rust/users" is a prefix of "/api/rust/users/42", the item route
(prefix ending in "/") must be registered BEFORE the collection route:

    router.get("/api/rust/users/")(get_user)     # 3. more specific
    router.get("/api/rust/users")(list_users)    # 4. less specific

Swap the two and every GET-by-id is answered with the full list.

There is no 405 Method Not Allowed: a known path with an unsupported
method is simply "no match" and gets the not-found template.

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .request import RawRequest
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)


Handler = Callable[[RawRequest], HTTPResponse]


@dataclass
class Route:
    """
    A registered route.

        Route(
            method="GET",                   # None = any method
            prefix="/api/rust/users/",      # path must start with this
            handler=get_user,
            name="get_user",
        )
    """

    method: Optional[str]
    prefix: str
    handler: Handler
    name: Optional[str] = None

    def matches(self, request: RawRequest) -> bool:
        if self.method is not None and request.method != self.method:
            return False
        return request.path.startswith(self.prefix)


class Router:
    """
    Ordered prefix router.

    Usage:
        router = Router()

        @router.options("")
        def preflight(request):
            return ok()

        @router.post("/api/rust/users")
        def create_user(request):
            ...

        response = router.handle(request)
    """

    def __init__(self):
        self._routes: List[Route] = []

    @property
    def routes(self) -> List[Route]:
        return list(self._routes)

    def add_route(
        self,
        prefix: str,
        handler: Handler,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a route after all existing ones.

        Args:
            prefix: Path prefix ("" matches every path)
            handler: Function taking a RawRequest, returning an HTTPResponse
            method: HTTP method (None for any method)
            name: Optional name, used in logs

        Returns:
            The registered Route
        """
        route = Route(
            method=method.upper() if method else None,
            prefix=prefix,
            handler=handler,
            name=name or getattr(handler, "__name__", None),
        )
        self._routes.append(route)
        return route

    def match(self, request: RawRequest) -> Optional[Route]:
        """First route that matches the request, or None."""
        for route in self._routes:
            if route.matches(request):
                return route
        return None

    def handle(self, request: RawRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        Unmatched requests get the not-found template with the literal
        body "404 not found".
        """
        route = self.match(request)
        if route is None:
            logger.debug(f"No route for {request.method} {request.path}")
            return not_found()

        logger.debug(f"{request.method} {request.path} → {route.name}")
        return route.handler(request)

    # =========================================================================
    # DECORATOR REGISTRATION
    # =========================================================================

    def route(
        self,
        prefix: str,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of add_route(); returns the handler unchanged."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(prefix, handler, method, name)
            return handler
        return decorator

    def options(self, prefix: str = "", name: Optional[str] = None):
        return self.route(prefix, "OPTIONS", name)

    def get(self, prefix: str, name: Optional[str] = None):
        return self.route(prefix, "GET", name)

    def post(self, prefix: str, name: Optional[str] = None):
        return self.route(prefix, "POST", name)

    def put(self, prefix: str, name: Optional[str] = None):
        return self.route(prefix, "PUT", name)

    def delete(self, prefix: str, name: Optional[str] = None):
        return self.route(prefix, "DELETE", name)

    def describe(self) -> List[str]:
        """One line per route, in match order, for the startup log."""
        return [
            f"{route.method or '*':<8} {route.prefix or '*':<24} → {route.name}"
            for route in self._routes
        ]
