"""
=============================================================================
APPLICATION WIRING
=============================================================================

Builds the route table and a ready-to-run server from a config.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   ServiceConfig                                                      │
    │       │                                                              │
    │       ├──► create_db_engine() ──► Engine ──► UserRepository         │
    │       │                                          │                   │
    │       │                                          ▼                   │
    │       │                                   create_router()            │
    │       │                                          │                   │
    │       └──────────────────────────────► UserServer(config, router)   │
    │                                          + LoggingMiddleware         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ROUTE TABLE
=============================================================================

Order matters (first prefix match wins):

    1. OPTIONS  *              preflight
    2. POST     {P}            create
    3. GET      {P}/           get_one
    4. GET      {P}            get_all
    5. PUT      {P}/           update
    6. DELETE   {P}/           delete
       anything else           404 "404 not found"

where P is the users path, "/api/rust/users" unless configured otherwise.
A PUT or DELETE on P itself (no trailing slash) matches nothing.

=============================================================================
"""

import logging
from typing import Optional

from sqlalchemy.engine import Engine

from .config import DEFAULT_USERS_PATH, ServiceConfig
from .db import UserRepository, create_db_engine
from .handlers import UserHandlers, preflight
from .http import Router
from .middleware import LoggingMiddleware
from .server import UserServer


logger = logging.getLogger(__name__)


def create_router(repository: UserRepository, users_path: str = DEFAULT_USERS_PATH) -> Router:
    """
    Route table for the user resource.

    Args:
        repository: Storage the handlers talk to.
        users_path: Collection path, without a trailing slash.

    Returns:
        Router with the six routes registered in match order.
    """
    collection = users_path.rstrip("/")
    item = collection + "/"
    handlers = UserHandlers(repository, collection)

    router = Router()
    router.add_route("", preflight, method="OPTIONS", name="preflight")
    router.add_route(collection, handlers.create, method="POST", name="create_user")
    router.add_route(item, handlers.get_one, method="GET", name="get_user")
    router.add_route(collection, handlers.get_all, method="GET", name="list_users")
    router.add_route(item, handlers.update, method="PUT", name="update_user")
    router.add_route(item, handlers.delete, method="DELETE", name="delete_user")
    return router


def create_server(config: ServiceConfig, engine: Optional[Engine] = None) -> UserServer:
    """
    Build the server for a config.

    Args:
        config: Service configuration.
        engine: Engine to use instead of one built from config.database_url.

    Returns:
        UserServer with routes and access logging installed, not yet running.
    """
    if engine is None:
        engine = create_db_engine(config)

    router = create_router(UserRepository(engine), config.users_path)
    server = UserServer(config, router)
    server.use(LoggingMiddleware())
    return server
