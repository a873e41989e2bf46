"""
=============================================================================
USERSERVICE - User CRUD Over Raw HTTP/1.1
=============================================================================

A small JSON service that stores users (id, name, email) in a relational
database and exposes create / read / list / update / delete over a
hand-written HTTP/1.1 server.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    userservice/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m userservice)
    ├── app.py               # Route table + server factory
    ├── config.py            # ServiceConfig dataclass
    ├── models.py            # User model and JSON encoding
    ├── server.py            # UserServer + configure_logging
    ├── core/                # Sockets and threads
    │   ├── socket_server.py # Listening socket + accept loop
    │   ├── connection.py    # One read, one write, close
    │   └── thread_pool.py   # Fixed worker pool
    ├── db/                  # Storage
    │   ├── schema.py        # users table + bootstrap
    │   ├── engine.py        # Engine construction
    │   └── repository.py    # UserRepository
    ├── http/                # Protocol
    │   ├── request.py       # RawRequest + parse_request
    │   ├── response.py      # The three response templates
    │   ├── router.py        # Ordered prefix router
    │   └── status_codes.py  # 200 / 404 / 500
    ├── middleware/
    │   ├── base.py          # MiddlewarePipeline
    │   └── logging.py       # Access log
    └── handlers/
        └── users.py         # The five user operations

=============================================================================
QUICK START
=============================================================================

    from userservice import ServiceConfig, create_server
    from userservice.db import create_db_engine, bootstrap

    config = ServiceConfig(database_url="sqlite:///users.db", port=8080)
    engine = create_db_engine(config)
    bootstrap(engine)

    create_server(config, engine).run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServiceConfig
from .models import User
from .server import UserServer, configure_logging
from .app import create_router, create_server

__all__ = [
    "__version__",
    "ServiceConfig",
    "User",
    "UserServer",
    "configure_logging",
    "create_router",
    "create_server",
]
