"""
=============================================================================
USER SERVER
=============================================================================

Ties the pieces together: listening socket, worker pool, parser,
middleware and router.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer (main thread)                                        │
    │       │ accept()                                                     │
    │       ▼                                                              │
    │   _handle_connection(conn) ──► ThreadPool.submit                    │
    │                                       │                              │
    │   ┌───────────────────────────────────┘   (worker thread)           │
    │   ▼                                                                  │
    │   _process_connection(conn)                                         │
    │       │                                                              │
    │       ├── conn.read_once()         one recv, ≤ buffer_size bytes    │
    │       │      └── b"" → routed as an empty request (404)             │
    │       │                                                              │
    │       ├── parse_request(data)      never fails                      │
    │       │                                                              │
    │       ├── handler(request)         middleware → router → handler    │
    │       │      └── raises → logged, internal-error template           │
    │       │                                                              │
    │       ├── conn.send_response(response.to_bytes())                   │
    │       │                                                              │
    │       └── conn.close()             client reads to EOF              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Nothing that goes wrong with one connection reaches the accept loop or
kills a worker.

=============================================================================
"""

import logging
from typing import Callable, Optional, Tuple

from .config import ServiceConfig
from .core import Connection, SocketServer, ThreadPool
from .http import RawRequest, HTTPResponse, Router, internal_error, parse_request
from .middleware import Middleware, MiddlewarePipeline, NextHandler


logger = logging.getLogger(__name__)


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once for the process.

    Unknown level names fall back to INFO.
    """
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
    logging.getLogger("userservice").setLevel(numeric_level)


class UserServer:
    """
    The user service's HTTP server.

    Usage:
        router = create_router(repository)
        server = UserServer(config, router)
        server.use(LoggingMiddleware())
        server.run()                 # blocks until stop() or Ctrl+C
    """

    def __init__(self, config: ServiceConfig, router: Optional[Router] = None):
        self.config = config

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(workers=self.config.workers)

        self._router = router or Router()
        self._middleware = MiddlewarePipeline()

        # middleware.wrap(router.handle), built when the server starts
        self._handler: Optional[NextHandler] = None

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port) once listening, configured address before."""
        return self._socket_server.address

    def use(self, middleware: Middleware) -> "UserServer":
        """Add middleware; first added is outermost. Returns self."""
        self._middleware.add(middleware)
        self._handler = None
        return self

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        on_ready: Optional[Callable[[Tuple[str, int]], None]] = None,
    ):
        """
        Serve until stop() is called or the process is interrupted.

        Args:
            host: Override config host.
            port: Override config port.
            on_ready: Called with the bound (host, port) once listening.

        Raises:
            OSError: If the address cannot be bound.
        """
        if host:
            self.config.host = host
        if port:
            self.config.port = port

        self._handler = self._middleware.wrap(self._router.handle)
        self._thread_pool.start()

        for line in self._router.describe():
            logger.debug(f"Route: {line}")

        try:
            self._socket_server.start(self._handle_connection, on_ready)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def stop(self):
        """Ask the accept loop to exit. Safe to call from any thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._thread_pool.shutdown(wait=True)
        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle(self, request: RawRequest) -> HTTPResponse:
        """
        Run one parsed request through middleware and router.

        Any exception is logged and answered with the internal-error
        template.
        """
        if self._handler is None:
            self._handler = self._middleware.wrap(self._router.handle)

        try:
            return self._handler(request)
        except Exception as e:
            logger.exception(f"Unhandled error for {request.method} {request.path}: {e}")
            return internal_error()

    def _handle_connection(self, conn: Connection):
        """Called by the accept loop; hands the connection to a worker."""
        self._thread_pool.submit(self._process_connection, conn)

    def _process_connection(self, conn: Connection):
        """One exchange on one connection (runs in a worker thread)."""
        with conn:
            try:
                data = conn.read_once()
            except OSError as e:
                logger.warning(f"[{conn.id}] Read failed: {e}")
                return

            if not data:
                logger.debug(f"[{conn.id}] Client sent nothing")

            request = parse_request(data, conn.address)
            response = self.handle(request)
            conn.send_response(response.to_bytes())
