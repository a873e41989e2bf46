"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

    userservice.core
    ├── socket_server.py  # Listening socket + accept loop
    ├── connection.py     # One accepted client: read once, write, close
    └── thread_pool.py    # Fixed set of workers over an unbounded queue

    SocketServer ──accept──► Connection ──submit──► ThreadPool ──► handler

=============================================================================
"""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer
from .thread_pool import ThreadPool, Worker, WorkerState, Job

__all__ = [
    "Connection",
    "ConnectionState",
    "SocketServer",
    "ThreadPool",
    "Worker",
    "WorkerState",
    "Job",
]
