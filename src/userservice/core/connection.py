"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for exactly one request/response exchange.

=============================================================================
ONE READ, ONE WRITE, CLOSE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Client                                Server                       │
    │     │                                      │                         │
    │     │ ── request bytes ──────────────────► │  read_once()           │
    │     │                                      │  (single recv, up to   │
    │     │                                      │   buffer_size bytes)   │
    │     │                                      │                         │
    │     │ ◄───────────────── response bytes ── │  send_response()       │
    │     │                                      │                         │
    │     │ ◄───────────────────────────── FIN ── │  close()               │
    │     │                                      │                         │
    │   read until EOF                           │                         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There is no request buffering and no keep-alive. Whatever the first recv()
returns IS the request; anything the client sends after that is drained and
discarded on close. Clients know the response is complete when the server
closes the connection (responses carry no Content-Length).

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    NEW = "new"
    READING = "reading"
    WRITING = "writing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port) tuple.
        buffer_size: Maximum bytes taken by read_once().
        timeout: Socket timeout in seconds, None to block.
        id: Short random identifier for log lines.
    """

    socket: socket.socket
    address: tuple[str, int]
    buffer_size: int = 1024
    timeout: Optional[float] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    def __post_init__(self):
        # Accepted sockets inherit the listening socket's timeout on some
        # platforms; reset it to what this connection wants.
        self.socket.settimeout(self.timeout)

    @property
    def age(self) -> float:
        return time.time() - self.created_at

    def read_once(self) -> bytes:
        """
        Perform the single read of this connection.

        Returns:
            Up to buffer_size bytes. Empty when the client closed (or reset)
            the connection without sending anything.

        Raises:
            socket.timeout: If a timeout is configured and nothing arrived.
        """
        self.state = ConnectionState.READING
        try:
            data = self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

        logger.debug(f"[{self.id}] Read {len(data)} bytes")
        return data

    def send_response(self, data: bytes) -> bool:
        """
        Write the whole response.

        Returns:
            True if sent, False if the client went away first.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def close(self):
        """
        Close the connection.

            1. shutdown(SHUT_WR)  → client sees EOF after the response
            2. drain              → discard unread request bytes so the
                                    kernel sends FIN rather than RST
            3. close()            → release the descriptor

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(self.buffer_size):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
