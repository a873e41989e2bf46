"""
pytest configuration and fixtures.

Tests run against a SQLite file per test (under tmp_path), so no
PostgreSQL server is needed.
"""

import socket
import threading
from dataclasses import dataclass
from typing import Dict, Generator, Optional, Tuple

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from userservice import ServiceConfig, UserServer, create_router, create_server
from userservice.db import UserRepository, bootstrap, create_db_engine
from userservice.http import Router


USERS_PATH = "/api/rust/users"


def build_request(method: str, path: str, body: str = "") -> bytes:
    """A request the way a typical client writes it."""
    head = (
        f"{method} {path} HTTP/1.1\r\n"
        f"Host: localhost\r\n"
        f"Content-Type: application/json\r\n"
        f"Content-Length: {len(body.encode('utf-8'))}\r\n"
        f"\r\n"
    )
    return (head + body).encode("utf-8")


@dataclass
class RawResponse:
    """A response as read off the socket."""

    raw: bytes

    @property
    def head(self) -> str:
        return self.raw.partition(b"\r\n\r\n")[0].decode("utf-8")

    @property
    def status_line(self) -> str:
        return self.head.split("\r\n")[0]

    @property
    def status(self) -> int:
        return int(self.status_line.split(" ")[1])

    @property
    def headers(self) -> Dict[str, str]:
        lines = self.head.split("\r\n")[1:]
        return dict(line.split(": ", 1) for line in lines if line)

    @property
    def body(self) -> str:
        return self.raw.partition(b"\r\n\r\n")[2].decode("utf-8")


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'users.db'}"


@pytest.fixture
def users_path() -> str:
    return USERS_PATH


@pytest.fixture
def config(database_url: str, users_path: str) -> ServiceConfig:
    """Test service configuration."""
    return ServiceConfig(
        database_url=database_url,
        users_path=users_path,
        host="127.0.0.1",
        port=8080,
        workers=2,
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def engine(config: ServiceConfig):
    """Engine with the users table already created."""
    engine = create_db_engine(config)
    bootstrap(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine) -> UserRepository:
    return UserRepository(engine)


@pytest.fixture
def router(repository: UserRepository, users_path: str) -> Router:
    return create_router(repository, users_path)


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False

    def __init__(self, server: UserServer, port: int):
        self.server = server
        self.port = port
        self._thread: Optional[threading.Thread] = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"host": "127.0.0.1", "port": self.port},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.stop()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    @property
    def address(self) -> Tuple[str, int]:
        return ("127.0.0.1", self.port)

    def send(self, data: bytes, timeout: float = 5.0) -> bytes:
        """Write raw bytes, read everything until the server closes."""
        with socket.create_connection(self.address, timeout=timeout) as sock:
            if data:
                sock.sendall(data)
            else:
                sock.shutdown(socket.SHUT_WR)
            chunks = []
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def request(self, method: str, path: str, body: str = "") -> RawResponse:
        return RawResponse(self.send(build_request(method, path, body)))


@pytest.fixture
def test_server(config: ServiceConfig, engine, free_port: int) -> Generator[TestServer, None, None]:
    """The full service, listening on a free local port."""
    config.port = free_port
    server = create_server(config, engine)

    test_srv = TestServer(server, free_port)
    test_srv.start()

    yield test_srv

    test_srv.stop()
