"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Callable, Generator, List, Optional, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hellohttp import HTTPServer, ServerConfig, MemoryFileStore
from hellohttp.http import INDEX_RESOURCE, ERROR_RESOURCE


INDEX_BODY = b"<html>ok</html>"
ERROR_BODY = b"<html>no</html>"


@pytest.fixture
def root_request() -> bytes:
    """The one request that is answered with 200."""
    return b"GET / HTTP/1.1\r\nHost: x\r\n\r\n"


@pytest.fixture
def missing_request() -> bytes:
    """A request for a path that has no route."""
    return b"GET /missing HTTP/1.1\r\n\r\n"


@pytest.fixture
def store() -> MemoryFileStore:
    """Store holding both pages."""
    return MemoryFileStore({
        INDEX_RESOURCE: INDEX_BODY,
        ERROR_RESOURCE: ERROR_BODY,
    })


@pytest.fixture
def pair() -> Generator[Tuple[socket.socket, socket.socket], None, None]:
    """(server_side, client_side) connected sockets, no listener needed."""
    server_side, client_side = socket.socketpair()
    client_side.settimeout(5.0)
    yield server_side, client_side
    client_side.close()
    server_side.close()


@pytest.fixture
def config() -> ServerConfig:
    """Test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        log_level="WARNING",
    )


def _exchange(address: Tuple[str, int], payload: bytes, timeout: float = 5.0) -> bytes:
    """Connect, send payload, and read until the server closes."""
    with socket.create_connection(address, timeout=timeout) as sock:
        if payload:
            sock.sendall(payload)
        # Done sending; a server waiting on an empty request sees EOF
        sock.shutdown(socket.SHUT_WR)
        chunks = []
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


class ServerThread:
    """Runs an HTTPServer in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self.error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> Tuple[str, int]:
        return self.server.address

    def _run(self):
        try:
            self.server.run()
        except BaseException as e:  # surfaced to the test via .error
            self.error = e

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError(f"Server failed to start: {self.error}")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def exchange():
    """Send one request to an address and return everything sent back."""
    return _exchange


@pytest.fixture
def serve() -> Generator[Callable[[HTTPServer], ServerThread], None, None]:
    """Factory that starts servers in the background and stops them afterwards."""
    started: List[ServerThread] = []

    def _serve(server: HTTPServer) -> ServerThread:
        srv = ServerThread(server)
        srv.start()
        started.append(srv)
        return srv

    yield _serve

    for srv in started:
        srv.stop()


@pytest.fixture
def running_server(serve, config: ServerConfig, store: MemoryFileStore) -> ServerThread:
    """A live server on an OS-assigned port."""
    return serve(HTTPServer(config, store=store))
