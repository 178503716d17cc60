"""
=============================================================================
CONNECTION HANDLING
=============================================================================

One accepted socket, one request, one response, then close.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does not preserve message boundaries. A request sent as one write
can arrive in several recv() chunks, or glued to whatever follows it:

    Client sends:    "GET / HTTP/1.1\r\nHost: x\r\n\r\n"

    Server might receive:
        recv() → "GET / HT"
        recv() → "TP/1.1\r\nHost: x\r\n\r\n"

So we never recv() directly. The socket is wrapped in a buffered file
object (socket.makefile) and read one LINE at a time; the buffer takes
care of stitching chunks back together.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──┬──────────────────────────► EMPTY ──┐
                          │                                     │
                          └──► ROUTING ──────► RESPONDING ──────┤
                                                                ▼
                                                             CLOSED

    NEW         peer address looked up and logged
    READING     request lines read up to the blank line
    EMPTY       client closed without sending anything (not an error)
    ROUTING     first line mapped to (status, resource)
    RESPONDING  body loaded, response written and flushed
    CLOSED      socket released, always reached

Any failure along the way jumps straight to CLOSED and is raised to the
caller as a ConnectionScopedError.

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Tuple

from ..exceptions import ConnectionScopedError, PeerAddressFailure
from ..handlers.static import FileStore
from ..http.request import read_request_lines
from ..http.response import HTTPResponse, write_response
from ..http.router import Router, default_router


logger = logging.getLogger(__name__)

# Longest close() will spend draining unread client bytes, in total
DRAIN_TIMEOUT = 0.5


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and debugging."""

    NEW = "new"                # Just accepted, nothing read yet
    READING = "reading"        # Reading request lines
    EMPTY = "empty"            # Client sent nothing before closing
    ROUTING = "routing"        # Deciding status and resource
    RESPONDING = "responding"  # Writing the response
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents one client connection.

    Owned by exactly one handler invocation for its whole life. Nothing
    here is shared with other connections, so there are no locks.

    Attributes:
        socket: The client socket.
        address: Client (ip, port) as reported by accept(), if known.
        id: Short unique identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        timeout: Socket timeout in seconds. None blocks forever.
    """

    socket: socket.socket
    address: Optional[Tuple] = None

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = None

    _rfile: Optional[BinaryIO] = field(default=None, repr=False)
    _wfile: Optional[BinaryIO] = field(default=None, repr=False)

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    @property
    def rfile(self) -> BinaryIO:
        """Buffered read side of the socket, created on first use."""
        if self._rfile is None:
            self._rfile = self.socket.makefile("rb")
        return self._rfile

    @property
    def wfile(self) -> BinaryIO:
        """Buffered write side of the socket, created on first use."""
        if self._wfile is None:
            self._wfile = self.socket.makefile("wb")
        return self._wfile

    def peer_address(self) -> Tuple:
        """
        Ask the OS who is on the other end.

        This can fail on a socket that broke between accept() and now.

        Raises:
            PeerAddressFailure: If getpeername() fails.
        """
        try:
            return self.socket.getpeername()
        except OSError as e:
            raise PeerAddressFailure(
                f"Could not read peer address: {e}", connection_id=self.id
            ) from e

    def close(self):
        """
        Close the connection.

        1. Flush and drop the file wrappers (they hold socket references)
        2. shutdown(SHUT_WR) so the client sees EOF after our response
        3. Drain what the client is still sending, for at most DRAIN_TIMEOUT
        4. close() the socket
        """
        if self.state == ConnectionState.CLOSED:
            return

        for stream in (self._wfile, self._rfile):
            if stream is None:
                continue
            try:
                stream.close()
            except OSError:
                pass  # Peer already gone; nothing left to flush to
        self._rfile = self._wfile = None

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass

        # Total deadline, not per recv: a trickling client can't hold us here
        deadline = time.monotonic() + DRAIN_TIMEOUT
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                if not self.socket.recv(1024):
                    break
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        if self.timeout is not None:
            try:
                self.socket.settimeout(self.timeout)
            except OSError:
                # __exit__ won't run, so release the socket here
                self.close()
                raise
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions


def handle_connection(
    conn: Connection,
    store: FileStore,
    router: Optional[Router] = None,
) -> int:
    """
    Serve one connection end to end: read, route, respond, close.

    ┌─────────────────────────────────────────────────────────────────┐
    │                  handle_connection() Flow                        │
    ├─────────────────────────────────────────────────────────────────┤
    │                                                                  │
    │   peer_address()         ── PeerAddressFailure ──┐               │
    │        │                                         │               │
    │   read_request_lines()                           │               │
    │        │                                         │               │
    │        ├── [] ──► return 0 (nothing sent)        │               │
    │        │                                         │               │
    │   router.decide(lines)                           │               │
    │        │                                         │               │
    │   write_response()       ── ResourceUnavailable ─┤               │
    │        │                 ── WriteFailure ────────┤               │
    │        ▼                                         ▼               │
    │   close()  ◄───────────── always ─────────── raise to caller     │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

    Args:
        conn: The accepted connection. Closed before this returns.
        store: Where response bodies come from.
        router: Route table. Defaults to the single root route.

    Returns:
        Number of response bytes written (0 for an empty request).

    Raises:
        PeerAddressFailure, ResourceUnavailable, WriteFailure.
    """
    router = router or default_router()

    with conn:
        peer = conn.peer_address()
        logger.info(f"[{conn.id}] Connection established from: {peer}")

        conn.state = ConnectionState.READING
        lines = read_request_lines(conn.rfile)

        if not lines:
            conn.state = ConnectionState.EMPTY
            logger.debug(f"[{conn.id}] Client closed without sending a request")
            return 0

        conn.state = ConnectionState.ROUTING
        decision = router.decide(lines)
        logger.info(f"[{conn.id}] {lines[0]!r} → {HTTPResponse(decision.status).status_line}")

        conn.state = ConnectionState.RESPONDING
        try:
            return write_response(decision, store, conn.wfile)
        except ConnectionScopedError as e:
            e.connection_id = e.connection_id or conn.id
            raise
