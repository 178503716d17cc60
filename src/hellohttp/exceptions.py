"""
=============================================================================
SERVER ERRORS
=============================================================================

Every failure the server knows how to name lives here. They fall into two
families, and the family decides how far an error is allowed to travel:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ERROR PROPAGATION                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   FatalServerError           ──► process boundary (exit status 1)   │
    │     ├── BindFailure              server never starts                │
    │     └── AcceptFailure            server stops accepting             │
    │                                                                      │
    │   ConnectionScopedError      ──► per-connection thread (logged)     │
    │     ├── PeerAddressFailure       broken socket at accept time       │
    │     ├── ResourceUnavailable      file store could not load body     │
    │     └── WriteFailure             response not fully delivered       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A connection-scoped error never unwinds into the accept loop. The client
just sees the connection close; no error body is ever sent.

=============================================================================
"""

from typing import Optional


class ServerError(Exception):
    """Base class for all hellohttp errors."""


# =============================================================================
# FATAL: stop the whole server
# =============================================================================

class FatalServerError(ServerError):
    """An error that terminates the server process."""


class BindFailure(FatalServerError):
    """
    Raised when the listening socket cannot be bound or put into listen mode.

    Typical causes: the address is already in use, or the port is
    privileged (< 1024) and we are not root.
    """

    def __init__(self, host: str, port: int, reason: OSError):
        super().__init__(f"Failed to bind to {host}:{port}: {reason}")
        self.host = host
        self.port = port
        self.reason = reason


class AcceptFailure(FatalServerError):
    """Raised when accept() fails at the socket level while running."""

    def __init__(self, reason: OSError):
        super().__init__(f"Accept failed: {reason}")
        self.reason = reason


# =============================================================================
# CONNECTION-SCOPED: abort one connection, keep serving the rest
# =============================================================================

class ConnectionScopedError(ServerError):
    """
    An error that only affects the connection it happened on.

    Carries the connection id (when known) so log lines can be matched
    to the "Connection established" record for the same client.
    """

    def __init__(self, message: str, connection_id: Optional[str] = None):
        super().__init__(message)
        self.connection_id = connection_id


class PeerAddressFailure(ConnectionScopedError):
    """Raised when the peer address of an accepted socket can't be read."""


class ResourceUnavailable(ConnectionScopedError):
    """Raised when the file store has no readable content for a key."""

    def __init__(self, key: str, reason: Optional[str] = None):
        message = f"Resource unavailable: {key}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.key = key


class WriteFailure(ConnectionScopedError):
    """Raised when a response is only partially written, or not at all."""

    def __init__(self, message: str, written: int = 0, expected: int = 0):
        super().__init__(message)
        self.written = written
        self.expected = expected
