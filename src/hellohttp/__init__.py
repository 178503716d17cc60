"""
=============================================================================
HELLOHTTP - A Minimal Thread-per-Connection Web Server
=============================================================================

Accepts TCP connections, reads one HTTP-style request from each, and
answers with the contents of a file:

    GET / HTTP/1.1         → 200 OK,        body of hello.html
    anything else          → 404 NOT FOUND, body of 404.html

then closes the connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         ARCHITECTURE                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   core/socket_server.py   bind, listen, accept loop                 │
    │   server.py               one thread per accepted connection        │
    │   core/connection.py      read → route → respond → close            │
    │   http/request.py         request lines from the byte stream        │
    │   http/router.py          first line → (status, resource)           │
    │   http/response.py        Content-Length framed response            │
    │   handlers/static.py      resource key → bytes                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    from hellohttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=7878, document_root="./public"))
    server.run()

Or from the shell:

    python -m hellohttp --root ./public

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .exceptions import (
    AcceptFailure,
    BindFailure,
    ConnectionScopedError,
    FatalServerError,
    PeerAddressFailure,
    ResourceUnavailable,
    ServerError,
    WriteFailure,
)
from .handlers import MemoryFileStore, StaticFileStore
from .http import Router, default_router
from .server import HTTPServer, create_app

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "create_app",
    "Router",
    "default_router",
    "MemoryFileStore",
    "StaticFileStore",
    "ServerError",
    "FatalServerError",
    "BindFailure",
    "AcceptFailure",
    "ConnectionScopedError",
    "PeerAddressFailure",
    "ResourceUnavailable",
    "WriteFailure",
    "__version__",
]
