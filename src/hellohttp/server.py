"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         REQUEST FLOW                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   SocketServer (main thread)                                         │
    │       accept() ──► Connection                                        │
    │                        │                                             │
    │                        │  one new thread per connection              │
    │                        ▼                                             │
    │   _process_connection (worker thread)                                │
    │       handle_connection(conn, store, router)                         │
    │           read lines ──► route ──► load body ──► write ──► close     │
    │                                                                      │
    │       ConnectionScopedError ──► logged here, never re-raised        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THREAD PER CONNECTION
=============================================================================

Each accepted connection gets its own daemon thread. The accept loop
starts it and moves on: it never joins or tracks the thread, so a
handler that fails (or hangs on a silent client) only ever affects its
own connection.

There are no limits: no pool, no connection cap, no read deadline unless
ServerConfig.timeout is set. Under heavy load every waiting client costs
a thread.

=============================================================================
"""

import logging
import threading
from typing import Optional, Tuple

from .config import ServerConfig
from .core.connection import Connection, handle_connection
from .core.socket_server import SocketServer
from .exceptions import ConnectionScopedError
from .handlers.static import FileStore, StaticFileStore
from .http.router import Router, default_router


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Thread-per-connection server for one page and one error page.

    Usage:
        server = HTTPServer(ServerConfig(document_root="./public"))
        server.run()  # Blocks until Ctrl+C

    Or with an in-memory store and custom routes:
        router = default_router().add_route("GET /about HTTP/1.1", "about.html")
        server = HTTPServer(config, store=MemoryFileStore({...}), router=router)
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        store: Optional[FileStore] = None,
        router: Optional[Router] = None,
    ):
        """
        Args:
            config: Server configuration. Defaults are used if not provided.
            store: Where response bodies come from. Defaults to the files
                   in config.document_root.
            router: Route table. Defaults to the single root route.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self.store = store if store is not None else StaticFileStore(self.config.document_root)
        self.router = router or default_router()

        self._socket_server = SocketServer(self.config)
        self._running = False

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening with port=0."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    def run(self):
        """
        Start the server (blocking).

        Raises:
            BindFailure: If the listening socket can't be set up.
            AcceptFailure: If accepting stops working.
        """
        self._setup_logging()
        self._running = True

        logger.info(
            f"Starting server on {self.config.host}:{self.config.port} "
            f"serving {self.store!r}"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._running = False
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting new connections. In-flight handlers finish on their own."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_for_shutdown(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("hellohttp").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Spawn a thread for a connection (called on the accept thread).

        The thread is not tracked; the loop returns to accept() at once.
        """
        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        worker.start()

    def _process_connection(self, conn: Connection):
        """
        Serve one connection (runs in its own thread).

        Every failure stops here. Known connection-scoped errors are
        logged as warnings; anything else is logged with a traceback.
        """
        try:
            written = handle_connection(conn, self.store, self.router)
            logger.debug(f"[{conn.id}] Wrote {written} bytes")
        except ConnectionScopedError as e:
            logger.warning(f"[{e.connection_id or conn.id}] {type(e).__name__}: {e}")
        except OSError as e:
            # Read timeout or a socket error outside the writer
            logger.warning(f"[{conn.id}] Connection error: {e}")
        except Exception as e:
            logger.exception(f"[{conn.id}] Unexpected handler error: {e}")


def create_app(
    config: Optional[ServerConfig] = None,
    store: Optional[FileStore] = None,
    router: Optional[Router] = None,
) -> HTTPServer:
    """Factory for server instances."""
    return HTTPServer(config, store=store, router=router)
