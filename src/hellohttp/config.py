"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m hellohttp --port 3000                           │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HELLOHTTP_PORT=3000 python -m hellohttp                   │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Validation happens once, at startup, so a bad value fails before the
socket is ever bound.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the server.

    Development:
        ServerConfig()                          # 127.0.0.1:7878, cwd

    Tests:
        ServerConfig(port=0, log_level="WARNING")  # OS picks a free port

    Containers:
        ServerConfig(host="0.0.0.0", document_root="/srv/www")
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only
    - "0.0.0.0" - All network interfaces
    """

    port: int = 7878
    """
    The port number to listen on. 0 lets the OS choose a free port;
    read the real one back from HTTPServer.address once it is listening.
    """

    backlog: int = 128
    """Maximum number of queued connections before new ones are refused."""

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None = block until the client sends a blank line or closes.
    A slow client then holds its thread for as long as it likes.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "."
    """Directory holding hello.html and 404.html."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        HELLOHTTP_HOST        Server host (default: 127.0.0.1)
        HELLOHTTP_PORT        Server port (default: 7878)
        HELLOHTTP_TIMEOUT     Socket timeout in seconds (default: none)
        HELLOHTTP_ROOT        Document root (default: .)
        HELLOHTTP_LOG_LEVEL   Logging level (default: INFO)
        """
        timeout = os.getenv("HELLOHTTP_TIMEOUT")
        return cls(
            host=os.getenv("HELLOHTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HELLOHTTP_PORT", "7878")),
            timeout=float(timeout) if timeout else None,
            document_root=os.getenv("HELLOHTTP_ROOT", "."),
            log_level=os.getenv("HELLOHTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid value found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")
