"""
Core networking: the accept loop and per-connection handling.
"""

from .connection import Connection, ConnectionState, handle_connection
from .socket_server import SocketServer

__all__ = ["Connection", "ConnectionState", "handle_connection", "SocketServer"]
