"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

    SocketServer   Listening socket and accept loop
    Connection     One accepted client socket, one request/response cycle

Concurrency lives one level up, in HTTPServer: every accepted Connection
gets its own worker thread.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, TransportError

__all__ = [
    "SocketServer",     # Listening socket, accepts connections
    "Connection",       # Client socket wrapper, single read / write
    "ConnectionState",  # Connection lifecycle states
    "TransportError",   # Socket read/write failure
]
