"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for exactly one request/response cycle:

    ┌──────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED  │
    │              │             │             │                    ▲      │
    │              └─────────────┴─────────────┴────── any error ───┘      │
    │                                                                      │
    └──────────────────────────────────────────────────────────────────────┘

There is no keep-alive: once the response is written (or anything fails)
the connection is closed. Use it as a context manager so the close
happens on every exit path:

    with conn:
        raw = conn.read_request()
        ...
        conn.send_response(response)

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


class TransportError(ConnectionError):
    """
    Reading from or writing to the client socket failed.

    The cycle is abandoned and the connection closed; the peer may have
    received nothing, or part of a response.
    """


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and close bookkeeping."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Waiting for the single read
    PROCESSING = "processing"  # Request parsed, handler running
    WRITING = "writing"        # Sending the response
    CLOSING = "closing"        # Close sequence in progress
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        buffer_size: Size of the one read performed by read_request().
        timeout: Socket timeout in seconds, None for blocking.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    timeout: Optional[float] = None

    def __post_init__(self):
        self.socket.settimeout(self.timeout)

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> bytes:
        """
        Perform the single read of this connection.

        Whatever one recv() of buffer_size bytes returns IS the request.
        There is no loop waiting for more data and no Content-Length
        handling; requests must fit into one read.

        Returns:
            The bytes received (never empty).

        Raises:
            TransportError: If recv() fails or times out, or the peer
                            closed without sending anything.
        """
        self.state = ConnectionState.READING

        try:
            data = self.socket.recv(self.buffer_size)
        except OSError as e:
            raise TransportError(f"Read failed: {e}") from e

        if not data:
            raise TransportError("Connection closed before a request was received")

        self.state = ConnectionState.PROCESSING
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, response: HTTPResponse) -> None:
        """
        Write a response to the client.

        The response is written chunk by chunk; the first failed write
        aborts the rest.

        Raises:
            TransportError: If any write fails.
        """
        self.state = ConnectionState.WRITING

        try:
            response.write_to(self.socket)
        except OSError as e:
            raise TransportError(f"Write failed: {e}") from e

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): tell the client we're done sending
        2. Drain whatever the client still sends (short timeout)
        3. close(): release the file descriptor

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Includes socket.timeout

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
        return False  # Don't suppress exceptions
