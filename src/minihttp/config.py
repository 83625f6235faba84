"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Everything the server needs to know at startup lives in one ServerConfig
object. It is created once and handed to HTTPServer and create_router();
nothing reads configuration from module-level globals.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── minihttp --port 8080 --directory /tmp/files               │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── MINIHTTP_PORT=8080 minihttp                               │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
import socket
from dataclasses import dataclass
from typing import Optional


# Listen protocol → address family. "tcp" picks the family from the host.
PROTOCOLS = ("tcp", "tcp4", "tcp6")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - protocol, host, port, backlog, buffer_size, timeout, shutdown_grace

    FILE ROUTES
    - directory, confine_files

    LOGGING
    - log_level, log_format, access_log

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    protocol: str = "tcp"
    """
    Listen protocol.
    - "tcp"  - IPv4, or IPv6 when host is an IPv6 literal
    - "tcp4" - IPv4 only
    - "tcp6" - IPv6 only
    """

    host: str = "0.0.0.0"
    """The IP address to bind to. "0.0.0.0" listens on every interface."""

    port: int = 4221
    """The port number to listen on. 0 lets the OS pick a free port."""

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    buffer_size: int = 8192
    """
    Size of the single read performed per connection.
    A request (headers AND body) larger than this is truncated.
    """

    timeout: Optional[float] = None
    """
    Socket timeout for client connections in seconds.
    None = block forever; a slow peer then holds its worker indefinitely.
    """

    shutdown_grace: float = 5.0
    """Seconds to wait for each in-flight connection worker at shutdown."""

    # ─────────────────────────────────────────────────────────────────────
    # FILE ROUTES
    # ─────────────────────────────────────────────────────────────────────

    directory: str = ""
    """
    Base directory for GET/POST /files/<name>.
    Empty disables the file routes (they answer 404).
    """

    confine_files: bool = False
    """
    Refuse /files/ targets that resolve outside `directory`.
    Off by default: <name> is joined to the directory as-is.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' or 'json'."""

    access_log: bool = True
    """Log one line per answered request."""

    @property
    def address_family(self) -> socket.AddressFamily:
        """Socket family implied by protocol and host."""
        if self.protocol == "tcp6":
            return socket.AF_INET6
        if self.protocol == "tcp" and ":" in self.host:
            return socket.AF_INET6
        return socket.AF_INET

    @property
    def files_enabled(self) -> bool:
        """True when a base directory for the /files/ routes is configured."""
        return bool(self.directory)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        MINIHTTP_PROTOCOL       Listen protocol (default: tcp)
        MINIHTTP_HOST           Server host (default: 0.0.0.0)
        MINIHTTP_PORT           Server port (default: 4221)
        MINIHTTP_DIRECTORY      Base directory for /files/ (default: none)
        MINIHTTP_BUFFER_SIZE    Read buffer in bytes (default: 8192)
        MINIHTTP_TIMEOUT        Client socket timeout (default: none)
        MINIHTTP_CONFINE_FILES  Confine /files/ to the directory (default: 0)
        MINIHTTP_LOG_LEVEL      Logging level (default: INFO)
        MINIHTTP_LOG_FORMAT     Access log format (default: text)

        =====================================================================
        """
        timeout = os.getenv("MINIHTTP_TIMEOUT")
        return cls(
            protocol=os.getenv("MINIHTTP_PROTOCOL", "tcp"),
            host=os.getenv("MINIHTTP_HOST", "0.0.0.0"),
            port=int(os.getenv("MINIHTTP_PORT", "4221")),
            directory=os.getenv("MINIHTTP_DIRECTORY", ""),
            buffer_size=int(os.getenv("MINIHTTP_BUFFER_SIZE", "8192")),
            timeout=float(timeout) if timeout else None,
            confine_files=_env_bool("MINIHTTP_CONFINE_FILES", False),
            log_level=os.getenv("MINIHTTP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("MINIHTTP_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called by HTTPServer at construction so a bad value fails at
        startup, not on the first request.

        Raises:
            ValueError: On the first invalid value found.
        """
        if self.protocol not in PROTOCOLS:
            raise ValueError(
                f"Invalid protocol: {self.protocol!r}. Must be one of {', '.join(PROTOCOLS)}."
            )

        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 16:
            raise ValueError("buffer_size must be >= 16")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.shutdown_grace < 0:
            raise ValueError("shutdown_grace must be >= 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level!r}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Invalid log format: {self.log_format!r}")

        if self.directory and not os.path.isdir(self.directory):
            raise ValueError(f"Directory does not exist: {self.directory}")
