"""
=============================================================================
MINIHTTP - A Minimal HTTP/1.1 Server on Raw Sockets
=============================================================================

One connection, one read, one request, one response, close.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         MINIHTTP ROUTES                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET  /                 200 OK                                     │
    │   GET  /echo/<text>      200, text/plain, <text>                    │
    │   GET  /user-agent       200, text/plain, User-Agent header         │
    │   GET  /files/<name>     200 file bytes, or 404                     │
    │   POST /files/<name>     201 after writing the body, or 500         │
    │   anything else          404                                        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m minihttp)
    ├── server.py            # HTTPServer: accept → thread → parse → route → write
    ├── config.py            # ServerConfig dataclass
    ├── app.py               # Route table
    ├── core/
    │   ├── socket_server.py # Listening socket and accept loop
    │   └── connection.py    # One client socket, single read
    ├── http/
    │   ├── status_codes.py  # The four response statuses
    │   ├── request.py       # Bytes → HTTPRequest
    │   ├── response.py      # HTTPResponse → bytes
    │   └── router.py        # First-match-wins routing
    ├── middleware/
    │   ├── base.py          # Middleware ABC and pipeline
    │   └── logging.py       # Access log
    └── handlers/
        ├── text.py          # /, /echo/, /user-agent
        └── files.py         # /files/ read and write

=============================================================================
QUICK START
=============================================================================

    from minihttp import HTTPServer, ServerConfig

    HTTPServer(ServerConfig(port=4221, directory="/tmp/files")).run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
