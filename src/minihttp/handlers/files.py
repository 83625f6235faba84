"""
=============================================================================
FILE ROUTES
=============================================================================

    GET  /files/<name>   Read <directory>/<name>
                         ok    → 200, application/octet-stream, file bytes
                         error → 404 (missing, unreadable, a directory...)

    POST /files/<name>   Write the request body to <directory>/<name>
                         ok    → 201 Created
                         error → 500 Internal Server Error

=============================================================================
PATH HANDLING
=============================================================================

<name> is joined to the directory as "<directory>/<name>" and used as-is.
"../" sequences are NOT removed, so by default a request can reach files
outside the directory:

    GET /files/../../etc/passwd   →   <directory>/../../etc/passwd

Setting confine=True (ServerConfig.confine_files) resolves the target and
answers 404 when it lands outside the directory. That check is opt-in.

=============================================================================
"""

import logging
from pathlib import Path

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, OCTET_STREAM, content_response, created, internal_error
from ..http.router import RouteNotFound


logger = logging.getLogger(__name__)


class FileHandler:
    """
    Reads and writes files under a base directory.

    Usage:
        files = FileHandler("/srv/files")
        router.get("/files/*rest")(files.get)
        router.post("/files/*rest")(files.post)
    """

    def __init__(self, directory: str, confine: bool = False):
        """
        Args:
            directory: Base directory for all file operations.
            confine: Reject targets resolving outside the directory.
        """
        self.directory = directory
        self.confine = confine
        self._root = Path(directory).resolve()

    def target(self, name: str) -> Path:
        """
        Filesystem path for a /files/<name> request.

        Raises:
            RouteNotFound: If confinement is on and the path escapes the
                           directory.
            OSError, ValueError: If confinement is on and the path cannot
                                 be resolved (e.g. an embedded NUL byte).
        """
        path = Path(f"{self.directory}/{name}")

        if self.confine:
            resolved = path.resolve()
            try:
                resolved.relative_to(self._root)
            except ValueError:
                logger.warning(f"Path traversal attempt: {name!r}")
                raise RouteNotFound(f"{name!r} is outside {self.directory}")

        return path

    def get(self, request: HTTPRequest) -> HTTPResponse:
        """Serve a file's bytes, or 404 on any read failure."""
        name = request.path_params.get("rest", "")

        # ValueError: names the OS refuses outright, such as embedded NULs
        try:
            data = self.target(name).read_bytes()
        except (OSError, ValueError) as e:
            raise RouteNotFound(f"Cannot read {name!r}: {e}") from e

        return content_response(data, OCTET_STREAM)

    def post(self, request: HTTPRequest) -> HTTPResponse:
        """Create or truncate a file with the request body; 500 on I/O errors."""
        name = request.path_params.get("rest", "")

        try:
            with open(self.target(name), "wb") as f:
                f.write(request.body)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write {name!r}: {e}")
            return internal_error()

        logger.debug(f"Wrote {len(request.body)} bytes to {name!r}")
        return created()
