"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server only ever answers with four statuses, so the enumeration is
closed on purpose:

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  200   │ OK                    - Route matched and succeeded       │
    │  201   │ Created               - POST /files/<name> stored a file │
    │  404   │ Not Found             - No route, or file missing         │
    │  500   │ Internal Server Error - File could not be written         │
    └────────┴───────────────────────────────────────────────────────────┘

Each member knows its reason phrase and the exact status line written on
the wire:

    HTTP/1.1 404 Not Found
    ───┬──── ─┬─ ────┬────
       │      │      │
    Version  Code  Phrase

=============================================================================
"""

from enum import IntEnum


HTTP_VERSION = "HTTP/1.1"


class HTTPStatus(IntEnum):
    """
    Response statuses and their reason phrases.

    IntEnum, so members compare equal to their numeric code:

        >>> HTTPStatus.CREATED == 201
        True
        >>> HTTPStatus.CREATED.status_line
        'HTTP/1.1 201 Created'
    """

    OK = 200                        # Standard success response
    CREATED = 201                   # File written by POST /files/<name>
    NOT_FOUND = 404                 # No route matched / file not readable
    INTERNAL_SERVER_ERROR = 500     # File could not be created or written

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line (e.g. "Not Found")."""
        return _STATUS_PHRASES[self]

    @property
    def status_line(self) -> str:
        """
        The canonical status line, WITHOUT the trailing CRLF.

        The serializer appends "\\r\\n" itself; keeping the line bare makes
        it usable in log messages and comparisons.
        """
        return f"{HTTP_VERSION} {self.value} {self.phrase}"

    @property
    def is_success(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx statuses."""
        return self >= 400


# =============================================================================
# REASON PHRASES
# =============================================================================

_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
