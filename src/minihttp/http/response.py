"""
=============================================================================
HTTP RESPONSE BUILDER & SERIALIZER
=============================================================================

Accumulates a status, headers and content, then writes them out as the
exact bytes the peer receives.

=============================================================================
WIRE FORMAT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                  ← 1. status line + CRLF     │
    │    Content-Type: text/plain\r\n         ← 2. one line per header    │
    │    Content-Length: 3\r\n                                            │
    │    \r\n                                 ← 3. blank line             │
    │    abc\r\n                              ← 4. content + CRLF         │
    │                                              (only if non-empty)    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The CRLF after the content is part of this server's framing. Clients
should read exactly Content-Length bytes of body; the trailing CRLF is not
counted.

Nothing is added behind the caller's back: no Date, no Server, no
automatic Content-Length. A status-only response is just the status line
and the blank line:

    HTTP/1.1 200 OK\r\n\r\n

=============================================================================
TWO RESPONSE SHAPES
=============================================================================

    status_only(HTTPStatus.CREATED)
        → status set, headers empty, content empty

    content_response("abc", "text/plain")
        → status OK
          Content-Type: text/plain
          Content-Length: <BYTE length of content>
          content = b"abc"

Content-Length counts bytes, not characters, so "é" is 2 and binary file
content is measured exactly.

=============================================================================
"""

import socket
from dataclasses import dataclass, field
from typing import Iterator, Union

from .request import Headers
from .status_codes import HTTPStatus


TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"

CRLF = b"\r\n"

Payload = Union[str, bytes]


def _payload_bytes(payload: Payload) -> bytes:
    """Encode str payloads the same way the parser decoded them."""
    if isinstance(payload, str):
        return payload.encode("utf-8", "surrogateescape")
    return bytes(payload)


@dataclass
class HTTPResponse:
    """
    A response under construction.

    Created empty for each request, filled in by exactly one handler, then
    serialized once.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Handler returns          iter_chunks()           Socket sends
        HTTPResponse    ─────►   yields pieces   ─────►  chunk by chunk
            │                       │                        │
        HTTPResponse(            b"HTTP/1.1 200 OK\\r\\n"   sock.sendall(chunk)
          status=OK,             b"Content-Type: ...\\r\\n"
          headers={...},         b"\\r\\n"
          content=b"..."         b"abc" b"\\r\\n"
        )

    =========================================================================
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Headers = field(default_factory=dict)
    content: bytes = b""

    @property
    def status_line(self) -> str:
        """Status line without CRLF, e.g. "HTTP/1.1 200 OK"."""
        return self.status.status_line

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Set a response header, replacing any previous value.

        Returns:
            Self for method chaining
        """
        self.headers[name] = value
        return self

    def set_content(self, payload: Payload, content_type: str) -> "HTTPResponse":
        """
        Turn this response into a content response.

        Sets status OK, Content-Type, Content-Length (byte count) and the
        content itself.

        Args:
            payload: Body (str is encoded to UTF-8)
            content_type: Media type, e.g. "text/plain"

        Returns:
            Self for method chaining
        """
        data = _payload_bytes(payload)
        self.status = HTTPStatus.OK
        self.headers["Content-Type"] = content_type
        self.headers["Content-Length"] = str(len(data))
        self.content = data
        return self

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def iter_chunks(self) -> Iterator[bytes]:
        """
        Yield the wire representation piece by piece, in order.

        1. status line + CRLF
        2. "Name: Value" + CRLF for each header
        3. CRLF
        4. content + CRLF, only when content is non-empty
        """
        yield self.status_line.encode("ascii") + CRLF

        for name, value in self.headers.items():
            yield f"{name}: {value}".encode("utf-8", "surrogateescape") + CRLF

        yield CRLF

        if self.content:
            yield self.content + CRLF

    def to_bytes(self) -> bytes:
        """
        Serialize the whole response into one bytes object.

        Returns:
            Complete HTTP response as bytes
        """
        return b"".join(self.iter_chunks())

    def write_to(self, sock: socket.socket) -> None:
        """
        Write the response to a socket, one chunk per sendall().

        The first failing write raises and the remaining chunks are NOT
        attempted. Errors are not buffered or retried here; the caller
        decides what a failed write means for the connection.

        Args:
            sock: Anything with a sendall(bytes) method.

        Raises:
            OSError: Whatever the socket raised.
        """
        for chunk in self.iter_chunks():
            sock.sendall(chunk)


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.CREATED)
            .build())

        response = (ResponseBuilder()
            .content(b"\\x89PNG...", OCTET_STREAM)
            .build())

    Every method but build() and to_bytes() returns self.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Headers = {}
        self._content: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        """Set the response status."""
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Add a single response header."""
        self._headers[name] = value
        return self

    def content(self, payload: Payload, content_type: str) -> "ResponseBuilder":
        """
        Set content plus matching Content-Type / Content-Length.

        Status is set to OK, matching content_response().

        Args:
            payload: Body (str is encoded to UTF-8)
            content_type: Media type for Content-Type

        Returns:
            Self for method chaining
        """
        data = _payload_bytes(payload)
        self._status = HTTPStatus.OK
        self._headers["Content-Type"] = content_type
        self._headers["Content-Length"] = str(len(data))
        self._content = data
        return self

    def build(self) -> HTTPResponse:
        """Build the HTTPResponse."""
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            content=self._content,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize in one step."""
        return self.build().to_bytes()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def status_only(status: HTTPStatus) -> HTTPResponse:
    """Response carrying only a status: no headers, no content."""
    return HTTPResponse(status=status)


def content_response(payload: Payload, content_type: str) -> HTTPResponse:
    """
    Create a 200 OK content response.

    Args:
        payload: Body (str is encoded to UTF-8)
        content_type: Media type for Content-Type

    Returns:
        HTTPResponse with Content-Type, Content-Length and content set
    """
    return HTTPResponse().set_content(payload, content_type)


def ok() -> HTTPResponse:
    """Create a bare 200 OK response."""
    return status_only(HTTPStatus.OK)


def created() -> HTTPResponse:
    """Create a bare 201 Created response."""
    return status_only(HTTPStatus.CREATED)


def not_found() -> HTTPResponse:
    """Create a bare 404 Not Found response."""
    return status_only(HTTPStatus.NOT_FOUND)


def internal_error() -> HTTPResponse:
    """Create a bare 500 Internal Server Error response."""
    return status_only(HTTPStatus.INTERNAL_SERVER_ERROR)
