"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the bytes of ONE socket read into a structured HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ START LINE ───────────────────────────────────────────────────┐ │
    │  │    POST /files/out.txt HTTP/1.1\r\n                             │ │
    │  │    ─┬── ───────┬─────── ───┬────                                │ │
    │  │   Method      Path       Version                                │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADER SECTION ───────────────────────────────────────────────┐ │
    │  │    Content-Length: 5\r\n                                        │ │
    │  │    User-Agent: curl/8.0\r\n                                     │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    hello\x00\x00\x00...   (zero padding of the read buffer)     │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
SINGLE-READ FRAMING
=============================================================================

The server reads a connection exactly once into a fixed-size buffer. The
whole request must fit in that buffer. Content-Length is NOT used to frame
the body: whatever follows the blank line is the body, minus any trailing
zero bytes left over from the buffer.

This is deliberate. The parser does not try to be a streaming reader; a
request larger than one read is simply truncated.

=============================================================================
LENIENT HEADER POLICY
=============================================================================

By default header lines that are not of the form "Name: Value" are
skipped without error:

    "Host: example.com"     → {"Host": "example.com"}
    "X-Odd: a: b"           → {"X-Odd": "a: b"}       (split on FIRST ": ")
    "NoSeparatorHere"       → skipped
    "Accept:text/html"      → skipped                 (needs colon + space)
    ": orphan"              → {"": "orphan"}          (empty name is kept)

RequestParser(strict=True) turns the skipped lines, and empty names, into
MalformedRequest.

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Tuple


logger = logging.getLogger(__name__)


# Header name → header value. Case-sensitive, last write wins.
Headers = Dict[str, str]


class MalformedRequest(ValueError):
    """
    Raised when raw bytes cannot be parsed into an HTTPRequest.

    Causes:
    - No start-line terminator (\\r\\n) in the buffer
    - No header-section terminator (\\r\\n\\r\\n) in the buffer
    - Start line does not split into exactly METHOD PATH VERSION
    - (strict mode only) a header line without ": "

    The server never answers a malformed request; it logs and closes.
    """


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request. Immutable once constructed.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:         "GET", "POST", ... exactly as sent
        path:           Request target exactly as sent ("/echo/abc")
        version:        Protocol token exactly as sent ("HTTP/1.1")
        headers:        Case-sensitive name → value mapping
        body:           Bytes after the blank line, zero padding stripped
        path_params:    Wildcard captures filled in by the router
                        Route "/echo/*rest" with "/echo/abc" → {"rest": "abc"}
        client_address: (ip, port) of the peer, for logging

    The router never mutates a request; it hands the handler a copy made
    with dataclasses.replace().

    =========================================================================
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: Headers = field(default_factory=dict)
    body: bytes = b""

    path_params: Dict[str, str] = field(default_factory=dict)
    client_address: Tuple[str, int] = ("", 0)

    @property
    def is_get(self) -> bool:
        return self.method == "GET"

    @property
    def is_post(self) -> bool:
        return self.method == "POST"

    @property
    def user_agent(self) -> str:
        """User-Agent header value, or "" when the client sent none."""
        return self.headers.get("User-Agent", "")

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value.

        Lookup is EXACT: header names keep the case the client used.

        Args:
            name: Header name as sent (e.g. "User-Agent")
            default: Value to return if header not found

        Returns:
            Header value or default
        """
        return self.headers.get(name, default)


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

    ==========================================================================
    PARSER ARCHITECTURE
    ==========================================================================

        Raw bytes (one read, maybe zero-padded)
              │
              ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  1. Find start-line end (\r\n)                                    │
        │     │  Not found? → MalformedRequest                              │
        │  2. Find header-section end (\r\n\r\n)                            │
        │     │  Not found? → MalformedRequest                              │
        │  3. Split start line on " " into METHOD PATH VERSION              │
        │     │  Not exactly 3 tokens? → MalformedRequest                   │
        │  4. Split header section on \r\n, each line on first ": "         │
        │     │  Bad line? → skipped (lenient) / MalformedRequest (strict)  │
        │  5. Body = rest of buffer with trailing \x00 stripped             │
        └───────────────────────────────────────────────────────────────────┘
              │
              ▼
        HTTPRequest

    ==========================================================================
    DECODING
    ==========================================================================

    Text parts are decoded as UTF-8 with "surrogateescape". Bytes that are
    not valid UTF-8 survive as lone surrogates and encode back to the very
    same bytes, so a path echoed by /echo/ is byte-for-byte what the
    client sent.

    ==========================================================================
    """

    START_LINE_END = b"\r\n"
    HEADERS_END = b"\r\n\r\n"
    LINE_SEPARATOR = "\r\n"
    HEADER_SEPARATOR = ": "
    PADDING = b"\x00"

    ENCODING = "utf-8"
    ENCODING_ERRORS = "surrogateescape"

    def __init__(self, strict: bool = False):
        """
        Initialize the request parser.

        Args:
            strict: Reject malformed header lines instead of skipping
                    them. Off by default; the server runs lenient.
        """
        self.strict = strict

    def parse(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data into an HTTPRequest object.

        Args:
            data: Bytes from a single socket read.
            client_address: Client's (ip, port) tuple for logging.

        Returns:
            Parsed HTTPRequest object.

        Raises:
            MalformedRequest: If a delimiter is missing or the start line
                              is not METHOD PATH VERSION.
        """
        data = bytes(data)

        # =====================================================================
        # STEP 1: Locate both delimiters before touching anything else
        # =====================================================================
        start_line_end = data.find(self.START_LINE_END)
        if start_line_end == -1:
            raise MalformedRequest("start line delimiter not found")

        headers_end = data.find(self.HEADERS_END)
        if headers_end == -1:
            raise MalformedRequest("headers delimiter not found")

        # =====================================================================
        # STEP 2: Start line
        # =====================================================================
        method, path, version = self._parse_start_line(data[:start_line_end])

        # =====================================================================
        # STEP 3: Header section
        # =====================================================================
        # With no headers the section is empty: headers_end == start_line_end
        # and the slice below is b"".
        #
        section_start = start_line_end + len(self.START_LINE_END)
        headers = self._parse_headers(data[section_start:headers_end])

        # =====================================================================
        # STEP 4: Body
        # =====================================================================
        body = data[headers_end + len(self.HEADERS_END):].rstrip(self.PADDING)

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _decode(self, raw: bytes) -> str:
        return raw.decode(self.ENCODING, self.ENCODING_ERRORS)

    def _parse_start_line(self, raw: bytes) -> Tuple[str, str, str]:
        """
        Split the start line into (method, path, version).

        Splitting is on every single space, so "GET  / HTTP/1.1" (two
        spaces) yields four tokens and is rejected.

        Raises:
            MalformedRequest: If the token count is not exactly three.
        """
        line = self._decode(raw)
        tokens = line.split(" ")
        if len(tokens) != 3:
            raise MalformedRequest(
                f"start line should contain METHOD PATH VERSION: {line!r}"
            )

        method, path, version = tokens
        return method, path, version

    def _parse_headers(self, raw: bytes) -> Headers:
        """
        Parse the header section into a Headers mapping.

        Args:
            raw: Bytes between the start line and the blank line,
                 without either terminator.

        Returns:
            Header name → value. A repeated name keeps its last value.
        """
        headers: Headers = {}

        for line in self._decode(raw).split(self.LINE_SEPARATOR):
            if not line:
                continue

            name, separator, value = line.partition(self.HEADER_SEPARATOR)
            if not separator or (self.strict and not name):
                if self.strict:
                    raise MalformedRequest(f"Invalid header line: {line!r}")
                logger.debug(f"Skipping malformed header line: {line!r}")
                continue

            headers[name] = value

        return headers


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
    strict: bool = False
) -> HTTPRequest:
    """
    Parse raw bytes with a one-off RequestParser.

    Args:
        data: Raw HTTP request bytes.
        client_address: Client's (ip, port) tuple.
        strict: Reject malformed header lines.

    Returns:
        Parsed HTTPRequest object.
    """
    return RequestParser(strict=strict).parse(data, client_address)
