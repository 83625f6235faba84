"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

The protocol core of the server: bytes in, request out; response in,
bytes out. Nothing in this package touches a socket or the filesystem.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   b"GET /echo/abc HTTP/1.1\r\nUser-Agent: x\r\n\r\n"         │
    │ Output:  HTTPRequest(method="GET", path="/echo/abc", ...)           │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSE BUILDER / SERIALIZER (response.py)                         │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   content_response("abc", "text/plain")                      │
    │ Output:  b"HTTP/1.1 200 OK\r\nContent-Type: ...\r\n\r\nabc\r\n"     │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ ROUTER (router.py)                                                  │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   GET /echo/abc                                              │
    │ Output:  calls echo(request) with path_params={"rest": "abc"}       │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .status_codes import HTTPStatus
from .request import (
    Headers,
    HTTPRequest,
    MalformedRequest,
    RequestParser,
    parse_request,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    OCTET_STREAM,
    TEXT_PLAIN,
    content_response,
    created,
    internal_error,
    not_found,
    ok,
    status_only,
)
from .router import Route, RouteMatch, RouteNotFound, Router

__all__ = [
    # Status
    "HTTPStatus",
    # Request
    "Headers",
    "HTTPRequest",
    "MalformedRequest",
    "RequestParser",
    "parse_request",
    # Response
    "HTTPResponse",
    "ResponseBuilder",
    "OCTET_STREAM",
    "TEXT_PLAIN",
    "content_response",
    "status_only",
    "ok",
    "created",
    "not_found",
    "internal_error",
    # Routing
    "Route",
    "RouteMatch",
    "RouteNotFound",
    "Router",
]
