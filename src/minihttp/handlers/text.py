"""
Plain-text routes: the index, /echo/<rest> and /user-agent.
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, TEXT_PLAIN, content_response, ok


def index(request: HTTPRequest) -> HTTPResponse:
    """GET / - bare 200 OK, no headers, no body."""
    return ok()


def echo(request: HTTPRequest) -> HTTPResponse:
    """
    GET /echo/<rest> - send <rest> back verbatim as text/plain.

    <rest> is everything after "/echo/", so "/echo/a/b" echoes "a/b" and
    "/echo/" echoes an empty body.
    """
    return content_response(request.path_params.get("rest", ""), TEXT_PLAIN)


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """GET /user-agent - send the User-Agent header back (empty if absent)."""
    return content_response(request.user_agent, TEXT_PLAIN)
