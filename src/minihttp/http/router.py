"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, path) to a handler. Routes are tried in the order they were
registered and the FIRST match wins.

=============================================================================
PATTERN SYNTAX
=============================================================================

    ┌──────────────────┬──────────────────────┬──────────────────────────┐
    │ Pattern          │ Matches              │ path_params              │
    ├──────────────────┼──────────────────────┼──────────────────────────┤
    │ /                │ /                    │ {}                       │
    │ /user-agent      │ /user-agent          │ {}                       │
    │ /echo/*rest      │ /echo/abc            │ {"rest": "abc"}          │
    │                  │ /echo/a/b?c          │ {"rest": "a/b?c"}        │
    │                  │ /echo/               │ {"rest": ""}             │
    └──────────────────┴──────────────────────┴──────────────────────────┘

A "*name" segment captures EVERYTHING after the static prefix, slashes
included. It is a plain prefix cut: no decoding, no normalisation, no
clean-up of "..". The request path is matched exactly as it was sent.

=============================================================================
FALLBACKS
=============================================================================

    No route matches            → 404 Not Found
    Handler raises RouteNotFound → 404 Not Found
    Method does not match       → 404 Not Found (there is no 405 here)

=============================================================================
"""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional

from .request import HTTPRequest
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)

Handler = Callable[[HTTPRequest], HTTPResponse]


class RouteNotFound(LookupError):
    """
    Raised by a handler when the resource it was asked for does not exist.

    The router turns it into a 404 response; the peer never sees it as a
    connection failure.
    """


@dataclass
class Route:
    """
    A registered route.

        Route(
            path="/echo/*rest",      # URL pattern
            method="GET",            # HTTP method
            handler=echo,            # Handler function
            _pattern=<compiled>,     # ^/echo/(?P<rest>.*)$
        )
    """

    path: str
    method: str
    handler: Handler

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)


@dataclass
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    params: Dict[str, str]


class Router:
    """
    Ordered, first-match-wins request router.

        router = Router()

        @router.get("/echo/*rest")
        def echo(request):
            return content_response(request.path_params["rest"], TEXT_PLAIN)

        response = router.handle(request)
    """

    def __init__(self):
        self._routes: List[Route] = []

    def add_route(self, path: str, handler: Handler, method: str) -> Route:
        """
        Register a route.

        Args:
            path: URL pattern ("/", "/user-agent", "/files/*rest")
            handler: Function taking a request and returning a response
            method: HTTP method, compared exactly after upper-casing

        Returns:
            The registered Route object
        """
        route = Route(
            path=path,
            method=method.upper(),
            handler=handler,
            _pattern=self._compile_pattern(path),
        )
        self._routes.append(route)
        return route

    def _compile_pattern(self, path: str) -> re.Pattern:
        """
        Compile a path pattern into an anchored regex.

        =====================================================================
        PATTERN COMPILATION
        =====================================================================

        Input:  "/files/*rest"

        Step 1: Split by "/"
                ["", "files", "*rest"]

        Step 2: Process each segment
                ""        → (leading slash, kept as "/")
                "files"   → files            (static, escaped)
                "*rest"   → (?P<rest>.*)     (wildcard, stops compilation)

        Step 3: Join and anchor
                ^/files/(?P<rest>.*)$

        =====================================================================

        Args:
            path: Route pattern to compile

        Returns:
            Compiled regex (DOTALL, so a wildcard takes any character)
        """
        regex_parts = ["^"]

        segments = path.split("/")
        for i, segment in enumerate(segments):
            if i > 0:
                regex_parts.append("/")

            if segment.startswith("*"):
                param_name = segment[1:] or "wildcard"
                regex_parts.append(f"(?P<{param_name}>.*)")
                break

            regex_parts.append(re.escape(segment))

        regex_parts.append("$")
        return re.compile("".join(regex_parts), re.DOTALL)

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Find the first route matching method and path.

        Args:
            method: HTTP method as sent
            path: Request path as sent

        Returns:
            RouteMatch if found, None otherwise
        """
        for route in self._routes:
            if route.method != method:
                continue

            match = route._pattern.match(path)
            if match:
                return RouteMatch(route=route, params=match.groupdict())

        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        Args:
            request: The parsed request

        Returns:
            The handler's response, or 404 when nothing matched or the
            handler raised RouteNotFound
        """
        match = self.match(request.method, request.path)
        if match is None:
            logger.debug(f"No route for {request.method} {request.path}")
            return not_found()

        try:
            return match.route.handler(replace(request, path_params=match.params))
        except RouteNotFound as e:
            logger.debug(f"{request.method} {request.path}: {e}")
            return not_found()

    # =========================================================================
    # DECORATORS
    # =========================================================================

    def route(self, path: str, method: str) -> Callable[[Handler], Handler]:
        """
        Decorator for registering routes.

        Usage:
            @router.route("/", "GET")
            def index(request):
                return ok()
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method)
            return handler
        return decorator

    def get(self, path: str) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(path, "GET")

    def post(self, path: str) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(path, "POST")

    def routes(self) -> List[Route]:
        """All registered routes, in match order."""
        return list(self._routes)
