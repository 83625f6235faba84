"""
=============================================================================
MIDDLEWARE BASE CLASSES
=============================================================================

Middleware wraps the router. Each one gets the request and a `next`
handler, and returns a response:

    Request ──► LoggingMiddleware ──► ... ──► Router.handle
                       │                          │
    Response ◄─────────┴──────────────────────────┘

Middleware added first runs outermost: it sees the request first and the
response last.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Abstract base class for middleware.

        class Timing(Middleware):
            def __call__(self, request, next):
                start = time.time()
                response = next(request)   # <-- continue the chain
                ...
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Process a request.

        Args:
            request: The incoming HTTP request
            next: The next handler in the chain

        Returns:
            HTTP response (from next() or produced here)
        """

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains middleware around a final handler.

        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware())
        handler = pipeline.wrap(router.handle)
        response = handler(request)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """
        Append middleware to the chain.

        Returns:
            Self for method chaining
        """
        self._middleware.append(middleware)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Build a single handler that runs every middleware, then `handler`.

        The chain is built inside-out: the last middleware added wraps
        the handler first.

        Args:
            handler: The final request handler (usually Router.handle)

        Returns:
            Wrapped handler function
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler,
    ) -> NextHandler:
        # A separate function so each closure binds its own middleware.
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)
        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)
