"""
=============================================================================
MAIN HTTP SERVER
=============================================================================

Ties the pieces together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer ── accept ──► HTTPServer._handle_connection           │
    │                                   │                                  │
    │                                   │  one thread per connection       │
    │                                   ▼                                  │
    │                          serve_connection(conn)                      │
    │                                   │                                  │
    │     conn.read_request()  ──►  RequestParser.parse()                  │
    │                                   │                                  │
    │                                   ▼                                  │
    │               MiddlewarePipeline ──► Router.handle ──► handler       │
    │                                   │                                  │
    │                                   ▼                                  │
    │                        conn.send_response(response)                  │
    │                                   │                                  │
    │                                   ▼                                  │
    │                              conn.close()                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FAILURE HANDLING
=============================================================================

    Read fails / peer sends nothing   → log, close, nothing written
    Request does not parse            → log, close, nothing written
    No route / file missing           → 404 response
    File write fails                  → 500 response
    Handler raises anything else      → log traceback, 500 response
    Write fails                       → log, close

The peer gets one complete response or none at all for read and parse
failures.

=============================================================================
CONCURRENCY
=============================================================================

Every accepted connection runs on its own daemon thread. Nothing bounds
the number of threads: a flood of slow clients means a flood of threads.
Workers share no mutable state apart from the live-worker registry used
for shutdown.

=============================================================================
"""

import logging
import threading
from typing import Callable, Optional, Set, Tuple

from .app import create_router
from .config import ServerConfig
from .core import Connection, SocketServer, TransportError
from .http import (
    HTTPRequest, HTTPResponse, MalformedRequest, RequestParser, Router,
    internal_error,
)
from .middleware import LoggingMiddleware, Middleware, MiddlewarePipeline


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Single-request-per-connection HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        config = ServerConfig(port=4221, directory="/tmp/files")
        server = HTTPServer(config)
        server.run()                  # blocks until SIGINT/SIGTERM

    With a custom router:

        router = Router()

        @router.get("/ping")
        def ping(request):
            return content_response("pong", TEXT_PLAIN)

        HTTPServer(config, router=router).run()

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        """
        Args:
            config: Server configuration. Defaults are used if not given.
            router: Route table. Defaults to create_router(config).
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser()
        self._router = router or create_router(self.config)

        self._middleware = MiddlewarePipeline()
        if self.config.access_log:
            self._middleware.add(LoggingMiddleware(log_format=self.config.log_format))

        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

        self._workers: Set[threading.Thread] = set()
        self._workers_lock = threading.Lock()

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """
        Add middleware, run in the order added.

        Returns:
            Self for method chaining.
        """
        self._middleware.add(middleware)
        self._handler = None
        return self

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port) while running, configured address otherwise."""
        return self._socket_server.address

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking).

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port:
            self.config.port = port

        self._setup_logging()

        directory = self.config.directory or "(none)"
        logger.info(
            f"Listening at {self.config.protocol}://{self.config.host}:{self.config.port} "
            f"and serving directory {directory}"
        )
        for route in self._router.routes():
            logger.debug(f"Route {route.method:5} {route.path}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask a running server to stop; run() returns shortly after."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is bound."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("minihttp").setLevel(level)

    def _shutdown(self):
        """
        Stop the server and give in-flight workers a chance to finish.

        Workers still running after shutdown_grace seconds are left
        behind; they are daemon threads and die with the process.
        """
        logger.info("Shutting down server...")

        with self._workers_lock:
            workers = list(self._workers)

        for worker in workers:
            worker.join(timeout=self.config.shutdown_grace)
            if worker.is_alive():
                logger.warning(f"Worker {worker.name} still busy at shutdown")

        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Start a worker thread for a freshly accepted connection.

        Runs on the accept thread, so it only spawns and returns.
        """
        worker = threading.Thread(
            target=self._run_worker,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        with self._workers_lock:
            self._workers.add(worker)
        worker.start()

    def _run_worker(self, conn: Connection):
        try:
            with conn:  # Context manager ensures connection is closed
                self.serve_connection(conn)
        except Exception as e:
            logger.exception(f"[{conn.id}] Connection error: {e}")
        finally:
            with self._workers_lock:
                self._workers.discard(threading.current_thread())

    def serve_connection(self, conn: Connection):
        """
        Run one request/response cycle on a connection.

        Does NOT close the connection; the caller owns that.

        Args:
            conn: The client connection.
        """
        try:
            raw_request = conn.read_request()
        except TransportError as e:
            logger.warning(f"[{conn.id}] Error reading request: {e}")
            return

        try:
            request = self._parser.parse(raw_request, conn.address)
        except MalformedRequest as e:
            logger.warning(f"[{conn.id}] Error parsing connection as request: {e}")
            return

        response = self.dispatch(request)

        try:
            conn.send_response(response)
        except TransportError as e:
            logger.warning(f"[{conn.id}] Error responding to request: {e}")

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """
        Run a parsed request through middleware and the router.

        A handler that raises anything is answered with 500 so the worker
        always has a complete response to write.

        Args:
            request: The parsed request.

        Returns:
            The response to send.
        """
        if self._handler is None:
            self._handler = self._middleware.wrap(self._router.handle)

        try:
            return self._handler(request)
        except Exception as e:
            logger.exception(f"Handler error for {request.method} {request.path}: {e}")
            return internal_error()
