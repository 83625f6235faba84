"""
Route table for the server.

    GET   /               → 200 OK
    GET   /user-agent     → echo User-Agent
    GET   /echo/*rest     → echo <rest>
    GET   /files/*rest    → read file         (only with a directory)
    POST  /files/*rest    → write file        (only with a directory)
    anything else         → 404 Not Found

Order matters: the router is first-match-wins.
"""

import logging

from .config import ServerConfig
from .handlers import FileHandler, echo, index, user_agent
from .http.router import Router


logger = logging.getLogger(__name__)


def create_router(config: ServerConfig) -> Router:
    """
    Build the router for a configuration.

    Args:
        config: Server configuration; only `directory` and `confine_files`
                are used here.

    Returns:
        Router with every route registered in match order.
    """
    router = Router()

    router.get("/")(index)
    router.get("/user-agent")(user_agent)
    router.get("/echo/*rest")(echo)

    if config.files_enabled:
        files = FileHandler(config.directory, confine=config.confine_files)
        router.get("/files/*rest")(files.get)
        router.post("/files/*rest")(files.post)
    else:
        logger.debug("No directory configured, /files/ routes disabled")

    return router
