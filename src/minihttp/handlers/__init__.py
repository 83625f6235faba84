"""
Request handlers.

- text: GET /, GET /echo/<rest>, GET /user-agent
- files: GET and POST /files/<name>
"""

from .files import FileHandler
from .text import echo, index, user_agent

__all__ = [
    "FileHandler",
    "echo",
    "index",
    "user_agent",
]
