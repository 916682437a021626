"""Worker entry point and HTTP worker server."""

from .handler import WorkerHandler
from .server import create_app

__all__ = ["WorkerHandler", "create_app"]
