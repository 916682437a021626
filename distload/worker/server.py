"""HTTP server that exposes a WorkerHandler to remote invokers."""

import asyncio
import json
import logging
from aiohttp import web

from ..core.models import InvocationType
from ..dispatch.invokers import INVOCATION_HEADER
from .handler import WorkerHandler

HANDLER_KEY = web.AppKey("handler", WorkerHandler)
TIMEOUT_KEY = web.AppKey("timeout_millis", int)
BACKGROUND_KEY = web.AppKey("background", set)

logger = logging.getLogger(__name__)


async def invoke(request: web.Request) -> web.Response:
    """Run the posted event, or accept it for background execution."""
    try:
        payload = await request.json()
    except (json.JSONDecodeError, ValueError):
        return web.json_response({"error": "Request body must be JSON"}, status=400)

    header = request.headers.get(INVOCATION_HEADER, InvocationType.REQUEST_RESPONSE.value)
    try:
        invocation = InvocationType(header)
    except ValueError:
        return web.json_response(
            {"error": f"Unknown invocation type: {header}"}, status=400
        )

    handler = request.app[HANDLER_KEY]
    timeout_millis = request.app[TIMEOUT_KEY]

    if invocation is InvocationType.EVENT:
        background = request.app[BACKGROUND_KEY]
        task = asyncio.create_task(handler.invoke(payload, timeout_millis))
        background.add(task)
        task.add_done_callback(background.discard)
        logger.info("Accepted event invocation")
        return web.json_response({"accepted": True}, status=202)

    result = await handler.invoke(payload, timeout_millis)
    return web.json_response(result)


async def health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


async def _drain(app: web.Application) -> None:
    background = app[BACKGROUND_KEY]
    if background:
        logger.info(f"Waiting for {len(background)} background invocations")
        await asyncio.gather(*list(background), return_exceptions=True)


def create_app(handler: WorkerHandler, timeout_millis: int = 900000) -> web.Application:
    """
    Build the worker application.

    Args:
        handler: Handler that runs each invocation
        timeout_millis: Time each invocation may take, timeout buffer included

    Returns:
        Application serving POST /invoke and GET /health
    """
    app = web.Application()
    app[HANDLER_KEY] = handler
    app[TIMEOUT_KEY] = timeout_millis
    app[BACKGROUND_KEY] = set()
    app.router.add_post("/invoke", invoke)
    app.router.add_get("/health", health)
    app.on_cleanup.append(_drain)
    return app
