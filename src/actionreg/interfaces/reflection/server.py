"""Reflection API server startup.

The reflection API is served as a task on the event loop that runs the
application's registry calls. Route handlers and application code then
share one loop and one thread, so a plugin initialization or store
construction started by a request is an ordinary task the application
can await too.

In development mode importing the registry schedules the server:
immediately when an event loop is already running, otherwise from inside
the first registry resolution made on a running loop. FastAPI and uvicorn
are imported only when a server is actually built.
"""

from __future__ import annotations

import asyncio
import contextvars
from typing import TYPE_CHECKING

from actionreg.utils.config import get_reflection_settings, is_dev_environment
from actionreg.utils.logger import get_logger

if TYPE_CHECKING:
    import uvicorn

logger = get_logger("reflection")

_server: uvicorn.Server | None = None
_server_task: asyncio.Task | None = None


def _build_server(host: str, port: int) -> uvicorn.Server:
    import uvicorn

    from actionreg.interfaces.reflection.app import create_app

    config = uvicorn.Config(create_app(), host=host, port=port, log_level="warning")
    return uvicorn.Server(config)


def start_reflection_api(host: str | None = None, port: int | None = None) -> asyncio.Task:
    """Serve the reflection API as a task on the running event loop.

    Calling it again while the server task is running returns that task.

    Args:
        host: Host to bind to (defaults to ``reflection.host``)
        port: Port to bind to (defaults to ``reflection.port``)

    Raises:
        RuntimeError: If no event loop is running in this thread
    """
    global _server, _server_task

    loop = asyncio.get_running_loop()
    if _server_task is not None and not _server_task.done():
        return _server_task

    default_host, default_port = get_reflection_settings()
    host = host or default_host
    port = port or default_port

    _server = _build_server(host, port)
    # Fresh context: requests resolve the process default registry, not
    # whatever scope happened to be bound when the server was scheduled
    _server_task = loop.create_task(_server.serve(), context=contextvars.Context())
    logger.success(f"Reflection API started at http://{host}:{port}/api")
    return _server_task


def _start_when_loop_running() -> None:
    try:
        start_reflection_api()
    except Exception as e:
        logger.error(f"Failed to start reflection API: {e}")


def stop_reflection_api() -> asyncio.Task | None:
    """Ask a running server to exit and drop any pending development start.

    Returns the server task, if there was one, so async callers can await
    its shutdown.
    """
    global _server, _server_task
    from actionreg.registry.scope import cancel_loop_callback

    cancel_loop_callback(_start_when_loop_running)

    task = _server_task
    if _server is not None:
        _server.should_exit = True
    _server = None
    _server_task = None
    return task


def maybe_start_reflection_api() -> asyncio.Task | None:
    """Schedule the reflection API when running in the ``dev`` environment.

    Returns the server task when an event loop is already running, else
    None (the server starts once a running loop resolves the registry).
    Startup problems are logged and swallowed: the reflection API is a
    development aid and must never prevent the registry from importing.
    """
    from actionreg.registry.scope import call_when_loop_running

    try:
        if not is_dev_environment():
            return None
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            call_when_loop_running(_start_when_loop_running)
            logger.debug("Reflection API will start on the first running event loop")
            return None
        return start_reflection_api()
    except Exception as e:
        logger.error(f"Failed to start reflection API: {e}")
        return None


def run_reflection_api(host: str | None = None, port: int | None = None) -> None:
    """Run the reflection API in the foreground (CLI entry point).

    A development-mode start scheduled at import is dropped first, so
    this is the only server bound to the port.
    """
    default_host, default_port = get_reflection_settings()
    host = host or default_host
    port = port or default_port

    # Building the app imports the registry, which may schedule a dev start
    server = _build_server(host, port)
    stop_reflection_api()

    logger.key_info(f"Serving reflection API at http://{host}:{port}/api")
    server.run()
