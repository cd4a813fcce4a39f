"""Reflection API - FastAPI application.

Lets development tooling enumerate and inspect the registered actions
and schemas of a running process.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from actionreg import __version__


def create_app() -> FastAPI:
    """Create the reflection API FastAPI application.

    App factory for ASGI servers and testing.

    Returns:
        Configured FastAPI application instance.
    """
    from actionreg.interfaces.reflection.routes import router as api_router

    app = FastAPI(
        title="actionreg Reflection API",
        description="Introspection of registered actions and schemas",
        version=__version__,
    )

    # CORS middleware for development tooling running on other ports
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app
