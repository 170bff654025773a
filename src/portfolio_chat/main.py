"""
Chat Server Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures logging and global exception handling, and provides a
test-friendly application factory.

Design Goals
------------
- Deterministic startup
- Centralized router registration
- Global exception safety net
- Test-friendly via create_app()
"""

from __future__ import annotations

import contextlib
import logging
from typing import AsyncIterator

from fastapi import FastAPI

from .config import settings
from .core.errors import ChatError, chat_error_handler, unhandled_exception_handler
from .core.log_config import configure_logging

from .api import (
    chat_routes,
    health_routes,
)


logger = logging.getLogger("chat.app")


@contextlib.asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Startup/shutdown hook.

    Credentials are deliberately not required here: a missing API key fails
    individual chat requests with a ConfigError, not the whole process.
    """
    logger.info("Starting portfolio-chat-server (provider=%s)", settings.llm_provider)
    if settings.api_key_for(settings.llm_provider) is None:
        logger.warning(
            "No API key configured for provider '%s'; chat requests will fail",
            settings.llm_provider,
        )
    yield
    logger.info("Shutting down portfolio-chat-server")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    configure_logging(settings.log_level)

    app = FastAPI(
        title="portfolio-chat-server",
        version="1.0.0",
        lifespan=_lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(ChatError, chat_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(chat_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn)
# ---------------------------------------------------------------------

app = create_app()
