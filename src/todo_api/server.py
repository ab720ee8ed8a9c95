"""
Process entry point.

Runs the application under uvicorn. Startup order:

1. the lifespan opens the store, bounded by ``CONNECT_TIMEOUT``; failure
   aborts startup and the process exits with status 3
2. uvicorn starts listening

On SIGINT uvicorn stops accepting connections and gives in-flight requests
``SHUTDOWN_TIMEOUT`` seconds to finish. After that the lifespan closes the
store connection.

Usage:
    python -m todo_api
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

import uvicorn

from .logging_config import setup_logging
from .main import create_app
from .settings import LOG_LEVELS, Settings, get_settings

logger = logging.getLogger(__name__)

STARTUP_FAILURE = 3


# PUBLIC_INTERFACE
def build_server(settings: Settings) -> uvicorn.Server:
    """Return a uvicorn server for a fresh application built from ``settings``."""
    config = uvicorn.Config(
        app=create_app(settings),
        host=settings.host,
        port=settings.port,
        lifespan="on",
        # Requests are logged by RequestLoggingMiddleware
        access_log=False,
        log_config=None,
        log_level=(settings.log_level if settings.log_level in LOG_LEVELS else "INFO").lower(),
        timeout_keep_alive=60,
        timeout_graceful_shutdown=settings.shutdown_timeout,
    )
    return uvicorn.Server(config)


async def serve(settings: Settings) -> None:
    """Serve until interrupted. Raises SystemExit if startup failed."""
    server = build_server(settings)
    logger.info("listening on %s:%d", settings.host, settings.port)
    await server.serve()
    if not server.started:
        logger.critical("Startup failed, exiting")
        raise SystemExit(STARTUP_FAILURE)
    logger.info("server gracefully stopped")


# PUBLIC_INTERFACE
def main(settings: Optional[Settings] = None) -> None:
    """Run the service with settings from the environment."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, service stopped")

