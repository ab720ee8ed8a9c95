from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool

from .errors import StoreError, register_error_handlers
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware
from .repositories import Repository, build_repository, get_repository
from .routers import todos as todos_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

openapi_tags = [
    {"name": "health", "description": "Landing page and store health."},
    {"name": "todos", "description": "CRUD operations for Todo items."},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Open the store before serving and close it once the server has drained.

    A store that cannot be reached within the connect timeout aborts startup.
    """
    settings: Settings = app.state.settings
    repo: Optional[Repository] = app.state.repository
    if repo is None:
        try:
            repo = await run_in_threadpool(build_repository, settings)
        except StoreError as exc:
            logger.critical("Failed to open the %s store: %s", settings.persistence_backend, exc)
            raise
        app.state.repository = repo

    try:
        yield
    finally:
        logger.info("Closing the %s store", repo.name)
        await run_in_threadpool(repo.close)


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, repository: Optional[Repository] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Service settings; read from the environment when omitted.
        repository: An already opened repository to serve from. When omitted the
            lifespan builds one from ``settings`` at startup.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Todo Service",
        description="CRUD over a single collection of todo items stored in MongoDB.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.repository = repository

    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

    app.add_middleware(RequestLoggingMiddleware)
    register_error_handlers(app)

    # PUBLIC_INTERFACE
    @app.get("/", response_class=HTMLResponse, summary="Landing Page", tags=["health"])
    def home(request: Request) -> HTMLResponse:
        """Render the static landing page."""
        return templates.TemplateResponse(request, "home.html", {"title": app.title})

    # PUBLIC_INTERFACE
    @app.get("/health", summary="Health Check", tags=["health"])
    def health_check(repo: Repository = Depends(get_repository)) -> dict:
        """
        Health check endpoint. Pings the store; 503 when it is unreachable.
        """
        repo.ping()
        return {"message": "Healthy", "backend": repo.name}

    app.include_router(todos_router.router)
    return app
