"""
Domain errors and their HTTP mapping.

Every failure leaves the service as the same envelope,
``{"message": ..., "error": ...}``, and only the status code tells the
failure kinds apart:

- 400: malformed body, blank title or malformed id
- 404: a well-formed id that matches no record
- 503: the store failed, timed out or returned something undecodable
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class TodoServiceError(Exception):
    """Base class for errors rendered as an error envelope."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, error: str = "bad request") -> None:
        super().__init__(f"{message}: {error}")
        self.message = message
        self.error = error


class InvalidRequestError(TodoServiceError):
    """The request was rejected before reaching the store."""

    status_code = status.HTTP_400_BAD_REQUEST


class TodoNotFoundError(TodoServiceError):
    """No record matched the requested id."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str, error: str = "todo not found") -> None:
        super().__init__(message, error)


class StoreError(TodoServiceError):
    """The document store failed or timed out."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


# PUBLIC_INTERFACE
def error_envelope(status_code: int, message: str, error: str) -> JSONResponse:
    """Build the JSON error envelope shared by every failing endpoint."""
    return JSONResponse(status_code=status_code, content={"message": message, "error": error})


def _describe_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """
    Flatten pydantic error details into a single line, e.g.
    "body.title: Value error, title is required".
    """
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "bad request"


# PUBLIC_INTERFACE
def register_error_handlers(app: FastAPI) -> None:
    """Register the envelope-producing exception handlers on the application."""

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        detail = _describe_validation_errors(list(exc.errors()))
        logger.warning("Invalid request to %s %s: %s", request.method, request.url.path, detail)
        return error_envelope(status.HTTP_400_BAD_REQUEST, "invalid request", detail)

    @app.exception_handler(TodoServiceError)
    async def handle_service_error(request: Request, exc: TodoServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        else:
            logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
        return error_envelope(exc.status_code, exc.message, exc.error)
