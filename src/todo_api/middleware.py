"""
Request logging middleware.

Logs method, path, status and latency for every request. It only observes:
the response is passed through untouched.
"""
from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

access_logger = logging.getLogger("todo_api.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Write one access-log line per request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            access_logger.info(
                '"%s %s" %d %.2fms',
                request.method,
                request.url.path,
                status_code,
                elapsed_ms,
            )
