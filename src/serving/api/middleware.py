"""
API Middleware

Per-request logging. A request id (taken from ``X-Request-ID`` or generated)
is bound into the structlog context for the duration of the request and
echoed back along with the handling time.
"""

import time
import uuid
from typing import Callable, Iterable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log each request with its status and duration.

    Args:
        app: ASGI application
        quiet_paths: Paths logged at DEBUG instead of INFO (probes)
    """

    def __init__(self, app, quiet_paths: Iterable[str] = ("/health", "/health/ready")):
        super().__init__(app)
        self.quiet_paths = frozenset(quiet_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        started = time.perf_counter()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        if response.status_code >= 500:
            log = logger.warning
        elif request.url.path in self.quiet_paths:
            log = logger.debug
        else:
            log = logger.info
        log(
            "Request completed",
            status_code=response.status_code,
            duration_ms=duration_ms,
            query=request.url.query or None,
        )

        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
