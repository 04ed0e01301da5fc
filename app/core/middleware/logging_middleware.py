"""Logging middleware for FastAPI.

Assigns a per-request UUID, binds it (and the resolved user, when known) into the
logging contextvars, and measures latency. Runs early in the stack so routers and
services inherit the request context in their log lines.
"""

import time
import uuid
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.logging_config import (
    bind_request_context,
    log_request,
    reset_request_context,
)
from fastapi import Request, Response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests/responses with timing and a correlation id."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Honour an upstream correlation id when the proxy supplies one
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        tokens = bind_request_context(request_id=request_id)

        start_time = time.time()

        response: Optional[Response] = None
        try:
            response = await call_next(request)
        finally:
            duration_ms = (time.time() - start_time) * 1000

            user = getattr(request.state, "user", None)
            log_request(
                method=request.method,
                endpoint=request.url.path,
                status_code=response.status_code if response else 500,
                duration_ms=duration_ms,
                user_id=getattr(user, "id", None),
                request_id=request_id,
            )

            reset_request_context(tokens)

        response.headers["X-Request-ID"] = request_id

        return response
