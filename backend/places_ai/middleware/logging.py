"""
Favorite Places AI Backend - Request Logging Middleware
========================================================

What:  One access log line per request: method, path, status, duration,
       request ID and client IP.
How:   Level follows the status class (5xx ERROR, 4xx WARNING, else INFO).
       Request bodies are never logged: notes and queries are personal data.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from places_ai.middleware.request_id import request_id_var

logger = logging.getLogger("places_ai.access")

# Probe endpoints, polled every few seconds
QUIET_PATHS = {"/", "/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Typical durations:
        - GET /health: 1-5ms
        - POST /ai/*: 1000-6000ms (dominated by the Gemini call)
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Health probes would drown the access log
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        # perf_counter: monotonic, unaffected by wall-clock adjustments
        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        # Set by RequestIDMiddleware, which wraps this one
        rid = request_id_var.get("")

        response = await call_next(request)

        # ── Level follows the status class ────────────────────────────────
        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        # extra= fields let structured handlers index the line without parsing
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
