"""
Favorite Places AI Backend - AI Route Rate Limiting
====================================================

What:  Per-IP sliding window limit on the /ai/ routes (default: 100 requests
       per 15 minutes). Every AI call costs model quota.
How:   Keeps the timestamps of each IP's recent requests in memory; drops
       those older than the window; rejects with 429 at the limit.
Scope: Only paths under /ai/. Health and docs are never limited.

This limiter lives in process memory, so each worker counts separately.
It sits in front of the orchestration layer and is not shared with it.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from places_ai.config import settings

logger = logging.getLogger(__name__)

LIMITED_PREFIX = "/ai/"
# Sweep idle IPs after this many recorded requests
CLEANUP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
    ):
        super().__init__(app)
        # Explicit arguments win over settings (tests build small limiters)
        self.max_requests = max_requests or settings.rate_limit_max_requests
        self.window_seconds = window_seconds or settings.rate_limit_window_seconds
        # IP → timestamps of recorded requests, oldest first
        self._requests: Dict[str, List[float]] = defaultdict(list)
        # Recorded (not rejected) requests, drives the periodic sweep
        self._recorded = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Only AI routes spend model quota; health and docs pass straight through
        if not request.url.path.startswith(LIMITED_PREFIX):
            return await call_next(request)

        # Behind a proxy this is the proxy's address unless uvicorn runs with
        # --proxy-headers
        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - self.window_seconds

        # ── Sliding window: drop timestamps older than the window ─────────
        recent = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = recent

        # ── Check limit ───────────────────────────────────────────────────
        if len(recent) >= self.max_requests:
            # Seconds until the oldest request leaves the window
            retry_after = int(recent[0] + self.window_seconds - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(recent),
                self.window_seconds,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": "Too many requests from this IP, please try again later.",
                    "details": {"retry_after": retry_after},
                },
                headers={"Retry-After": str(retry_after)},
            )

        # ── Record this request ───────────────────────────────────────────
        # Rejected requests are not recorded, so a client hammering the
        # limit does not extend its own lockout
        recent.append(now)
        self._recorded += 1

        # ── Periodic sweep of idle IPs ────────────────────────────────────
        if self._recorded % CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Drops IPs whose newest recorded request has left the window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
