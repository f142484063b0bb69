"""
Custom middleware for rate limiting and request logging
"""

import logging
import math
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Paths never counted against the rate limit
UNLIMITED_PATHS = {"/", "/docs", "/openapi.json", "/api/v1/", "/api/v1/health"}


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client sliding window limit of ``calls`` requests per ``period`` seconds.

    Clients idle for a whole window are swept out at most once per period, so
    the tracking table stays bounded by the clients active in the last window.
    """

    def __init__(
        self,
        app,
        calls: int = 60,
        period: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(app)
        self.calls = calls
        self.period = period
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()

    @property
    def tracked_clients(self) -> int:
        return len(self._hits)

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self.period:
            return
        cutoff = now - self.period
        idle = [ip for ip, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for ip in idle:
            del self._hits[ip]
        self._last_sweep = now
        if idle:
            logger.debug("Dropped %d idle rate limit entries", len(idle))

    def _retry_after(self, client_ip: str, now: float) -> Optional[float]:
        """Record a hit, or return seconds until the window frees a slot."""
        hits = self._hits.setdefault(client_ip, deque())
        cutoff = now - self.period
        while hits and hits[0] <= cutoff:
            hits.popleft()
        if len(hits) >= self.calls:
            return hits[0] + self.period - now
        hits.append(now)
        return None

    async def dispatch(self, request: Request, call_next):
        if request.url.path in UNLIMITED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client is not None else "unknown"
        now = self.clock()
        self._sweep(now)

        wait = self._retry_after(client_ip, now)
        if wait is not None:
            logger.warning("Rate limit exceeded for IP: %s", client_ip)
            return JSONResponse(
                status_code=429,
                headers={"Retry-After": str(max(1, math.ceil(wait)))},
                content={
                    "detail": {
                        "error": "Rate limit exceeded",
                        "details": f"Maximum {self.calls} requests per {self.period} seconds",
                    }
                },
            )
        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its status and latency"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        client_host = request.client.host if request.client is not None else "unknown"
        logger.info(
            "Request: %s %s from %s", request.method, request.url.path, client_host
        )

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            "Response: %d for %s %s in %.3fs",
            response.status_code,
            request.method,
            request.url.path,
            process_time,
        )
        return response
