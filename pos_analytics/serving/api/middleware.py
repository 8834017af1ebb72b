"""
API Middleware

- Request logging
- Rate limiting
- Security headers
"""

import time
from typing import Callable, Optional

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from pos_analytics.config import get_settings
from pos_analytics.config.logging import bind_request_context, clear_request_context
from pos_analytics.serving.counters import CounterStore, build_counter_store

logger = structlog.get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests with timing information, tagged with request and tenant ids"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get("X-Request-ID", str(time.time_ns()))
        tenant_id = request.headers.get("X-Tenant-ID") or get_settings().reports.default_tenant

        bind_request_context(request_id, tenant_id)
        try:
            logger.info(
                "Request started",
                method=request.method,
                path=request.url.path,
                client=request.client.host if request.client else None,
            )

            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
        finally:
            clear_request_context()

        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        response.headers["X-Request-ID"] = request_id
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-client rate limiter.

    Counting is delegated to a ``CounterStore``; by default the store is
    built from settings on first use (in-memory, or Redis when configured).
    """

    def __init__(
        self,
        app,
        max_requests: int = 100,
        window_seconds: int = 60,
        store: Optional[CounterStore] = None,
        store_factory: Callable[[], CounterStore] = build_counter_store,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._store = store
        self._store_factory = store_factory

    @property
    def store(self) -> CounterStore:
        if self._store is None:
            self._store = self._store_factory()
        return self._store

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        client_id = request.client.host if request.client else "unknown"

        count = await self.store.hit(client_id, self.window_seconds, self.max_requests)
        if count > self.max_requests:
            logger.warning(
                "Rate limit exceeded",
                client=client_id,
                requests=count,
            )
            return Response(
                content='{"success": false, "error": "Rate limit exceeded"}',
                status_code=429,
                media_type="application/json",
                headers={
                    "Retry-After": str(self.window_seconds),
                    "X-RateLimit-Limit": str(self.max_requests),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(max(self.max_requests - count, 0))
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response
