"""
FastAPI Application Factory

Creates and configures the reports API application.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from pos_analytics.config import get_settings
from pos_analytics.reports.schemas import ErrorResponse
from pos_analytics.serving.api.middleware import (
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from pos_analytics.serving.api.routes import health_router, reports_router

logger = structlog.get_logger(__name__)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed query parameters answer in the report envelope."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:]) or 'request'}: {error['msg']}"
        for error in exc.errors()
    )
    logger.info("Request validation failed", path=request.url.path, errors=problems)
    body = ErrorResponse(error=f"Invalid request parameters: {problems}")
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Failures outside the report handlers, e.g. no database session."""
    logger.error(
        "Unhandled error",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    body = ErrorResponse(error="Internal server error")
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


def create_api_app(lifespan=None, rate_limit_store=None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        lifespan: Startup/shutdown context manager
        rate_limit_store: Counter store override, built from settings when omitted

    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()

    app = FastAPI(
        title="POS Sales & Profitability API",
        description="Read-only sales, profit margin and ranking reports",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    rate_limit_options = {
        "max_requests": settings.security.rate_limit_requests,
        "window_seconds": settings.security.rate_limit_window_seconds,
    }
    if rate_limit_store is not None:
        rate_limit_options["store"] = rate_limit_store
    app.add_middleware(RateLimitMiddleware, **rate_limit_options)

    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(reports_router, prefix="/api/v1/reports", tags=["Reports"])

    @app.get("/api/v1/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "environment": settings.app_env,
            "documentation": "/docs" if settings.is_development else None,
        }

    return app
