"""
FastAPI Production Application

Main entry point for the POS Sales & Profitability API.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from pos_analytics.config import get_settings
from pos_analytics.config.logging import configure_logging
from pos_analytics.database.connection import close_database, init_database
from pos_analytics.serving.api import create_api_app
from pos_analytics.serving.counters import close_redis, init_redis

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()
    logger.info("Starting POS Sales & Profitability API", environment=settings.app_env)

    await init_database()
    if settings.security.rate_limit_backend == "redis":
        await init_redis()

    yield

    logger.info("Shutting down...")
    await close_database()
    await close_redis()


app = create_api_app(lifespan=lifespan)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
