"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures routes, the health check, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryRegistrationStore
from src.adapters.repository.postgres import PostgresRegistrationStore, run_migrations
from src.api.routes import router
from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "registration",
        "description": "ApizRace marathon registration - identity check, OTP and "
        "confirmation emails, registration submission and postal lookup",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the registration store on startup
    - For PostgreSQL: opens the connection pool and runs migrations
    - Closes the connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")

    pool = None
    if settings.store_backend == "memory":
        logger.info("Using in-memory registration store")
        app.state.store = InMemoryRegistrationStore()
    else:
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)

        app.state.pool = pool
        app.state.store = PostgresRegistrationStore(pool)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="apizrace-registration",
    description="ApizRace marathon registration API - two-step form with email OTP verification",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.include_router(router)


@app.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint with store validation.

    Returns 200 OK if application and store are healthy, 503 otherwise.
    """
    if not request.app.state.store.probe():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy"},
        )
    return {"status": "healthy"}
