"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures routers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryTenantRepository
from src.adapters.repository.postgres import PostgresTenantRepository, run_migrations
from src.api.routes import router as legacy_router
from src.api.v1 import router as v1_router
from src.config.settings import get_settings
from src.domain.rate_limit import RegistrationRateLimiter

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Self-service server registration for the modl panel",
    },
    {
        "name": "legacy",
        "description": "Pre-v1 paths kept for older signup pages",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the tenant store (PostgreSQL pool + migrations, or in-memory)
    - Creates the process-wide registration rate limiter
    - Closes the connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")

    pool: ConnectionPool | None = None
    if settings.tenant_store == "postgres":
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )
        logger.info("Running database migrations...")
        run_migrations(pool)
        app.state.repository = PostgresTenantRepository(pool)
    else:
        logger.warning("Using in-memory tenant store; registrations are lost on restart")
        app.state.repository = InMemoryTenantRepository()

    app.state.pool = pool
    app.state.rate_limiter = RegistrationRateLimiter(settings.rate_limit_window_seconds)

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="modl-signup",
    description="Self-service signup API for modl, the Minecraft server moderation panel",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.include_router(v1_router, prefix="/v1")
app.include_router(legacy_router, prefix="/api")


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and tenant store are healthy.
    Raises exception if database connection fails.
    """
    pool = getattr(request.app.state, "pool", None)
    if pool is not None:
        with pool.connection() as conn:
            conn.execute("SELECT 1")

    return {"status": "healthy"}
