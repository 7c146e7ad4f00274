"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from psycopg_pool import ConnectionPool

from invito.adapters.broadcast.hub import BroadcastHub
from invito.adapters.repository.postgres import run_migrations
from invito.api.errors import register_exception_handlers
from invito.api.routes import router
from invito.config.settings import get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "users",
        "description": "Referral-aware user registration, user management and live updates",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool on startup
    - Runs migrations on startup
    - Creates the broadcast hub for live updates
    - Closes the hub, then the connection pool, on shutdown
    """
    settings = get_settings()
    logging.getLogger("invito").setLevel(settings.log_level.upper())

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    # Create connection pool with explicit sizing
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        open=True,
    )

    logger.info("Running database migrations...")
    run_migrations(pool)

    # Store pool and hub in app state for dependency injection
    app.state.pool = pool
    app.state.hub = BroadcastHub(capacity=settings.broadcast_capacity)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    app.state.hub.close()
    pool.close()
    logger.info("Database connection pool closed")


app = FastAPI(
    title="invito",
    description="Referral-aware user registration with live registration events",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

register_exception_handlers(app)
app.include_router(router, prefix="/api")
