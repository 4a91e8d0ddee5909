"""Tracker API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Origin admission runs on every request, built once from settings into an
      immutable OriginPolicy
    - Global error handlers map IngestionError → "KO" and TrackerError → JSON
    - Database pool and geolocation client created on startup, closed on
      shutdown, via the lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tracker.api.error_handlers import register_error_handlers
from tracker.api.middleware import OriginAdmissionMiddleware
from tracker.api.routes import events, health
from tracker.config import Settings, get_settings
from tracker.core.origin_policy import origin_policy_from_settings
from tracker.infrastructure.database import close_db, init_db
from tracker.infrastructure.ipinfo_client import close_geolocator, init_geolocator
from tracker.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        schema=settings.db_schema,
    )
    init_geolocator(
        token=settings.ipinfo_token,
        base_url=settings.ipinfo_base_url,
        timeout_seconds=settings.geolocation_timeout_seconds,
    )
    logger.info(f"Tracker API started (env={settings.env})")
    try:
        yield
    finally:
        await close_geolocator()
        await close_db()
        logger.info("Tracker API shutting down")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Tracker API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        OriginAdmissionMiddleware, policy=origin_policy_from_settings(settings),
    )

    app.include_router(health.router)
    app.include_router(events.router)

    register_error_handlers(app)
    return app


app = create_app()
