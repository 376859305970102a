"""Merzah Events API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map MerzahError → structured JSON responses
    - Database initialized and rotation scheduler started via lifespan
    - Exactly one rotation job per process; ticks never overlap (max_instances=1)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from merzah.api.error_handlers import register_error_handlers
from merzah.api.routes import events, health, rotation
from merzah.config import get_settings
from merzah.infrastructure.database import init_db
from merzah.infrastructure.event_store import SqlAlchemyEventStore
from merzah.infrastructure.observability import setup_logging
from merzah.infrastructure.scheduler import IntervalTickScheduler
from merzah.services.rotation_worker import RotationWorker, schedule_rotation

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )

    scheduler: IntervalTickScheduler | None = None
    if settings.rotation_enabled:
        scheduler = IntervalTickScheduler()
        schedule_rotation(
            scheduler,
            RotationWorker(SqlAlchemyEventStore(db)),
            settings.rotation_interval_seconds,
        )
        scheduler.start()

    logger.info("Merzah API started")
    yield
    if scheduler:
        scheduler.shutdown()
    await db.dispose()
    logger.info("Merzah API shutting down")


app = FastAPI(
    title="Merzah Events API", version="0.1.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(events.router)
app.include_router(rotation.router)

register_error_handlers(app)
