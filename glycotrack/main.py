"""GlycoTrack FastAPI Application."""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from glycotrack.config import settings, validate_secret_key
from glycotrack.core.errors import register_exception_handlers
from glycotrack.database import close_database, init_database
from glycotrack.logging_config import get_logger, setup_logging
from glycotrack.middleware import CorrelationIdMiddleware
from glycotrack.routers import (
    alerts,
    auth,
    backup,
    glucose,
    health,
    insulin,
    reports,
    users,
)
from glycotrack.routers import settings as settings_router

setup_logging(
    log_format=settings.log_format,
    log_level=settings.log_level,
    service_name=settings.service_name,
)
logger = get_logger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Schema changes are applied out of band with `alembic upgrade head`
    validate_secret_key()
    init_database()
    logger.info("GlycoTrack API started")

    yield

    logger.info("Shutting down GlycoTrack API...")
    await close_database()
    logger.info("GlycoTrack API shutdown complete")


app = FastAPI(
    title="GlycoTrack API",
    description="Glucose and insulin tracking with alerts, reports and backups",
    version=API_VERSION,
    lifespan=lifespan,
)

# Middleware (order matters: first added = last executed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)

register_exception_handlers(app)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(glucose.router)
app.include_router(insulin.router)
app.include_router(reports.router)
app.include_router(alerts.router)
app.include_router(settings_router.router)
app.include_router(users.router)
app.include_router(backup.router)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint."""
    return {
        "name": "GlycoTrack API",
        "version": API_VERSION,
        "docs": "/docs",
    }
