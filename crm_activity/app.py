"""FastAPI application for the CRM activity service."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings
from .logging_setup import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level, structured=settings.log_json)
    # Auto-create tables for SQLite (local dev)
    if "sqlite" in settings.database_url:
        from .database import create_tables
        await create_tables()
    yield


app = FastAPI(title=settings.app_title, lifespan=lifespan)

# Import and register routers; the catch-all subject routes go last
from .routers import activities, health, subjects  # noqa: E402

app.include_router(health.router)
app.include_router(activities.router)
app.include_router(subjects.router)
