"""
FastAPI application for the record lifecycle service.
"""

from __future__ import annotations

import importlib.metadata
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .db.base import init_database
from .errors import register_error_handlers
from .i18n import Translator
from .lifecycle.envelope import EnvelopeBuilder
from .logging_config import configure_logging
from .resources import RESOURCES
from .routes import build_router

logger = structlog.get_logger()

settings = get_settings()
configure_logging(settings)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("Starting record lifecycle service", environment=settings.environment)

    try:
        init_database()
    except Exception as e:
        logger.error("Failed to start application", error=str(e))
        raise

    yield

    logger.info("Shutdown complete")


app = FastAPI(
    title="Record Lifecycle",
    description="Create, update, delete and list records through one guarded lifecycle",
    version=importlib.metadata.version("record-lifecycle"),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

for resource in RESOURCES:
    app.include_router(build_router(resource))


@app.get("/")
def index() -> dict[str, Any]:
    """Service banner in the response envelope."""
    envelope = EnvelopeBuilder(Translator(settings.language))
    return envelope.success(
        [{"language": settings.language, "version": settings.service_version}],
        f"Welcome to {settings.app_name} {settings.service_version} API",
    )


@app.get("/healthz")
def healthz() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/version")
def version() -> dict[str, str]:
    """Return the version of the application."""
    return {"version": importlib.metadata.version("record-lifecycle")}
