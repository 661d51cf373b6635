"""FastAPI application factory.

Main entry point for the CourseFlow Web API.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from courseflow import __version__
from courseflow.config.app_config import AppConfig, load_app_config
from courseflow.core.grade_sync import GradeSyncService
from courseflow.db.ledger import GradeLedger
from courseflow.db.store import JsonFileStore
from courseflow.web.routes import (
    assessments_router,
    calendar_router,
    courses_router,
    health_router,
    sync_router,
    upload_router,
)

logger = structlog.get_logger(__name__)


def dev_cleanup(
    ledger: GradeLedger,
    uploads_dir: Path,
    sync: GradeSyncService | None = None,
) -> int:
    """Empty the ledger (and its mirror) and delete leftover uploads.

    Returns:
        Number of upload files removed.
    """
    ledger.clear_all_courses()
    if sync is not None:
        sync.clear()

    removed = 0
    if uploads_dir.exists():
        for path in uploads_dir.iterdir():
            if path.is_file():
                path.unlink()
                removed += 1

    logger.info("api.dev_cleanup", uploads_removed=removed)
    return removed


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    config: AppConfig = app.state.config
    ledger: GradeLedger = app.state.ledger

    if config.ledger.clear_data_on_start:
        dev_cleanup(ledger, config.ledger.uploads_dir, app.state.sync)

    logger.info(
        "api.startup",
        courses=len(ledger.courses),
        assessments=len(ledger.assessments),
        provider=config.extraction.default_provider,
        sync_enabled=config.sync.enabled,
    )
    yield


def create_app(
    ledger: GradeLedger | None = None,
    config: AppConfig | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        ledger: Ledger to serve (built from config.ledger.database_path if omitted)
        config: Application config (loaded from YAML if omitted)

    Returns:
        Configured FastAPI app instance
    """
    config = config or load_app_config()
    if ledger is None:
        ledger = GradeLedger(JsonFileStore(config.ledger.database_path))

    app = FastAPI(
        title="CourseFlow API",
        description="Syllabus import and grade tracking",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.ledger = ledger
    app.state.sync = GradeSyncService() if config.sync.enabled else None

    # CORS middleware for web clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(courses_router)
    app.include_router(assessments_router)
    app.include_router(upload_router)
    app.include_router(calendar_router)
    app.include_router(sync_router)

    return app
