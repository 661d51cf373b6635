"""FastAPI dependencies: shared ledger, config, LLM client and sync service."""

from __future__ import annotations

import structlog
from fastapi import HTTPException, Request, status

from courseflow.config.app_config import AppConfig
from courseflow.core.grade_sync import GradeSyncError, GradeSyncService
from courseflow.db.ledger import GradeLedger
from courseflow.llm.client import LLMClient, LLMConfig

logger = structlog.get_logger(__name__)


def get_ledger(request: Request) -> GradeLedger:
    """The ledger created with the app."""
    return request.app.state.ledger


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_sync(request: Request) -> GradeSyncService | None:
    """Secondary grade service, or None when mirroring is disabled."""
    return request.app.state.sync


def require_sync(request: Request) -> GradeSyncService:
    """Secondary grade service; 503 when mirroring is disabled."""
    sync = request.app.state.sync
    if sync is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Grade sync is disabled",
        )
    return sync


def get_llm_client(request: Request) -> LLMClient:
    """LLM client for the configured default provider."""
    config: AppConfig = request.app.state.config
    return LLMClient(LLMConfig.from_app_config(app_config=config))


def refresh_mirror(
    sync: GradeSyncService | None, ledger: GradeLedger, course_id: int
) -> None:
    """Push the current state of a ledger course to the sync service.

    Failures are logged; the ledger change stands.
    """
    if sync is None:
        return
    try:
        sync.refresh(course_id, ledger.get_course_by_id(course_id))
    except GradeSyncError as e:
        logger.warning("api.sync_failed", course_id=course_id, error=str(e))
