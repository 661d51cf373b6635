"""Syllabus upload and text analysis endpoints."""

import shutil
import uuid
from pathlib import Path

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from starlette.concurrency import run_in_threadpool

from courseflow.config.app_config import AppConfig
from courseflow.config.heuristics import load_heuristics
from courseflow.core.calendar_export import safe_filename
from courseflow.core.grade_sync import GradeSyncService
from courseflow.core.syllabus_importer import (
    ImportResult,
    SyllabusImportError,
    UnsupportedSyllabusError,
    import_syllabus_file,
    import_syllabus_text,
)
from courseflow.db.ledger import GradeLedger
from courseflow.llm.client import LLMClient
from courseflow.web.dependencies import get_config, get_ledger, get_llm_client, get_sync
from courseflow.web.schemas import CourseDetailResponse, ImportResponse, TextAnalysisRequest

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["upload"])

ALLOWED_UPLOAD_EXTENSIONS = {".pdf", ".txt"}


def _to_response(result: ImportResult, ledger: GradeLedger) -> ImportResponse:
    course = None
    if result.course is not None:
        course = CourseDetailResponse.from_course(
            result.course, ledger.calculate_grade_summary(result.course.id)
        )
    return ImportResponse(
        success=result.success,
        message=result.message,
        course_id=result.course_id,
        course=course,
        assessment_count=result.assessment_count,
        parsed_data=result.parsed.to_dict(),
        extracted_info=result.raw_response,
    )


def _import_error(error: SyllabusImportError) -> HTTPException:
    if isinstance(error, UnsupportedSyllabusError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=error.message,
    )


@router.post("/upload", response_model=ImportResponse)
async def upload_syllabus(
    syllabus: UploadFile | None = File(None),
    ledger: GradeLedger = Depends(get_ledger),
    config: AppConfig = Depends(get_config),
    client: LLMClient = Depends(get_llm_client),
    sync: GradeSyncService | None = Depends(get_sync),
) -> ImportResponse:
    """Import a syllabus PDF or text file.

    The upload is stored under the uploads directory while it is processed
    and removed afterwards.
    """
    if syllabus is None or not syllabus.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded",
        )

    original = Path(syllabus.filename)
    suffix = original.suffix.lower()
    if suffix not in ALLOWED_UPLOAD_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type '{suffix or original.name}'. Upload a PDF or a .txt file.",
        )

    uploads_dir = config.ledger.uploads_dir
    uploads_dir.mkdir(parents=True, exist_ok=True)
    stored = uploads_dir / f"{uuid.uuid4().hex[:8]}-{safe_filename(original.stem)}{suffix}"

    with open(stored, "wb") as f:
        shutil.copyfileobj(syllabus.file, f)

    logger.info("upload.received", file=original.name, stored=stored.name)

    try:
        result = await run_in_threadpool(
            import_syllabus_file,
            stored,
            ledger,
            client,
            config.extraction,
            load_heuristics(),
            sync,
        )
    except SyllabusImportError as e:
        logger.warning("upload.failed", file=original.name, error=e.message)
        raise _import_error(e) from e
    finally:
        stored.unlink(missing_ok=True)

    return _to_response(result, ledger)


@router.post("/analyze-text", response_model=ImportResponse)
async def analyze_text(
    body: TextAnalysisRequest,
    ledger: GradeLedger = Depends(get_ledger),
    client: LLMClient = Depends(get_llm_client),
    sync: GradeSyncService | None = Depends(get_sync),
) -> ImportResponse:
    """Import pasted syllabus text (fallback when a document can't be read)."""
    if not body.text.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No text provided",
        )

    try:
        result = await run_in_threadpool(
            import_syllabus_text,
            body.text,
            ledger,
            client,
            heuristics=load_heuristics(),
            sync=sync,
        )
    except SyllabusImportError as e:
        logger.warning("analyze_text.failed", error=e.message)
        raise _import_error(e) from e

    return _to_response(result, ledger)
