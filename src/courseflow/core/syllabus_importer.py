"""Syllabus import orchestrator.

Responsibilities:
- Turn an uploaded document (or pasted text) into plaintext
- Ask the LLM for the structured outline
- Parse the outline and store the course in the ledger
- Optionally mirror the stored course into the secondary grade service
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from courseflow.config.app_config import ExtractionConfig
from courseflow.config.heuristics import ParserHeuristics
from courseflow.core.document_extractor import (
    DocumentExtractionError,
    UnsupportedDocumentError,
    extract_text,
)
from courseflow.core.grade_sync import GradeSyncError, GradeSyncService
from courseflow.core.response_parser import ParsedSyllabus, parse_syllabus_response
from courseflow.core.syllabus_extractor import ExtractionServiceError, extract_syllabus_info
from courseflow.db.ledger import GradeLedger
from courseflow.db.models import Course
from courseflow.llm.client import LLMClient

logger = structlog.get_logger(__name__)

TEXT_INPUT_NAME = "text-input.txt"


@dataclass
class ImportResult:
    """Result of a syllabus import."""

    success: bool
    message: str
    course: Course | None
    course_id: int | None
    assessment_count: int
    parsed: ParsedSyllabus
    raw_response: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "message": self.message,
            "courseId": self.course_id,
            "course": self.course.to_dict() if self.course else None,
            "assessmentCount": self.assessment_count,
            "parsedData": self.parsed.to_dict(),
            "extractedInfo": self.raw_response,
        }


class SyllabusImportError(Exception):
    """Base exception for syllabus import errors.

    ``message`` is safe to show to end users.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UnsupportedSyllabusError(SyllabusImportError):
    """The uploaded file type cannot be imported."""

    pass


class SyllabusUnreadableError(SyllabusImportError):
    """No usable text could be extracted from the document."""

    pass


class ExtractionFailedError(SyllabusImportError):
    """The LLM extraction step failed."""

    def __init__(self, message: str, rate_limited: bool = False):
        self.rate_limited = rate_limited
        super().__init__(message)


def import_syllabus_file(
    file_path: Path,
    ledger: GradeLedger,
    client: LLMClient,
    config: ExtractionConfig | None = None,
    heuristics: ParserHeuristics | None = None,
    sync: GradeSyncService | None = None,
) -> ImportResult:
    """Import a syllabus document into the ledger.

    Args:
        file_path: PDF or text file
        ledger: Target ledger
        client: LLM client used for extraction
        config: Extraction settings
        heuristics: Parser keyword tables (defaults when omitted)
        sync: Secondary grade service to mirror into, if any

    Raises:
        FileNotFoundError: If the file doesn't exist
        UnsupportedSyllabusError: If the file type is not supported
        SyllabusUnreadableError: If the document has no usable text
        ExtractionFailedError: If the LLM call fails
    """
    file_path = Path(file_path)
    logger.info("syllabus_importer.start", file=file_path.name)

    try:
        text = extract_text(file_path, config)
    except UnsupportedDocumentError as e:
        raise UnsupportedSyllabusError(str(e)) from e
    except DocumentExtractionError as e:
        logger.warning("syllabus_importer.unreadable", file=file_path.name, error=str(e))
        raise SyllabusUnreadableError(str(e)) from e

    return import_syllabus_text(
        text,
        ledger,
        client,
        source_name=file_path.name,
        heuristics=heuristics,
        sync=sync,
    )


def import_syllabus_text(
    text: str,
    ledger: GradeLedger,
    client: LLMClient,
    source_name: str = TEXT_INPUT_NAME,
    heuristics: ParserHeuristics | None = None,
    sync: GradeSyncService | None = None,
) -> ImportResult:
    """Import pasted syllabus text into the ledger.

    A course whose name already exists is not stored again; the result then
    has success=False and points at the existing course.

    Raises:
        ExtractionFailedError: If the LLM call fails
    """
    try:
        outline = extract_syllabus_info(text, client, source_name)
    except ExtractionServiceError as e:
        raise ExtractionFailedError(e.user_message, rate_limited=e.rate_limited) from e

    parsed = parse_syllabus_response(outline, heuristics)
    saved = ledger.save_syllabus(parsed)

    if not saved.success:
        logger.info(
            "syllabus_importer.duplicate",
            source=source_name,
            course_id=saved.course_id,
        )
        return ImportResult(
            success=False,
            message=saved.error or "Course already exists",
            course=saved.course,
            course_id=saved.course_id,
            assessment_count=len(saved.course.assessments) if saved.course else 0,
            parsed=parsed,
            raw_response=outline,
        )

    if sync is not None and saved.course is not None:
        _mirror(sync, saved.course)

    logger.info(
        "syllabus_importer.done",
        source=source_name,
        course_id=saved.course_id,
        assessments=saved.assessment_count,
    )
    return ImportResult(
        success=True,
        message=f"Course created with {saved.assessment_count} assessments",
        course=saved.course,
        course_id=saved.course_id,
        assessment_count=saved.assessment_count,
        parsed=parsed,
        raw_response=outline,
    )


def _mirror(sync: GradeSyncService, course: Course) -> None:
    """Mirror a stored course; failures are logged and leave the ledger as is."""
    try:
        # A new ledger course replaces any stale mirror left under its id
        sync.forget_course(course.id)
        sync.mirror_course(course)
    except GradeSyncError as e:
        logger.warning("syllabus_importer.sync_failed", course_id=course.id, error=str(e))
