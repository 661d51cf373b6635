"""Secondary in-memory grade service.

A standalone course/assessment store with UUID identifiers and its own
grade summary. Courses stored in the ledger can be mirrored into it; the
ledger stays the source of truth and is never rolled back when mirroring
fails.

Its summary differs from the ledger's projection: missing weights count as
0, and the required average spreads the gap to the goal over the remaining
weight, clamped at 0:

    required_avg = (goal * total_weight - graded_score) / (total_weight - graded_weight)
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from typing import Any

import structlog

from courseflow.db.models import Course

logger = structlog.get_logger(__name__)

DEFAULT_COLOR = "#cccccc"

_UNSET: Any = object()


class GradeSyncError(Exception):
    """Error in the secondary grade service."""

    pass


@dataclass
class SyncAssessment:
    """Assessment as held by the secondary service."""

    id: str
    title: str
    type: str
    due_date: str | None = None
    weight: float | None = None
    grade: float | None = None
    source_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "dueDate": self.due_date,
            "weight": self.weight,
            "grade": self.grade,
            "sourceId": self.source_id,
        }


@dataclass
class SyncCourse:
    """Course as held by the secondary service."""

    id: str
    name: str
    color: str = DEFAULT_COLOR
    goal_grade: float | None = None
    assessments: list[SyncAssessment] = field(default_factory=list)
    source_id: int | None = None

    def get_assessment(self, assessment_id: str) -> SyncAssessment | None:
        for assessment in self.assessments:
            if assessment.id == assessment_id:
                return assessment
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "goalGrade": self.goal_grade,
            "assessments": [a.to_dict() for a in self.assessments],
            "sourceId": self.source_id,
        }


@dataclass
class SyncGradeSummary:
    """Grade summary computed by the secondary service."""

    current_grade: float | None
    required_avg: float | None
    graded_weight: float
    total_weight: float
    graded: list[SyncAssessment]
    ungraded: list[SyncAssessment]

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentGrade": self.current_grade,
            "requiredAvg": self.required_avg,
            "gradedWeight": self.graded_weight,
            "totalWeight": self.total_weight,
            "graded": [a.to_dict() for a in self.graded],
            "ungraded": [a.to_dict() for a in self.ungraded],
        }


def _new_id() -> str:
    return str(uuid.uuid4())


class GradeSyncService:
    """In-memory course store with UUID ids."""

    def __init__(self) -> None:
        self.courses: list[SyncCourse] = []

    # -------------------------------------------------------------------------
    # Courses
    # -------------------------------------------------------------------------

    def create_course(
        self,
        name: str,
        color: str | None = None,
        goal_grade: float | None = None,
        assessments: list[dict[str, Any]] | None = None,
    ) -> SyncCourse:
        if not name:
            raise GradeSyncError("Course name is required")
        course = SyncCourse(
            id=_new_id(),
            name=name,
            color=color or DEFAULT_COLOR,
            goal_grade=goal_grade,
        )
        course.assessments = [self._build_assessment(a) for a in assessments or []]
        self.courses.append(course)
        logger.debug("grade_sync.course_created", course_id=course.id, name=name)
        return course

    def list_courses(self) -> list[SyncCourse]:
        return list(self.courses)

    def get_course(self, course_id: str) -> SyncCourse | None:
        for course in self.courses:
            if course.id == course_id:
                return course
        return None

    def find_by_source(self, source_id: int) -> SyncCourse | None:
        """Find the mirror of a ledger course."""
        for course in self.courses:
            if course.source_id == source_id:
                return course
        return None

    def update_course(
        self,
        course_id: str,
        name: str | None = None,
        color: str | None = None,
        goal_grade: float | None = _UNSET,
    ) -> SyncCourse | None:
        """Update a course. ``goal_grade=None`` clears the goal."""
        course = self.get_course(course_id)
        if course is None:
            return None
        if name:
            course.name = name
        if color:
            course.color = color
        if goal_grade is not _UNSET:
            course.goal_grade = goal_grade
        return course

    def delete_course(self, course_id: str) -> bool:
        course = self.get_course(course_id)
        if course is None:
            return False
        self.courses.remove(course)
        return True

    # -------------------------------------------------------------------------
    # Assessments
    # -------------------------------------------------------------------------

    @staticmethod
    def _build_assessment(data: dict[str, Any]) -> SyncAssessment:
        return SyncAssessment(
            id=_new_id(),
            title=data.get("title", ""),
            type=data.get("type", "assignment"),
            due_date=data.get("dueDate"),
            weight=data.get("weight"),
            grade=data.get("grade"),
        )

    def add_assessments(
        self,
        course_id: str,
        items: dict[str, Any] | list[dict[str, Any]],
    ) -> list[SyncAssessment] | None:
        """Add one or several assessments (camelCase dicts) to a course."""
        course = self.get_course(course_id)
        if course is None:
            return None
        if isinstance(items, dict):
            items = [items]
        created = [self._build_assessment(a) for a in items]
        course.assessments.extend(created)
        return created

    def update_assessment(
        self,
        course_id: str,
        assessment_id: str,
        title: str | None = None,
        type: str | None = None,
        due_date: str | None = None,
        weight: float | None = None,
    ) -> SyncAssessment | None:
        course = self.get_course(course_id)
        if course is None:
            return None
        assessment = course.get_assessment(assessment_id)
        if assessment is None:
            return None
        if title:
            assessment.title = title
        if type:
            assessment.type = type
        if due_date:
            assessment.due_date = due_date
        if weight is not None:
            assessment.weight = weight
        return assessment

    def delete_assessment(self, course_id: str, assessment_id: str) -> bool:
        course = self.get_course(course_id)
        if course is None:
            return False
        assessment = course.get_assessment(assessment_id)
        if assessment is None:
            return False
        course.assessments.remove(assessment)
        return True

    def set_grade(
        self, course_id: str, assessment_id: str, grade: float | None
    ) -> SyncAssessment | None:
        """Record a grade.

        Raises:
            GradeSyncError: If grade is None or not finite
        """
        if grade is None:
            raise GradeSyncError("Grade required")
        if not math.isfinite(grade):
            raise GradeSyncError("Grade must be a finite number")
        course = self.get_course(course_id)
        if course is None:
            return None
        assessment = course.get_assessment(assessment_id)
        if assessment is None:
            return None
        assessment.grade = grade
        return assessment

    # -------------------------------------------------------------------------
    # Summary and mirroring
    # -------------------------------------------------------------------------

    def grade_summary(self, course_id: str) -> SyncGradeSummary | None:
        course = self.get_course(course_id)
        if course is None:
            return None

        graded = [a for a in course.assessments if a.grade is not None]
        ungraded = [a for a in course.assessments if a.grade is None]
        graded_weight = sum(a.weight or 0 for a in graded)
        graded_score = sum(a.grade * (a.weight or 0) for a in graded)
        total_weight = sum(a.weight or 0 for a in course.assessments)

        current_grade = graded_score / graded_weight if graded_weight > 0 else None

        required_avg = None
        remaining = total_weight - graded_weight
        if course.goal_grade is not None and ungraded and remaining > 0:
            needed = (course.goal_grade * total_weight - graded_score) / remaining
            required_avg = max(needed, 0)

        return SyncGradeSummary(
            current_grade=current_grade,
            required_avg=required_avg,
            graded_weight=graded_weight,
            total_weight=total_weight,
            graded=graded,
            ungraded=ungraded,
        )

    def clear(self) -> None:
        """Drop every course."""
        self.courses = []

    # -------------------------------------------------------------------------
    # Mirroring ledger courses
    # -------------------------------------------------------------------------

    @staticmethod
    def _mirror_assessments(course: Course) -> list[SyncAssessment]:
        mirrored = []
        for source in course.assessments:
            assessment = GradeSyncService._build_assessment(source.to_dict())
            assessment.source_id = source.id
            mirrored.append(assessment)
        return mirrored

    def mirror_course(self, course: Course) -> SyncCourse:
        """Copy a ledger course (and its assessments) into this service.

        Raises:
            GradeSyncError: If the ledger course is already mirrored
        """
        if self.find_by_source(course.id) is not None:
            raise GradeSyncError(f"Course {course.id} is already mirrored")

        mirrored = self.create_course(
            name=course.name,
            color=course.color,
            goal_grade=course.goal_grade,
        )
        mirrored.assessments = self._mirror_assessments(course)
        mirrored.source_id = course.id
        logger.info(
            "grade_sync.course_mirrored",
            source_id=course.id,
            course_id=mirrored.id,
            assessments=len(mirrored.assessments),
        )
        return mirrored

    def forget_course(self, source_id: int) -> bool:
        """Remove the mirror of a ledger course, if there is one."""
        mirrored = self.find_by_source(source_id)
        if mirrored is None:
            return False
        self.courses.remove(mirrored)
        logger.info("grade_sync.course_forgotten", source_id=source_id, course_id=mirrored.id)
        return True

    def sync_course(self, course: Course) -> SyncCourse:
        """Bring the mirror of a ledger course up to date.

        The mirror keeps its UUID and the UUIDs of assessments that still
        exist in the ledger. A course without a mirror is mirrored.
        """
        mirrored = self.find_by_source(course.id)
        if mirrored is None:
            return self.mirror_course(course)

        known = {a.source_id: a.id for a in mirrored.assessments if a.source_id is not None}
        assessments = self._mirror_assessments(course)
        for assessment in assessments:
            assessment.id = known.get(assessment.source_id, assessment.id)

        mirrored.name = course.name
        mirrored.color = course.color
        mirrored.goal_grade = course.goal_grade
        mirrored.assessments = assessments
        logger.debug("grade_sync.course_synced", source_id=course.id, course_id=mirrored.id)
        return mirrored

    def refresh(self, source_id: int, course: Course | None) -> None:
        """Apply a ledger change to the mirror.

        ``course`` is the ledger course after the change, or None when it
        was deleted.
        """
        if course is None:
            self.forget_course(source_id)
        else:
            self.sync_course(course)
