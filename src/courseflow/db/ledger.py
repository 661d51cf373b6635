"""Grade ledger: courses, assessments and grade projections.

Responsibilities:
- Hold courses and the flat global assessment list in memory
- Write the whole document through the injected LedgerStore after each mutation
- Store parsed syllabi as new courses (duplicate names are refused)
- Compute grade summaries for a course

Every course's ``assessments`` list and the global ``assessments`` list
share the same Assessment objects, keyed by (course_id, id). Mutations go
through a re-entrant lock so a threaded server cannot interleave id
allocation.
"""

from __future__ import annotations

import math
import random
import threading
from dataclasses import dataclass
from typing import Any

import structlog

from courseflow.core.colors import fix_duplicate_colors, generate_random_color
from courseflow.core.grades import GradeSummary, calculate_grade_summary
from courseflow.core.response_parser import AssessmentType, ParsedSyllabus
from courseflow.db.models import Assessment, Course
from courseflow.db.store import LedgerStore

logger = structlog.get_logger(__name__)

DEFAULT_COURSE_NAME = "Unnamed Course"
DEFAULT_INSTRUCTOR = "Not specified"


@dataclass
class SaveResult:
    """Result of storing a parsed syllabus."""

    success: bool
    course: Course | None
    course_id: int | None
    assessment_count: int
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "courseId": self.course_id,
            "course": self.course.to_dict() if self.course else None,
            "assessmentCount": self.assessment_count,
            "error": self.error,
        }


def _parse_id(value: int | str) -> int | None:
    """Interpret an id the way a URL path would pass it."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _check_percentage(value: int | float | None, field_name: str) -> None:
    """Raise ValueError unless value is None or within 0-100."""
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field_name} must be a number")
    if not math.isfinite(value) or value < 0 or value > 100:
        raise ValueError(f"{field_name} must be between 0 and 100")


class GradeLedger:
    """In-memory course ledger with write-through persistence."""

    def __init__(self, store: LedgerStore, rng: random.Random | None = None):
        self.store = store
        self._rng = rng or random.Random()
        self._lock = threading.RLock()
        self.courses: list[Course] = []
        self.assessments: list[Assessment] = []
        self.next_course_id = 1
        self.next_assessment_id = 1
        self.load()

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def _reset(self) -> None:
        self.courses = []
        self.assessments = []
        self.next_course_id = 1
        self.next_assessment_id = 1

    def load(self) -> None:
        """Load the document from the store, or start empty.

        Course views are re-bound to the global assessment objects and
        duplicate course colors are repaired.
        """
        with self._lock:
            self._reset()
            data = self.store.load()
            if data is None:
                return

            try:
                self._load_document(data)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("ledger.load_failed", error=str(e))
                self._reset()
                return

            fixed = fix_duplicate_colors(self.courses, self._rng)
            if fixed:
                self.save_database()

            logger.info(
                "ledger.loaded",
                courses=len(self.courses),
                assessments=len(self.assessments),
            )

    def _load_document(self, data: dict[str, Any]) -> None:
        courses = [Course.from_dict(c) for c in data.get("courses", [])]
        assessments = [Assessment.from_dict(a) for a in data.get("assessments", [])]

        by_key = {a.key: a for a in assessments}
        for course in courses:
            bound = []
            for assessment in course.assessments:
                shared = by_key.get(assessment.key)
                if shared is None:
                    assessments.append(assessment)
                    by_key[assessment.key] = assessment
                    shared = assessment
                bound.append(shared)
            course.assessments = bound

        self.courses = courses
        self.assessments = assessments
        self.next_course_id = int(
            data.get("nextCourseId", max((c.id for c in courses), default=0) + 1)
        )
        self.next_assessment_id = int(
            data.get("nextAssessmentId", max((a.id for a in assessments), default=0) + 1)
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize the whole ledger."""
        return {
            "courses": [c.to_dict() for c in self.courses],
            "assessments": [a.to_dict() for a in self.assessments],
            "nextCourseId": self.next_course_id,
            "nextAssessmentId": self.next_assessment_id,
        }

    def save_database(self) -> bool:
        """Write the full document through the store.

        Returns:
            False if the store reported a failed write. Callers treat the
            in-memory mutation as done either way.
        """
        return self.store.save(self.to_document())

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_all_courses(self) -> list[Course]:
        """All courses in creation order."""
        return list(self.courses)

    def get_course_by_id(self, course_id: int | str) -> Course | None:
        """Find a course; ``course_id`` may be an int or a numeric string."""
        parsed = _parse_id(course_id)
        if parsed is None:
            return None
        for course in self.courses:
            if course.id == parsed:
                return course
        return None

    def find_course_by_name(self, name: str) -> Course | None:
        """Find a course by name (case-insensitive, trimmed)."""
        wanted = name.strip().lower()
        for course in self.courses:
            if course.name.strip().lower() == wanted:
                return course
        return None

    def get_assessment(
        self, course_id: int | str, assessment_id: int | str
    ) -> Assessment | None:
        """Find an assessment in the global list by (course_id, id)."""
        key = (_parse_id(course_id), _parse_id(assessment_id))
        if None in key:
            return None
        for assessment in self.assessments:
            if assessment.key == key:
                return assessment
        return None

    def calculate_grade_summary(self, course_id: int | str) -> GradeSummary | None:
        """Grade summary for a course, or None if the course does not exist."""
        course = self.get_course_by_id(course_id)
        if course is None:
            return None
        return calculate_grade_summary(course.assessments, course.goal_grade)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def save_syllabus(self, parsed: ParsedSyllabus) -> SaveResult:
        """Store a parsed syllabus as a new course.

        Args:
            parsed: Parser output

        Returns:
            SaveResult. A course whose name already exists is not stored;
            the result then carries success=False and the existing course.
        """
        name = parsed.course_name.strip() or DEFAULT_COURSE_NAME

        with self._lock:
            existing = self.find_course_by_name(name)
            if existing is not None:
                logger.info("ledger.duplicate_course", name=name, course_id=existing.id)
                return SaveResult(
                    success=False,
                    course=existing,
                    course_id=existing.id,
                    assessment_count=0,
                    error=f"Course '{existing.name}' already exists",
                )

            course = Course(
                id=self.next_course_id,
                name=name,
                instructor=parsed.instructor.strip() or DEFAULT_INSTRUCTOR,
                color=generate_random_color((c.color for c in self.courses), self._rng),
                office_hours=list(parsed.office_hours),
                textbooks=list(parsed.textbooks),
                other_info=list(parsed.other_info),
            )
            self.next_course_id += 1

            for candidate in parsed.all_candidates():
                assessment = Assessment(
                    id=self.next_assessment_id,
                    course_id=course.id,
                    title=candidate.name,
                    type=candidate.type.value,
                    due_date=candidate.date,
                    weight=candidate.weight,
                    grade=None,
                    description=candidate.description,
                )
                self.next_assessment_id += 1
                course.assessments.append(assessment)
                self.assessments.append(assessment)

            self.courses.append(course)
            self.save_database()

        logger.info(
            "ledger.course_saved",
            course_id=course.id,
            name=course.name,
            assessments=len(course.assessments),
        )
        return SaveResult(
            success=True,
            course=course,
            course_id=course.id,
            assessment_count=len(course.assessments),
        )

    def update_course_goal_grade(
        self, course_id: int | str, goal_grade: int | float | None
    ) -> bool:
        """Set or clear a course's goal grade.

        Raises:
            ValueError: If goal_grade is outside 0-100
        """
        _check_percentage(goal_grade, "Goal grade")
        with self._lock:
            course = self.get_course_by_id(course_id)
            if course is None:
                return False
            course.goal_grade = goal_grade
            self.save_database()

        logger.info("ledger.goal_updated", course_id=course.id, goal_grade=goal_grade)
        return True

    def update_assessment_grade(
        self,
        course_id: int | str,
        assessment_id: int | str,
        grade: int | float | None,
    ) -> bool:
        """Set a grade; None clears it back to ungraded.

        Raises:
            ValueError: If grade is outside 0-100
        """
        _check_percentage(grade, "Grade")
        with self._lock:
            assessment = self.get_assessment(course_id, assessment_id)
            if assessment is None:
                return False
            assessment.grade = grade
            self.save_database()

        logger.info(
            "ledger.grade_updated",
            course_id=assessment.course_id,
            assessment_id=assessment.id,
            grade=grade,
        )
        return True

    def add_assessment(
        self,
        course_id: int | str,
        title: str,
        type: str,
        weight: int | float | None = None,
        due_date: str | None = None,
        grade: int | float | None = None,
        description: str = "",
    ) -> Assessment | None:
        """Add an assessment to a course by hand.

        Returns:
            The new Assessment, or None if the course does not exist.

        Raises:
            ValueError: On empty title, unknown type, or out-of-range values
        """
        if not title or not title.strip():
            raise ValueError("Title is required")
        assessment_type = AssessmentType(type)
        _check_percentage(weight, "Weight")
        _check_percentage(grade, "Grade")

        with self._lock:
            course = self.get_course_by_id(course_id)
            if course is None:
                return None

            assessment = Assessment(
                id=self.next_assessment_id,
                course_id=course.id,
                title=title.strip(),
                type=assessment_type.value,
                due_date=due_date,
                weight=weight,
                grade=grade,
                description=description,
            )
            self.next_assessment_id += 1
            course.assessments.append(assessment)
            self.assessments.append(assessment)
            self.save_database()

        logger.info(
            "ledger.assessment_added",
            course_id=course.id,
            assessment_id=assessment.id,
        )
        return assessment

    def update_assessment(
        self,
        course_id: int | str,
        assessment_id: int | str,
        title: str | None = None,
        type: str | None = None,
        due_date: str | None = None,
        weight: int | float | None = None,
    ) -> Assessment | None:
        """Update the descriptive fields of an assessment.

        Only arguments that are not None are applied.

        Returns:
            The updated Assessment, or None if it does not exist.
        """
        if type is not None:
            type = AssessmentType(type).value
        _check_percentage(weight, "Weight")
        if title is not None and not title.strip():
            raise ValueError("Title must not be empty")

        with self._lock:
            assessment = self.get_assessment(course_id, assessment_id)
            if assessment is None:
                return None
            if title is not None:
                assessment.title = title.strip()
            if type is not None:
                assessment.type = type
            if due_date is not None:
                assessment.due_date = due_date
            if weight is not None:
                assessment.weight = weight
            self.save_database()

        logger.info(
            "ledger.assessment_updated",
            course_id=assessment.course_id,
            assessment_id=assessment.id,
        )
        return assessment

    def delete_course(self, course_id: int | str) -> bool:
        """Remove a course and all of its assessments. Ids are not reused."""
        with self._lock:
            course = self.get_course_by_id(course_id)
            if course is None:
                return False
            self.courses = [c for c in self.courses if c.id != course.id]
            self.assessments = [a for a in self.assessments if a.course_id != course.id]
            self.save_database()

        logger.info("ledger.course_deleted", course_id=course.id)
        return True

    def delete_assessment(self, course_id: int | str, assessment_id: int | str) -> bool:
        """Remove one assessment from both the course and the global list."""
        with self._lock:
            assessment = self.get_assessment(course_id, assessment_id)
            if assessment is None:
                return False
            course = self.get_course_by_id(assessment.course_id)
            if course is not None:
                course.assessments = [
                    a for a in course.assessments if a.key != assessment.key
                ]
            self.assessments = [a for a in self.assessments if a.key != assessment.key]
            self.save_database()

        logger.info(
            "ledger.assessment_deleted",
            course_id=assessment.course_id,
            assessment_id=assessment.id,
        )
        return True

    def clear_all_courses(self) -> bool:
        """Empty the ledger and restart both id counters at 1."""
        with self._lock:
            self._reset()
            self.save_database()

        logger.info("ledger.cleared")
        return True
