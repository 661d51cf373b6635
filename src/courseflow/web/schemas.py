"""Pydantic schemas for the Web API.

Serialization models for courses, assessments, grade summaries, syllabus
imports and calendar events.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from courseflow.core.grades import GradeSummary
from courseflow.db.models import Course


# =============================================================================
# HEALTH
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str


# =============================================================================
# ASSESSMENT SCHEMAS
# =============================================================================


class AssessmentCreate(BaseModel):
    """Request body for adding an assessment by hand."""

    title: str = ""
    type: str = "assignment"
    weight: float | None = None
    due_date: str | None = None
    grade: float | None = None
    description: str = ""


class AssessmentUpdate(BaseModel):
    """Request body for editing an assessment; omitted fields stay as they are."""

    title: str | None = None
    type: str | None = None
    due_date: str | None = None
    weight: float | None = None


class GradeUpdate(BaseModel):
    """Request body for recording a grade."""

    grade: float | None = None


class AssessmentResponse(BaseModel):
    """Response for an assessment."""

    id: int
    course_id: int
    title: str
    type: str
    due_date: str | None = None
    weight: float | None = None
    grade: float | None = None
    description: str = ""
    created_at: str

    model_config = {"from_attributes": True}


class AssessmentListResponse(BaseModel):
    """Response for the assessments of a course."""

    course_id: int
    assessments: list[AssessmentResponse]
    count: int


# =============================================================================
# GRADE SCHEMAS
# =============================================================================


class RequiredGradeResponse(BaseModel):
    """Grade needed on one remaining assessment."""

    assessment_id: int
    title: str
    required_grade: float

    model_config = {"from_attributes": True}


class GradeSummaryResponse(BaseModel):
    """Current grade and goal projection of a course."""

    current_grade: float | None = None
    goal_grade: float | None = None
    graded_assessments: int
    total_assessments: int
    weighted_assessments: int
    required_grades: list[RequiredGradeResponse] = Field(default_factory=list)
    average_grade_needed: float | None = None
    remaining_weight: float = 0
    goal_met: bool = False
    goal_infeasible: bool = False
    message: str = ""

    model_config = {"from_attributes": True}

    @classmethod
    def from_summary(cls, summary: GradeSummary) -> GradeSummaryResponse:
        return cls.model_validate(summary)


# =============================================================================
# COURSE SCHEMAS
# =============================================================================


class GoalGradeUpdate(BaseModel):
    """Request body for setting a course's goal grade (null clears it)."""

    goal_grade: float | None = None


class CourseSummaryResponse(BaseModel):
    """Course as listed in the overview."""

    id: int
    name: str
    instructor: str
    color: str
    goal_grade: float | None = None
    assessment_count: int
    current_grade: float | None = None


class CourseListResponse(BaseModel):
    """Response for list of courses."""

    courses: list[CourseSummaryResponse]
    count: int


class CourseDetailResponse(BaseModel):
    """Full course with its assessments and grade summary."""

    id: int
    name: str
    instructor: str
    color: str
    goal_grade: float | None = None
    assessments: list[AssessmentResponse]
    office_hours: list[str] = Field(default_factory=list)
    textbooks: list[str] = Field(default_factory=list)
    other_info: list[str] = Field(default_factory=list)
    created_at: str
    grade_summary: GradeSummaryResponse | None = None

    @classmethod
    def from_course(
        cls, course: Course, summary: GradeSummary | None = None
    ) -> CourseDetailResponse:
        return cls(
            id=course.id,
            name=course.name,
            instructor=course.instructor,
            color=course.color,
            goal_grade=course.goal_grade,
            assessments=[AssessmentResponse.model_validate(a) for a in course.assessments],
            office_hours=course.office_hours,
            textbooks=course.textbooks,
            other_info=course.other_info,
            created_at=course.created_at,
            grade_summary=GradeSummaryResponse.from_summary(summary) if summary else None,
        )


class MessageResponse(BaseModel):
    """Generic success/message response."""

    success: bool
    message: str


# =============================================================================
# IMPORT SCHEMAS
# =============================================================================


class TextAnalysisRequest(BaseModel):
    """Request body for analyzing pasted syllabus text."""

    text: str = ""


class ImportResponse(BaseModel):
    """Result of a syllabus upload or text analysis."""

    success: bool
    message: str
    course_id: int | None = None
    course: CourseDetailResponse | None = None
    assessment_count: int = 0
    parsed_data: dict[str, Any] = Field(default_factory=dict)
    extracted_info: str = ""


# =============================================================================
# CALENDAR SCHEMAS
# =============================================================================


class CalendarEventResponse(BaseModel):
    """A dated assessment in calendar views."""

    id: str
    title: str
    course: str
    course_id: int
    type: str
    weight: float | None = None
    date: str
    color: str
    instructor: str
    grade: float | None = None

    model_config = {"from_attributes": True}


class CalendarEventsResponse(BaseModel):
    """All events plus the upcoming window."""

    events: list[CalendarEventResponse]
    upcoming: list[CalendarEventResponse]
    count: int


# =============================================================================
# SYNC SCHEMAS
# =============================================================================


class SyncAssessmentCreate(BaseModel):
    """Assessment to add to a course of the sync service."""

    title: str = ""
    type: str = "assignment"
    due_date: str | None = None
    weight: float | None = None
    grade: float | None = None

    def to_service_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "type": self.type,
            "dueDate": self.due_date,
            "weight": self.weight,
            "grade": self.grade,
        }


class SyncAssessmentUpdate(BaseModel):
    """Request body for editing a sync assessment; omitted fields stay as they are."""

    title: str | None = None
    type: str | None = None
    due_date: str | None = None
    weight: float | None = None


class SyncCourseCreate(BaseModel):
    """Request body for creating a course in the sync service."""

    name: str = ""
    color: str | None = None
    goal_grade: float | None = None
    assessments: list[SyncAssessmentCreate] = Field(default_factory=list)


class SyncCourseUpdate(BaseModel):
    """Request body for editing a sync course (``goal_grade: null`` clears it)."""

    name: str | None = None
    color: str | None = None
    goal_grade: float | None = None


class SyncAssessmentResponse(BaseModel):
    """Assessment held by the sync service."""

    id: str
    title: str
    type: str
    due_date: str | None = None
    weight: float | None = None
    grade: float | None = None
    source_id: int | None = None

    model_config = {"from_attributes": True}


class SyncCourseResponse(BaseModel):
    """Course held by the sync service."""

    id: str
    name: str
    color: str
    goal_grade: float | None = None
    assessments: list[SyncAssessmentResponse]
    source_id: int | None = None

    model_config = {"from_attributes": True}


class SyncCourseListResponse(BaseModel):
    courses: list[SyncCourseResponse]
    count: int


class SyncGradeSummaryResponse(BaseModel):
    """Grade summary computed by the sync service."""

    current_grade: float | None = None
    required_avg: float | None = None
    graded_weight: float
    total_weight: float
    graded: list[SyncAssessmentResponse]
    ungraded: list[SyncAssessmentResponse]

    model_config = {"from_attributes": True}
