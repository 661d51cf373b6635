"""Course and assessment records.

Records serialize to the camelCase layout of the ledger document:

    {
      "courses": [{"id": 1, "name": ..., "assessments": [...], ...}],
      "assessments": [{"id": 1, "courseId": 1, "title": ..., ...}],
      "nextCourseId": 2,
      "nextAssessmentId": 4
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def utc_now() -> str:
    """Current UTC time as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Assessment:
    """A single graded item of a course."""

    id: int
    course_id: int
    title: str
    type: str
    due_date: str | None = None
    weight: int | float | None = None
    grade: int | float | None = None
    description: str = ""
    created_at: str = field(default_factory=utc_now)

    @property
    def key(self) -> tuple[int, int]:
        """Identity in the global assessment list."""
        return (self.course_id, self.id)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "courseId": self.course_id,
            "title": self.title,
            "type": self.type,
            "dueDate": self.due_date,
            "weight": self.weight,
            "grade": self.grade,
            "description": self.description,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Assessment:
        """Create from dictionary."""
        return cls(
            id=int(data["id"]),
            course_id=int(data["courseId"]),
            title=data.get("title", ""),
            type=data.get("type", "assignment"),
            due_date=data.get("dueDate"),
            weight=data.get("weight"),
            grade=data.get("grade"),
            description=data.get("description", ""),
            created_at=data.get("createdAt") or utc_now(),
        )


@dataclass
class Course:
    """A tracked course with its assessments and grade goal."""

    id: int
    name: str
    instructor: str
    color: str
    goal_grade: int | float | None = None
    assessments: list[Assessment] = field(default_factory=list)
    office_hours: list[str] = field(default_factory=list)
    textbooks: list[str] = field(default_factory=list)
    other_info: list[str] = field(default_factory=list)
    created_at: str = field(default_factory=utc_now)

    def get_assessment(self, assessment_id: int) -> Assessment | None:
        """Find an assessment of this course by ID."""
        for assessment in self.assessments:
            if assessment.id == assessment_id:
                return assessment
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "instructor": self.instructor,
            "color": self.color,
            "goalGrade": self.goal_grade,
            "assessments": [a.to_dict() for a in self.assessments],
            "officeHours": list(self.office_hours),
            "textbooks": list(self.textbooks),
            "otherInfo": list(self.other_info),
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Course:
        """Create from dictionary (assessments included)."""
        return cls(
            id=int(data["id"]),
            name=data.get("name", ""),
            instructor=data.get("instructor", ""),
            color=data.get("color", ""),
            goal_grade=data.get("goalGrade"),
            assessments=[Assessment.from_dict(a) for a in data.get("assessments", [])],
            office_hours=list(data.get("officeHours", [])),
            textbooks=list(data.get("textbooks", [])),
            other_info=list(data.get("otherInfo", [])),
            created_at=data.get("createdAt") or utc_now(),
        )
