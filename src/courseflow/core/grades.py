"""Weighted grade and required-grade projection.

Only assessments with a weight take part in the math. A grade of None
means "ungraded" and is distinct from 0.

current grade:
    sum(grade * weight) / sum(weight) over graded items, i.e. the average of
    what has been earned so far, not a share of the whole course.

required grade:
    required_score = goal * total_weight - graded_score
    average_needed = required_score / remaining_weight
    Emitted uniformly for every ungraded item when
    remaining_weight > 0, required_score > graded_score and
    average_needed <= 100. Above 100 the goal is flagged infeasible.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol


class GradableItem(Protocol):
    """Anything with the fields the grade math reads."""

    id: int
    title: str
    weight: int | float | None
    grade: int | float | None


@dataclass
class RequiredGrade:
    """Score needed on one remaining assessment."""

    assessment_id: int | str
    title: str
    required_grade: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "assessmentId": self.assessment_id,
            "title": self.title,
            "requiredGrade": self.required_grade,
        }


@dataclass
class GradeSummary:
    """Current standing of a course against its goal."""

    current_grade: float | None
    goal_grade: float | None
    graded_assessments: int
    total_assessments: int
    weighted_assessments: int = 0
    required_grades: list[RequiredGrade] = field(default_factory=list)
    average_grade_needed: float | None = None
    remaining_weight: float = 0
    goal_met: bool = False
    goal_infeasible: bool = False
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "currentGrade": self.current_grade,
            "goalGrade": self.goal_grade,
            "gradedAssessments": self.graded_assessments,
            "totalAssessments": self.total_assessments,
            "weightedAssessments": self.weighted_assessments,
            "requiredGrades": [r.to_dict() for r in self.required_grades],
            "averageGradeNeeded": self.average_grade_needed,
            "remainingWeight": self.remaining_weight,
            "goalMet": self.goal_met,
            "goalInfeasible": self.goal_infeasible,
            "message": self.message,
        }


def weighted_average(items: Iterable[GradableItem]) -> float | None:
    """Weighted mean of graded, weighted items; None when nothing is graded."""
    graded = [a for a in items if a.weight is not None and a.grade is not None]
    if not graded:
        return None
    total_weight = sum(a.weight for a in graded)
    if total_weight <= 0:
        return 0.0
    return sum(a.grade * a.weight for a in graded) / total_weight


def calculate_grade_summary(
    assessments: list[GradableItem],
    goal_grade: float | None,
) -> GradeSummary:
    """Compute current grade and the uniform grade needed to reach the goal.

    Args:
        assessments: All assessments of one course
        goal_grade: Target percentage, or None when no goal is set

    Returns:
        GradeSummary. required_grades stays empty when there is no goal,
        nothing is left to grade, the goal is already met, or the goal is
        out of reach (goal_infeasible=True).
    """
    weighted = [a for a in assessments if a.weight is not None]
    graded = [a for a in weighted if a.grade is not None]
    ungraded = [a for a in weighted if a.grade is None]

    summary = GradeSummary(
        current_grade=weighted_average(graded),
        goal_grade=goal_grade,
        graded_assessments=len([a for a in assessments if a.grade is not None]),
        total_assessments=len(assessments),
        weighted_assessments=len(weighted),
    )

    if goal_grade is None:
        summary.message = "No goal grade set."
        return summary
    if not ungraded:
        summary.message = "No ungraded assessments remaining."
        return summary

    total_weight = sum(a.weight for a in weighted)
    graded_score = sum(a.grade * a.weight for a in graded)
    remaining_weight = sum(a.weight for a in ungraded)
    required_score = goal_grade * total_weight - graded_score
    summary.remaining_weight = remaining_weight

    if required_score <= graded_score:
        summary.goal_met = True
        summary.message = "You have already reached or exceeded your goal grade!"
        return summary

    if remaining_weight <= 0:
        summary.message = "Remaining assessments carry no weight."
        return summary

    average_needed = required_score / remaining_weight
    summary.average_grade_needed = average_needed

    if average_needed > 100:
        summary.goal_infeasible = True
        summary.message = (
            "It is not possible to reach your goal grade with the remaining assessments."
        )
        return summary

    summary.required_grades = [
        RequiredGrade(assessment_id=a.id, title=a.title, required_grade=average_needed)
        for a in ungraded
    ]
    summary.message = "Future grade requirements calculated."
    return summary
