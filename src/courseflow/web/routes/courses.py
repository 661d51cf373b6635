"""Course endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from courseflow.core.grade_sync import GradeSyncService
from courseflow.core.grades import weighted_average
from courseflow.db.ledger import GradeLedger
from courseflow.web.dependencies import get_ledger, get_sync, refresh_mirror
from courseflow.web.schemas import (
    CourseDetailResponse,
    CourseListResponse,
    CourseSummaryResponse,
    GoalGradeUpdate,
    GradeSummaryResponse,
    MessageResponse,
)

router = APIRouter(prefix="/api", tags=["courses"])


def _course_not_found(course_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Course '{course_id}' not found",
    )


@router.get("/courses", response_model=CourseListResponse)
async def list_courses(ledger: GradeLedger = Depends(get_ledger)) -> CourseListResponse:
    """List all courses with their current grade."""
    courses = [
        CourseSummaryResponse(
            id=c.id,
            name=c.name,
            instructor=c.instructor,
            color=c.color,
            goal_grade=c.goal_grade,
            assessment_count=len(c.assessments),
            current_grade=weighted_average(c.assessments),
        )
        for c in ledger.get_all_courses()
    ]
    return CourseListResponse(courses=courses, count=len(courses))


@router.get("/courses/{course_id}", response_model=CourseDetailResponse)
async def get_course(
    course_id: int, ledger: GradeLedger = Depends(get_ledger)
) -> CourseDetailResponse:
    """Get a course with its assessments and grade summary."""
    course = ledger.get_course_by_id(course_id)
    if course is None:
        raise _course_not_found(course_id)

    return CourseDetailResponse.from_course(course, ledger.calculate_grade_summary(course_id))


@router.put("/courses/{course_id}", response_model=CourseDetailResponse)
async def update_goal_grade(
    course_id: int,
    body: GoalGradeUpdate,
    ledger: GradeLedger = Depends(get_ledger),
    sync: GradeSyncService | None = Depends(get_sync),
) -> CourseDetailResponse:
    """Set or clear (null) the goal grade of a course."""
    if "goal_grade" not in body.model_fields_set:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Goal grade is required",
        )

    try:
        updated = ledger.update_course_goal_grade(course_id, body.goal_grade)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    if not updated:
        raise _course_not_found(course_id)
    refresh_mirror(sync, ledger, course_id)

    course = ledger.get_course_by_id(course_id)
    return CourseDetailResponse.from_course(course, ledger.calculate_grade_summary(course_id))


@router.delete("/courses/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(
    course_id: int,
    ledger: GradeLedger = Depends(get_ledger),
    sync: GradeSyncService | None = Depends(get_sync),
) -> None:
    """Delete a course and all of its assessments."""
    if not ledger.delete_course(course_id):
        raise _course_not_found(course_id)
    refresh_mirror(sync, ledger, course_id)


@router.get("/courses/{course_id}/required-grade", response_model=GradeSummaryResponse)
async def required_grade(
    course_id: int, ledger: GradeLedger = Depends(get_ledger)
) -> GradeSummaryResponse:
    """Grade needed on the remaining assessments to reach the goal."""
    course = ledger.get_course_by_id(course_id)
    if course is None:
        raise _course_not_found(course_id)

    if course.goal_grade is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No goal grade set for this course",
        )

    if not any(a.grade is None and a.weight is not None for a in course.assessments):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No ungraded assessments remaining",
        )

    return GradeSummaryResponse.from_summary(ledger.calculate_grade_summary(course_id))


@router.delete("/clear-all", response_model=MessageResponse)
async def clear_all(
    ledger: GradeLedger = Depends(get_ledger),
    sync: GradeSyncService | None = Depends(get_sync),
) -> MessageResponse:
    """Delete every course and reset ids."""
    ledger.clear_all_courses()
    if sync is not None:
        sync.clear()
    return MessageResponse(success=True, message="All courses cleared")
