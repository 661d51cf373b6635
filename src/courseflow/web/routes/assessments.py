"""Assessment and grade endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from courseflow.core.grade_sync import GradeSyncService
from courseflow.db.ledger import GradeLedger
from courseflow.web.dependencies import get_ledger, get_sync, refresh_mirror
from courseflow.web.schemas import (
    AssessmentCreate,
    AssessmentListResponse,
    AssessmentResponse,
    AssessmentUpdate,
    GradeUpdate,
)

router = APIRouter(prefix="/api/courses/{course_id}/assessments", tags=["assessments"])


def _not_found(course_id: int, assessment_id: int | None = None) -> HTTPException:
    if assessment_id is None:
        detail = f"Course '{course_id}' not found"
    else:
        detail = f"Assessment '{assessment_id}' not found in course '{course_id}'"
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def _bad_request(error: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


@router.get("", response_model=AssessmentListResponse)
async def list_assessments(
    course_id: int, ledger: GradeLedger = Depends(get_ledger)
) -> AssessmentListResponse:
    """List the assessments of a course."""
    course = ledger.get_course_by_id(course_id)
    if course is None:
        raise _not_found(course_id)

    assessments = [AssessmentResponse.model_validate(a) for a in course.assessments]
    return AssessmentListResponse(
        course_id=course.id,
        assessments=assessments,
        count=len(assessments),
    )


@router.post("", response_model=AssessmentResponse, status_code=status.HTTP_201_CREATED)
async def create_assessment(
    course_id: int,
    body: AssessmentCreate,
    ledger: GradeLedger = Depends(get_ledger),
    sync: GradeSyncService | None = Depends(get_sync),
) -> AssessmentResponse:
    """Add an assessment to a course by hand."""
    try:
        assessment = ledger.add_assessment(
            course_id,
            title=body.title,
            type=body.type,
            weight=body.weight,
            due_date=body.due_date,
            grade=body.grade,
            description=body.description,
        )
    except ValueError as e:
        raise _bad_request(e) from e

    if assessment is None:
        raise _not_found(course_id)

    refresh_mirror(sync, ledger, course_id)
    return AssessmentResponse.model_validate(assessment)


@router.put("/{assessment_id}", response_model=AssessmentResponse)
async def update_assessment(
    course_id: int,
    assessment_id: int,
    body: AssessmentUpdate,
    ledger: GradeLedger = Depends(get_ledger),
    sync: GradeSyncService | None = Depends(get_sync),
) -> AssessmentResponse:
    """Edit title, type, due date or weight of an assessment."""
    try:
        assessment = ledger.update_assessment(
            course_id,
            assessment_id,
            title=body.title,
            type=body.type,
            due_date=body.due_date,
            weight=body.weight,
        )
    except ValueError as e:
        raise _bad_request(e) from e

    if assessment is None:
        raise _not_found(course_id, assessment_id)

    refresh_mirror(sync, ledger, course_id)
    return AssessmentResponse.model_validate(assessment)


@router.delete("/{assessment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assessment(
    course_id: int,
    assessment_id: int,
    ledger: GradeLedger = Depends(get_ledger),
    sync: GradeSyncService | None = Depends(get_sync),
) -> None:
    """Delete an assessment."""
    if not ledger.delete_assessment(course_id, assessment_id):
        raise _not_found(course_id, assessment_id)
    refresh_mirror(sync, ledger, course_id)


@router.post("/{assessment_id}/grade", response_model=AssessmentResponse)
async def set_grade(
    course_id: int,
    assessment_id: int,
    body: GradeUpdate,
    ledger: GradeLedger = Depends(get_ledger),
    sync: GradeSyncService | None = Depends(get_sync),
) -> AssessmentResponse:
    """Record a grade (0-100) for an assessment."""
    if body.grade is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Grade is required",
        )

    try:
        updated = ledger.update_assessment_grade(course_id, assessment_id, body.grade)
    except ValueError as e:
        raise _bad_request(e) from e

    if not updated:
        raise _not_found(course_id, assessment_id)
    refresh_mirror(sync, ledger, course_id)

    return AssessmentResponse.model_validate(ledger.get_assessment(course_id, assessment_id))


@router.delete("/{assessment_id}/grade", response_model=AssessmentResponse)
async def clear_grade(
    course_id: int,
    assessment_id: int,
    ledger: GradeLedger = Depends(get_ledger),
    sync: GradeSyncService | None = Depends(get_sync),
) -> AssessmentResponse:
    """Remove the grade of an assessment, making it ungraded again."""
    if not ledger.update_assessment_grade(course_id, assessment_id, None):
        raise _not_found(course_id, assessment_id)
    refresh_mirror(sync, ledger, course_id)

    return AssessmentResponse.model_validate(ledger.get_assessment(course_id, assessment_id))
