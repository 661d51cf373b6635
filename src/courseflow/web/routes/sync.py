"""Endpoints of the secondary grade service.

Courses here use UUID ids and are independent of the ledger, except for
the mirrors of ledger courses (``source_id`` set), which the course and
assessment endpoints keep up to date.
"""

from fastapi import APIRouter, Body, Depends, HTTPException, status

from courseflow.core.grade_sync import GradeSyncError, GradeSyncService
from courseflow.web.dependencies import require_sync
from courseflow.web.schemas import (
    GradeUpdate,
    SyncAssessmentCreate,
    SyncAssessmentResponse,
    SyncAssessmentUpdate,
    SyncCourseCreate,
    SyncCourseListResponse,
    SyncCourseResponse,
    SyncCourseUpdate,
    SyncGradeSummaryResponse,
)

router = APIRouter(prefix="/api/sync/courses", tags=["sync"])


def _not_found(course_id: str, assessment_id: str | None = None) -> HTTPException:
    if assessment_id is None:
        detail = f"Course '{course_id}' not found"
    else:
        detail = f"Assessment '{assessment_id}' not found in course '{course_id}'"
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def _bad_request(error: GradeSyncError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


@router.get("", response_model=SyncCourseListResponse)
async def list_sync_courses(
    sync: GradeSyncService = Depends(require_sync),
) -> SyncCourseListResponse:
    courses = [SyncCourseResponse.model_validate(c) for c in sync.list_courses()]
    return SyncCourseListResponse(courses=courses, count=len(courses))


@router.post("", response_model=SyncCourseResponse, status_code=status.HTTP_201_CREATED)
async def create_sync_course(
    body: SyncCourseCreate,
    sync: GradeSyncService = Depends(require_sync),
) -> SyncCourseResponse:
    """Create a course, optionally with its assessments."""
    try:
        course = sync.create_course(
            name=body.name,
            color=body.color,
            goal_grade=body.goal_grade,
            assessments=[a.to_service_dict() for a in body.assessments],
        )
    except GradeSyncError as e:
        raise _bad_request(e) from e
    return SyncCourseResponse.model_validate(course)


@router.get("/{course_id}", response_model=SyncCourseResponse)
async def get_sync_course(
    course_id: str, sync: GradeSyncService = Depends(require_sync)
) -> SyncCourseResponse:
    course = sync.get_course(course_id)
    if course is None:
        raise _not_found(course_id)
    return SyncCourseResponse.model_validate(course)


@router.put("/{course_id}", response_model=SyncCourseResponse)
async def update_sync_course(
    course_id: str,
    body: SyncCourseUpdate,
    sync: GradeSyncService = Depends(require_sync),
) -> SyncCourseResponse:
    """Edit name or color; the goal grade changes only when sent."""
    changes = {"name": body.name, "color": body.color}
    if "goal_grade" in body.model_fields_set:
        changes["goal_grade"] = body.goal_grade

    course = sync.update_course(course_id, **changes)
    if course is None:
        raise _not_found(course_id)
    return SyncCourseResponse.model_validate(course)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sync_course(
    course_id: str, sync: GradeSyncService = Depends(require_sync)
) -> None:
    if not sync.delete_course(course_id):
        raise _not_found(course_id)


@router.post(
    "/{course_id}/assessments",
    response_model=list[SyncAssessmentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_sync_assessments(
    course_id: str,
    body: SyncAssessmentCreate | list[SyncAssessmentCreate] = Body(...),
    sync: GradeSyncService = Depends(require_sync),
) -> list[SyncAssessmentResponse]:
    """Add one assessment or a list of them."""
    items = body if isinstance(body, list) else [body]
    created = sync.add_assessments(course_id, [a.to_service_dict() for a in items])
    if created is None:
        raise _not_found(course_id)
    return [SyncAssessmentResponse.model_validate(a) for a in created]


@router.put("/{course_id}/assessments/{assessment_id}", response_model=SyncAssessmentResponse)
async def update_sync_assessment(
    course_id: str,
    assessment_id: str,
    body: SyncAssessmentUpdate,
    sync: GradeSyncService = Depends(require_sync),
) -> SyncAssessmentResponse:
    assessment = sync.update_assessment(
        course_id,
        assessment_id,
        title=body.title,
        type=body.type,
        due_date=body.due_date,
        weight=body.weight,
    )
    if assessment is None:
        raise _not_found(course_id, assessment_id)
    return SyncAssessmentResponse.model_validate(assessment)


@router.delete(
    "/{course_id}/assessments/{assessment_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_sync_assessment(
    course_id: str,
    assessment_id: str,
    sync: GradeSyncService = Depends(require_sync),
) -> None:
    if not sync.delete_assessment(course_id, assessment_id):
        raise _not_found(course_id, assessment_id)


@router.post(
    "/{course_id}/assessments/{assessment_id}/grade", response_model=SyncAssessmentResponse
)
async def set_sync_grade(
    course_id: str,
    assessment_id: str,
    body: GradeUpdate,
    sync: GradeSyncService = Depends(require_sync),
) -> SyncAssessmentResponse:
    try:
        assessment = sync.set_grade(course_id, assessment_id, body.grade)
    except GradeSyncError as e:
        raise _bad_request(e) from e
    if assessment is None:
        raise _not_found(course_id, assessment_id)
    return SyncAssessmentResponse.model_validate(assessment)


@router.get("/{course_id}/grade-summary", response_model=SyncGradeSummaryResponse)
async def sync_grade_summary(
    course_id: str, sync: GradeSyncService = Depends(require_sync)
) -> SyncGradeSummaryResponse:
    """Current grade and the average needed on the rest to reach the goal."""
    summary = sync.grade_summary(course_id)
    if summary is None:
        raise _not_found(course_id)
    return SyncGradeSummaryResponse.model_validate(summary)
