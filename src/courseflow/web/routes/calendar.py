"""Calendar endpoints: event views and ICS downloads."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from courseflow.core.calendar_export import (
    DEFAULT_UPCOMING_DAYS,
    generate_calendar_view_data,
    generate_ical_for_all_courses,
    generate_ical_for_course,
    get_upcoming_events,
    safe_filename,
)
from courseflow.db.ledger import GradeLedger
from courseflow.web.dependencies import get_ledger
from courseflow.web.schemas import CalendarEventResponse, CalendarEventsResponse

router = APIRouter(prefix="/api/calendar", tags=["calendar"])

ICS_MEDIA_TYPE = "text/calendar; charset=utf-8"


def _ics_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=ICS_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/events", response_model=CalendarEventsResponse)
async def calendar_events(
    days: int = Query(DEFAULT_UPCOMING_DAYS, ge=0, le=366),
    ledger: GradeLedger = Depends(get_ledger),
) -> CalendarEventsResponse:
    """All dated assessments plus those due within ``days`` days."""
    courses = ledger.get_all_courses()
    events = [CalendarEventResponse.model_validate(e) for e in generate_calendar_view_data(courses)]
    upcoming = [
        CalendarEventResponse.model_validate(e) for e in get_upcoming_events(courses, days)
    ]
    return CalendarEventsResponse(events=events, upcoming=upcoming, count=len(events))


@router.get("/download/{course_id}")
async def download_course_calendar(
    course_id: int, ledger: GradeLedger = Depends(get_ledger)
) -> Response:
    """ICS file for one course."""
    course = ledger.get_course_by_id(course_id)
    if course is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Course '{course_id}' not found",
        )

    filename = f"{safe_filename(course.name)}_calendar.ics"
    return _ics_response(generate_ical_for_course(course), filename)


@router.get("/download-all")
async def download_all_calendars(ledger: GradeLedger = Depends(get_ledger)) -> Response:
    """ICS file for every course."""
    content = generate_ical_for_all_courses(ledger.get_all_courses())
    return _ics_response(content, "all_courses_calendar.ics")
