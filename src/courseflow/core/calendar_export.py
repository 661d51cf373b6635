"""Calendar export.

Turns dated assessments into:
- iCalendar (.ics) files for one course or all courses, importable into
  Google Calendar, Outlook or Apple Calendar
- calendar view data for clients (sorted events, upcoming, by month)

Each assessment with a due date becomes a one-hour event starting at
midnight UTC of that date. Undated or unparseable dates are skipped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from typing import Any, Iterable

import structlog

from courseflow.db.models import Assessment, Course

logger = structlog.get_logger(__name__)

PRODID = "-//CourseFlow//Academic Calendar//EN"
UID_DOMAIN = "courseflow"
EVENT_DURATION = timedelta(hours=1)
DEFAULT_UPCOMING_DAYS = 30


@dataclass
class CalendarEvent:
    """One dated assessment, as shown in calendar views."""

    id: str
    title: str
    course: str
    course_id: int
    type: str
    weight: int | float | None
    date: str
    color: str
    instructor: str
    grade: int | float | None

    @property
    def day(self) -> date:
        return date.fromisoformat(self.date[:10])

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "course": self.course,
            "courseId": self.course_id,
            "type": self.type,
            "weight": self.weight,
            "date": self.date,
            "color": self.color,
            "instructor": self.instructor,
            "grade": self.grade,
        }


def _ics_escape(text: str) -> str:
    """Escape text for ICS property values."""
    return (
        text.replace("\\", "\\\\")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
        .replace(";", "\\;")
        .replace(",", "\\,")
    )


def _ics_datetime(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def _parse_due_date(value: str | None) -> date | None:
    """Parse the date part of an ISO date/datetime string."""
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def _event_lines(
    course: Course,
    assessment: Assessment,
    summary: str,
    stamp: datetime,
) -> list[str]:
    due = _parse_due_date(assessment.due_date)
    if due is None:
        logger.debug(
            "calendar_export.skipped_event",
            course_id=course.id,
            assessment_id=assessment.id,
            due_date=assessment.due_date,
        )
        return []

    start = datetime.combine(due, time(0, 0), tzinfo=timezone.utc)
    weight = f"{assessment.weight}%" if assessment.weight is not None else "not specified"
    description = (
        f"Course: {course.name}\n"
        f"Instructor: {course.instructor}\n"
        f"Weight: {weight}\n"
        f"Type: {assessment.type}"
    )

    return [
        "BEGIN:VEVENT",
        f"UID:{course.id}-{assessment.id}@{UID_DOMAIN}",
        f"DTSTAMP:{_ics_datetime(stamp)}",
        f"DTSTART:{_ics_datetime(start)}",
        f"DTEND:{_ics_datetime(start + EVENT_DURATION)}",
        f"SUMMARY:{_ics_escape(summary)}",
        f"DESCRIPTION:{_ics_escape(description)}",
        f"LOCATION:{_ics_escape(course.name)}",
        "STATUS:CONFIRMED",
        "SEQUENCE:0",
        "END:VEVENT",
    ]


def _calendar(name: str, description: str, events: list[str]) -> str:
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        f"X-WR-CALNAME:{_ics_escape(name)}",
        f"X-WR-CALDESC:{_ics_escape(description)}",
        *events,
        "END:VCALENDAR",
    ]
    # ICS standard uses CRLF
    return "\r\n".join(lines) + "\r\n"


def generate_ical_for_course(course: Course, now: datetime | None = None) -> str:
    """ICS calendar with one event per dated assessment of a course."""
    stamp = now or datetime.now(timezone.utc)
    events: list[str] = []
    for assessment in course.assessments:
        summary = f"{assessment.title} ({assessment.type})"
        events.extend(_event_lines(course, assessment, summary, stamp))

    return _calendar(course.name, f"Academic calendar for {course.name}", events)


def generate_ical_for_all_courses(
    courses: Iterable[Course], now: datetime | None = None
) -> str:
    """ICS calendar with the dated assessments of every course."""
    stamp = now or datetime.now(timezone.utc)
    events: list[str] = []
    for course in courses:
        for assessment in course.assessments:
            summary = f"{assessment.title} - {course.name}"
            events.extend(_event_lines(course, assessment, summary, stamp))

    return _calendar("All Courses", "Academic calendar for all courses", events)


def generate_calendar_view_data(courses: Iterable[Course]) -> list[CalendarEvent]:
    """All dated assessments as calendar events, sorted by date."""
    events = []
    for course in courses:
        for assessment in course.assessments:
            if _parse_due_date(assessment.due_date) is None:
                continue
            events.append(
                CalendarEvent(
                    id=f"{course.id}-{assessment.id}",
                    title=assessment.title,
                    course=course.name,
                    course_id=course.id,
                    type=assessment.type,
                    weight=assessment.weight,
                    date=assessment.due_date,
                    color=course.color,
                    instructor=course.instructor,
                    grade=assessment.grade,
                )
            )

    events.sort(key=lambda e: e.day)
    return events


def get_upcoming_events(
    courses: Iterable[Course],
    days: int = DEFAULT_UPCOMING_DAYS,
    today: date | None = None,
) -> list[CalendarEvent]:
    """Events due between today and ``days`` days from now, inclusive."""
    start = today or date.today()
    end = start + timedelta(days=days)
    return [e for e in generate_calendar_view_data(courses) if start <= e.day <= end]


def get_events_by_month(
    courses: Iterable[Course], year: int, month: int
) -> list[CalendarEvent]:
    """Events in the given month (1-12)."""
    return [
        e
        for e in generate_calendar_view_data(courses)
        if e.day.year == year and e.day.month == month
    ]


def safe_filename(name: str) -> str:
    """Reduce a course name to a filesystem-safe stem."""
    stem = re.sub(r"[^A-Za-z0-9]+", "_", name).strip("_")
    return stem or "calendar"


def save_ical_file(content: str, filename: str, directory: Path) -> Path:
    """Write ICS content into ``directory``; returns the written path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / Path(filename).name
    # newline="" keeps the CRLF line endings intact
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
    logger.info("calendar_export.saved", path=str(path))
    return path
