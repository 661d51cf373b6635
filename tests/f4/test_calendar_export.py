"""Tests for ICS generation and calendar views."""

from datetime import date, datetime, timezone

import pytest

from courseflow.core.calendar_export import (
    generate_calendar_view_data,
    generate_ical_for_all_courses,
    generate_ical_for_course,
    get_events_by_month,
    get_upcoming_events,
    safe_filename,
    save_ical_file,
)

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def course(seeded_ledger):
    return seeded_ledger.get_course_by_id(1)


class TestGenerateIcal:
    """Tests for the ICS generators."""

    def test_course_calendar(self, course):
        ics = generate_ical_for_course(course, now=NOW)

        assert ics.startswith("BEGIN:VCALENDAR\r\n")
        assert ics.endswith("END:VCALENDAR\r\n")
        assert "X-WR-CALNAME:Introduction to Programming\r\n" in ics
        assert "UID:1-1@courseflow\r\n" in ics
        assert "DTSTART:20240201T000000Z\r\n" in ics
        assert "DTEND:20240201T010000Z\r\n" in ics
        assert "DTSTAMP:20240110T120000Z\r\n" in ics
        assert "SUMMARY:Quiz 1 (quiz)\r\n" in ics

    def test_undated_assessments_skipped(self, course):
        ics = generate_ical_for_course(course, now=NOW)

        # Assignment 2 has no due date
        assert ics.count("BEGIN:VEVENT") == 5
        assert "UID:1-4@courseflow" not in ics

    def test_description_escaped(self, course):
        ics = generate_ical_for_course(course, now=NOW)

        assert (
            "DESCRIPTION:Course: Introduction to Programming\\nInstructor: Dr. Jane Smith"
            "\\nWeight: 5%\\nType: quiz\r\n"
        ) in ics

    def test_all_courses(self, seeded_ledger):
        seeded_ledger.add_assessment(1, "Lab; part 1, intro", "assignment", due_date="2024-04-01")

        ics = generate_ical_for_all_courses(seeded_ledger.get_all_courses(), now=NOW)

        assert "X-WR-CALNAME:All Courses\r\n" in ics
        assert "SUMMARY:Final Exam - Introduction to Programming\r\n" in ics
        assert "SUMMARY:Lab\\; part 1\\, intro - Introduction to Programming\r\n" in ics

    def test_empty(self):
        ics = generate_ical_for_all_courses([], now=NOW)

        assert "BEGIN:VEVENT" not in ics
        assert "END:VCALENDAR" in ics

    def test_bad_date_skipped(self, seeded_ledger):
        seeded_ledger.add_assessment(1, "Essay", "assignment", due_date="next week")

        ics = generate_ical_for_course(seeded_ledger.get_course_by_id(1), now=NOW)

        assert ics.count("BEGIN:VEVENT") == 5


class TestCalendarViews:
    """Tests for calendar view data."""

    def test_sorted_by_date(self, seeded_ledger):
        events = generate_calendar_view_data(seeded_ledger.get_all_courses())

        assert [e.date for e in events] == [
            "2024-02-01",
            "2024-02-15",
            "2024-03-01",
            "2024-03-15",
            "2024-05-10",
        ]
        assert events[0].id == "1-1"
        assert events[0].course == "Introduction to Programming"

    def test_upcoming_inclusive(self, seeded_ledger):
        courses = seeded_ledger.get_all_courses()

        upcoming = get_upcoming_events(courses, days=30, today=date(2024, 2, 10))

        assert [e.title for e in upcoming] == ["Quiz 2", "Midterm Exam"]
        assert [e.title for e in get_upcoming_events(courses, 0, date(2024, 2, 15))] == [
            "Quiz 2"
        ]

    def test_by_month(self, seeded_ledger):
        events = get_events_by_month(seeded_ledger.get_all_courses(), 2024, 3)

        assert [e.title for e in events] == ["Midterm Exam", "Assignment 1"]

    def test_to_dict(self, seeded_ledger):
        event = generate_calendar_view_data(seeded_ledger.get_all_courses())[0]

        assert event.to_dict()["courseId"] == 1


class TestFiles:
    """Tests for saving calendars."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Introduction to Programming", "Introduction_to_Programming"),
            ("C++ / Data Structures!", "C_Data_Structures"),
            ("???", "calendar"),
        ],
    )
    def test_safe_filename(self, name, expected):
        assert safe_filename(name) == expected

    def test_save_keeps_crlf(self, tmp_path, course):
        content = generate_ical_for_course(course, now=NOW)

        path = save_ical_file(content, "intro.ics", tmp_path / "out")

        assert path == tmp_path / "out" / "intro.ics"
        assert path.read_bytes() == content.encode("utf-8")
