"""Syllabus response parser.

Responsibilities:
- Turn the model's sectioned plain-text answer into a ParsedSyllabus
- Track the current section with an explicit Section state
- Parse bullet lines into assessment candidates and reject noise
  (course topics, long prose, missing or non-positive weights)

Expected input shape (one header per line, bullets below it):

    Course Name: CS 101: Introduction to Programming
    Instructor: Dr. Jane Smith
    Quizzes:
    - 2024-02-01: Quiz 1 - 5%
    Assignments:
    - 2024-03-15: Assignment 1 - 15%
    Midterm:
    - 2024-03-01: Midterm Exam - 25%
    ...

The line reducer (`reduce_line`) is pure: it maps the current section and
one line to the next section plus an optional delta, and
`ParsedSyllabus.apply` folds deltas into the result.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

import structlog

from courseflow.config.heuristics import ParserHeuristics, load_heuristics
from courseflow.core.text_normalizer import clean_assessment_name, clean_course_name

logger = structlog.get_logger(__name__)

# =============================================================================
# TYPES
# =============================================================================


class AssessmentType(str, Enum):
    """Kinds of graded items tracked by the ledger."""

    QUIZ = "quiz"
    ASSIGNMENT = "assignment"
    MIDTERM = "midterm"
    FINAL = "final"


class Section(str, Enum):
    """Parser state: which block of the response we are inside."""

    NONE = "none"
    QUIZZES = "quizzes"
    ASSIGNMENTS = "assignments"
    MIDTERM = "midterm"
    FINAL = "final"
    OFFICE_HOURS = "office_hours"
    TEXTBOOKS = "textbooks"
    OTHER_INFO = "other_info"


# Header label -> section. Checked in order; "Course Name" and "Instructor"
# carry an inline value instead of opening a section.
SECTION_HEADERS: list[tuple[str, Section]] = [
    ("Quizzes:", Section.QUIZZES),
    ("Assignments:", Section.ASSIGNMENTS),
    ("Midterm:", Section.MIDTERM),
    ("Final:", Section.FINAL),
    ("Office Hours:", Section.OFFICE_HOURS),
    ("Textbooks:", Section.TEXTBOOKS),
    ("Other Key Information:", Section.OTHER_INFO),
]

COURSE_NAME_LABEL = "Course Name:"
INSTRUCTOR_LABEL = "Instructor:"

SECTION_ASSESSMENT_TYPES: dict[Section, AssessmentType] = {
    Section.QUIZZES: AssessmentType.QUIZ,
    Section.ASSIGNMENTS: AssessmentType.ASSIGNMENT,
    Section.MIDTERM: AssessmentType.MIDTERM,
    Section.FINAL: AssessmentType.FINAL,
}

TEXT_SECTIONS = (Section.OFFICE_HOURS, Section.TEXTBOOKS, Section.OTHER_INFO)


@dataclass
class AssessmentCandidate:
    """An assessment-shaped item parsed from one bullet line."""

    name: str
    type: AssessmentType
    date: str | None = None
    weight: int | float | None = None
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "date": self.date,
            "name": self.name,
            "weight": self.weight,
            "type": self.type.value,
            "description": self.description,
        }


@dataclass
class LineDelta:
    """What a single line contributes to the parsed result."""

    target: str
    value: Any


@dataclass
class ParsedSyllabus:
    """Structured view of one model response, before persistence."""

    course_name: str = ""
    instructor: str = ""
    quizzes: list[AssessmentCandidate] = field(default_factory=list)
    assignments: list[AssessmentCandidate] = field(default_factory=list)
    midterm: AssessmentCandidate | None = None
    final: AssessmentCandidate | None = None
    office_hours: list[str] = field(default_factory=list)
    textbooks: list[str] = field(default_factory=list)
    other_info: list[str] = field(default_factory=list)

    def apply(self, delta: LineDelta) -> None:
        """Fold one line delta into the result.

        List fields append; midterm/final keep the first candidate seen;
        course name and instructor take the latest value.
        """
        if delta.target in ("midterm", "final"):
            if getattr(self, delta.target) is None:
                setattr(self, delta.target, delta.value)
        elif delta.target in ("course_name", "instructor"):
            setattr(self, delta.target, delta.value)
        else:
            getattr(self, delta.target).append(delta.value)

    def all_candidates(self) -> list[AssessmentCandidate]:
        """Quizzes, assignments, midterm, final in storage order."""
        candidates = [*self.quizzes, *self.assignments]
        if self.midterm is not None:
            candidates.append(self.midterm)
        if self.final is not None:
            candidates.append(self.final)
        return candidates

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "courseName": self.course_name,
            "instructor": self.instructor,
            "quizzes": [q.to_dict() for q in self.quizzes],
            "assignments": [a.to_dict() for a in self.assignments],
            "midterm": self.midterm.to_dict() if self.midterm else None,
            "final": self.final.to_dict() if self.final else None,
            "officeHours": list(self.office_hours),
            "textbooks": list(self.textbooks),
            "otherInfo": list(self.other_info),
        }


# =============================================================================
# ITEM PARSING
# =============================================================================

# Weight token: a number, or a word the model used instead of one ("TBD")
_WEIGHT = r"(?P<weight>\d+(?:\.\d+)?|[A-Za-z/]+)"

_DATED_ITEM_RE = re.compile(
    rf"(?P<date>\d{{4}}-\d{{2}}-\d{{2}})\s*:\s*(?P<name>.+?)\s*-\s*{_WEIGHT}\s*%"
)
_UNDATED_ITEM_RE = re.compile(rf"(?P<name>.+?)\s*-\s*{_WEIGHT}\s*%")

_KEYWORD_RE = re.compile(
    r"\b(?:Project\s+Proposal|Group\s+Project|Assignment\s*\d+|Quiz\s*\d+|"
    r"Lab\s*\d+|Homework\s*\d+|Midterm(?:\s+Exam)?|Final(?:\s+Exam)?|Project)\b",
    re.IGNORECASE,
)
_ISO_DATE_RE = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")
_LONG_DATE_RE = re.compile(
    r"\b(?P<month>[A-Za-z]{3,9})\.?\s+(?P<day>\d{1,2})(?:st|nd|rd|th)?,?\s+(?P<year>\d{4})\b"
)
_PERCENT_RE = re.compile(r"(\d+(?:\.\d+)?)\s*%")
_SPACE_RE = re.compile(r"\s+")

# Fallback names longer than this are prose, not titles
MAX_FALLBACK_CHARS = 60


class _Rejected(Exception):
    """Internal signal: candidate must be dropped."""


def parse_assessment_item(
    item: str,
    assessment_type: AssessmentType | str,
    heuristics: ParserHeuristics | None = None,
) -> AssessmentCandidate | None:
    """Parse one bullet line (without its leading dash).

    Tries, in order: "YYYY-MM-DD: name - W%", "name - W%", a known
    assessment keyword with optional date/weight, and finally the whole
    line as a short name.

    Args:
        item: Bullet text, e.g. "2024-03-15: Assignment 1 - 15%"
        assessment_type: Type to stamp on the candidate
        heuristics: Filter tables; defaults to the configured ones

    Returns:
        AssessmentCandidate, or None when the line is rejected.
    """
    if heuristics is None:
        heuristics = load_heuristics()
    assessment_type = AssessmentType(assessment_type)
    item = item.strip()
    if not item:
        return None

    try:
        candidate = _match_item(item, assessment_type, heuristics)
    except _Rejected as e:
        logger.debug("parser.candidate_rejected", item=item, reason=str(e))
        return None

    if candidate is None:
        logger.debug("parser.candidate_unmatched", item=item)
        return None

    reason = _rejection_reason(candidate, heuristics)
    if reason:
        logger.debug("parser.candidate_rejected", item=item, reason=reason)
        return None

    return candidate


def _match_item(
    item: str, assessment_type: AssessmentType, heuristics: ParserHeuristics
) -> AssessmentCandidate | None:
    """Run the four matching strategies in order."""
    match = _DATED_ITEM_RE.search(item)
    if match:
        return AssessmentCandidate(
            name=clean_assessment_name(match.group("name"), heuristics),
            type=assessment_type,
            date=match.group("date"),
            weight=_parse_weight(match.group("weight")),
            description=item,
        )

    match = _UNDATED_ITEM_RE.search(item)
    if match:
        return AssessmentCandidate(
            name=clean_assessment_name(match.group("name"), heuristics),
            type=assessment_type,
            date=None,
            weight=_parse_weight(match.group("weight")),
            description=item,
        )

    match = _KEYWORD_RE.search(item)
    if match:
        weight_match = _PERCENT_RE.search(item)
        weight = _parse_weight(weight_match.group(1)) if weight_match else None
        return AssessmentCandidate(
            name=clean_assessment_name(_title_case(match.group(0)), heuristics),
            type=assessment_type,
            date=_find_date(item),
            weight=weight,
            description=item,
        )

    if len(item) > MAX_FALLBACK_CHARS:
        return None
    return AssessmentCandidate(
        name=clean_assessment_name(item, heuristics),
        type=assessment_type,
        date=None,
        weight=None,
        description=item,
    )


def _rejection_reason(
    candidate: AssessmentCandidate, heuristics: ParserHeuristics
) -> str | None:
    """Return why a candidate should be dropped, or None to keep it."""
    if not candidate.name:
        return "empty_name"
    if heuristics.is_topic(candidate.name):
        return "topic_keyword"
    if len(candidate.name.split()) > heuristics.word_limit(candidate.name):
        return "too_many_words"
    return None


def _parse_weight(token: str) -> int | float:
    """Parse a weight token; non-numeric or non-positive weights reject."""
    try:
        value = float(token)
    except ValueError:
        raise _Rejected("non_numeric_weight") from None
    if value <= 0:
        raise _Rejected("non_positive_weight")
    return int(value) if value.is_integer() else value


def _find_date(item: str) -> str | None:
    """Find an ISO or "Month DD, YYYY" date in free text, as ISO."""
    match = _ISO_DATE_RE.search(item)
    if match:
        return match.group(1)

    match = _LONG_DATE_RE.search(item)
    if match:
        text = f"{match.group('month')[:3]} {match.group('day')} {match.group('year')}"
        try:
            return datetime.strptime(text, "%b %d %Y").date().isoformat()
        except ValueError:
            return None
    return None


def _title_case(text: str) -> str:
    """'assignment   3' -> 'Assignment 3'."""
    return " ".join(word.capitalize() for word in _SPACE_RE.split(text.strip()))


# =============================================================================
# RESPONSE PARSING
# =============================================================================


def _header_value(line: str, label: str) -> str:
    """Text after ``label`` with markdown and placeholder brackets removed."""
    value = line.split(label, 1)[1]
    return value.strip().strip("*[]").strip()


def reduce_line(
    section: Section,
    line: str,
    heuristics: ParserHeuristics | None = None,
) -> tuple[Section, LineDelta | None]:
    """Advance the parser by one line.

    Args:
        section: Current section state
        line: Raw response line
        heuristics: Filter tables for assessment items

    Returns:
        (next_section, delta) where delta is None for lines that add nothing.
    """
    line = line.strip()
    if not line:
        return section, None

    if not line.startswith("-"):
        if COURSE_NAME_LABEL in line:
            name = _header_value(line, COURSE_NAME_LABEL)
            return section, LineDelta("course_name", clean_course_name(name) if name else "")
        if INSTRUCTOR_LABEL in line:
            return section, LineDelta("instructor", _header_value(line, INSTRUCTOR_LABEL))
        for label, next_section in SECTION_HEADERS:
            if label in line:
                return next_section, None
        return section, None

    item = line[1:].strip()
    if not item or section is Section.NONE:
        return section, None

    if section in TEXT_SECTIONS:
        return section, LineDelta(section.value, item)

    candidate = parse_assessment_item(item, SECTION_ASSESSMENT_TYPES[section], heuristics)
    if candidate is None:
        return section, None
    return section, LineDelta(section.value, candidate)


def parse_syllabus_response(
    response: str,
    heuristics: ParserHeuristics | None = None,
) -> ParsedSyllabus:
    """Parse a full model response into a ParsedSyllabus.

    Args:
        response: Free-text answer in the sectioned format
        heuristics: Filter tables; defaults to the configured ones

    Returns:
        ParsedSyllabus with items in source order.
    """
    if heuristics is None:
        heuristics = load_heuristics()

    parsed = ParsedSyllabus()
    section = Section.NONE

    for line in response.splitlines():
        section, delta = reduce_line(section, line, heuristics)
        if delta is not None:
            parsed.apply(delta)

    logger.info(
        "parser.response_parsed",
        course_name=parsed.course_name,
        quizzes=len(parsed.quizzes),
        assignments=len(parsed.assignments),
        has_midterm=parsed.midterm is not None,
        has_final=parsed.final is not None,
    )
    return parsed
