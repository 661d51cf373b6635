"""Course and assessment name cleanup.

Responsibilities:
- Strip leading course codes ("CS 101:") from course names
- Strip embedded dates, course codes and deadline phrasing from assessment names
- Remove filler words the model uses as placeholders ("Not specified", "TBD")
- Trim surrounding punctuation and quotes, collapse whitespace

Both cleaners are pure functions. They never raise; an input that cleans
down to nothing is handled by each function's fallback policy.
"""

from __future__ import annotations

import re

from courseflow.config.heuristics import ParserHeuristics, load_heuristics

# Course code: 2-4 letters, optional space, 3-4 digits, optional letter suffix
_CODE = r"[A-Za-z]{2,4}\s?\d{3,4}[A-Za-z]?"

_LEADING_CODE_RE = re.compile(
    rf"^(?:\(\s*{_CODE}\s*\)|{_CODE}\s*(?:[-:–—]|(?=\()))\s*"
)
_LEADING_PUNCT_RE = re.compile(r"^[^\w]+")
_TRAILING_PUNCT_RE = re.compile(r"[^\w)+#]+$")
_WHITESPACE_RE = re.compile(r"\s+")

_MONTHS = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|"
    r"Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)
_WEEKDAYS = (
    r"(?:Mon(?:day)?|Tue(?:s(?:day)?)?|Wed(?:nesday)?|Thu(?:r(?:s(?:day)?)?)?|"
    r"Fri(?:day)?|Sat(?:urday)?|Sun(?:day)?)"
)
_ORDINAL = r"(?:st|nd|rd|th)?"

_DATE_PATTERNS = [
    # 2024-03-15
    re.compile(r"\b\d{4}-\d{1,2}-\d{1,2}\b"),
    # 03/15/2024, 3/15/24, 3/15
    re.compile(r"\b\d{1,2}/\d{1,2}(?:/\d{2,4})?\b"),
    # March 15, 2024 / Mar. 15th / March 15 2024
    re.compile(
        rf"\b{_MONTHS}\.?\s+\d{{1,2}}{_ORDINAL}(?:,?\s*\d{{4}})?\b", re.IGNORECASE
    ),
    # 15 March 2024
    re.compile(rf"\b\d{{1,2}}{_ORDINAL}\s+{_MONTHS}\.?(?:,?\s*\d{{4}})?\b", re.IGNORECASE),
    # Monday 15th, Fri. 3
    re.compile(rf"\b{_WEEKDAYS}\.?,?\s+\d{{1,2}}{_ORDINAL}\b", re.IGNORECASE),
    # Lone weekday ("Mon.,", "Thu") left over after a date was removed
    re.compile(rf"\b{_WEEKDAYS}\b\.?,?", re.IGNORECASE),
]

# (2024), [Fall 2024], (Spring 2025)
_YEAR_FRAGMENT_RE = re.compile(r"[(\[]\s*(?:[A-Za-z]+\s+)?\d{4}\s*[)\]]")
_EMPTY_BRACKETS_RE = re.compile(r"\(\s*\)|\[\s*\]")
_EMBEDDED_CODE_RE = re.compile(r"\b[A-Z]{2,4}\s?\d{3,4}[A-Z]?\b")
_DEADLINE_PHRASE_RE = re.compile(
    r"\b(?:due\s+(?:on|by|date)|due|submission(?:\s+date)?|deadline|exam\s+date)\b\s*:?",
    re.IGNORECASE,
)
_EDGE_SEPARATORS_RE = re.compile(
    r"^[\s\-–—:,;\"'“”‘’]+"
    r"|[\s\-–—:,;\"'“”‘’]+$"
)
_SPACE_BEFORE_COMMA_RE = re.compile(r"\s+([,;])")

def clean_course_name(raw: str) -> str:
    """Clean a course title extracted by the model.

    Args:
        raw: Raw course name, e.g. "CS 101: Introduction to Programming"

    Returns:
        Cleaned name ("Introduction to Programming"), or the trimmed input
        when cleaning would leave nothing.
    """
    original = raw.strip()
    text = _LEADING_CODE_RE.sub("", original)
    text = _LEADING_PUNCT_RE.sub("", text)
    text = _TRAILING_PUNCT_RE.sub("", text)
    if text.endswith(")") and "(" not in text:
        text = text[:-1]
    text = _WHITESPACE_RE.sub(" ", text).strip()

    if not text:
        return original
    return text


def clean_assessment_name(raw: str, heuristics: ParserHeuristics | None = None) -> str:
    """Clean an assessment title extracted by the model.

    Args:
        raw: Raw name, e.g. "Assignment 1 (Due March 3, 2024)"
        heuristics: Filler tables; defaults to the configured ones.

    Returns:
        Cleaned name ("Assignment 1"). May be empty; callers decide
        what an empty name means.
    """
    if heuristics is None:
        heuristics = load_heuristics()

    # A pass can expose new edges ("Quiz 1 - (TBD)" -> "Quiz 1 - ()").
    # Passes only remove text, so this terminates.
    text = raw.strip()
    while True:
        cleaned = _clean_assessment_pass(text, heuristics)
        if cleaned == text:
            return text
        text = cleaned


def _clean_assessment_pass(text: str, heuristics: ParserHeuristics) -> str:
    """Apply every assessment-name rule once."""
    for pattern in _DATE_PATTERNS:
        text = pattern.sub(" ", text)

    text = _YEAR_FRAGMENT_RE.sub(" ", text)
    text = _EMBEDDED_CODE_RE.sub(" ", text)
    text = _DEADLINE_PHRASE_RE.sub(" ", text)
    text = heuristics.strip_fillers(text)
    text = _EMPTY_BRACKETS_RE.sub(" ", text)

    text = _WHITESPACE_RE.sub(" ", text)
    text = _SPACE_BEFORE_COMMA_RE.sub(r"\1", text)
    text = _EDGE_SEPARATORS_RE.sub("", text)
    return text.strip()
