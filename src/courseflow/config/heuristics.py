"""Keyword tables used to clean and filter parsed assessments.

Loads tunable word lists from data/config/heuristics_v1.yaml so the
filters can be adjusted without touching the parser. Every key is
optional; anything missing falls back to the built-in tables below.

Usage:
    from courseflow.config.heuristics import load_heuristics

    heuristics = load_heuristics()
    heuristics.is_topic("loops and arrays")
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
HEURISTICS_FILE = Path("data/config/heuristics_v1.yaml")

# Programming topics that models tend to list as if they were graded items
DEFAULT_TOPIC_KEYWORDS = [
    "loops",
    "inheritance",
    "variables",
    "if-statements",
    "if statements",
    "conditionals",
    "recursion",
    "polymorphism",
    "encapsulation",
    "arrays",
    "functions",
    "data types",
    "program flow",
    "control flow",
    "pointers",
    "classes and objects",
    "linked lists",
]

# Phrases stripped from assessment names wherever they appear
DEFAULT_FILLER_PHRASES = [
    "not specified",
    "to be announced",
    "to be determined",
    "tbd",
    "tba",
    "n/a",
    "description",
    "regarding",
    "details",
    "placeholder",
]

DEFAULT_MAX_NAME_WORDS = 4
DEFAULT_MAX_PROJECT_NAME_WORDS = 6


@dataclass
class ParserHeuristics:
    """Keyword tables and limits for assessment filtering."""

    topic_keywords: list[str] = field(
        default_factory=lambda: list(DEFAULT_TOPIC_KEYWORDS)
    )
    filler_phrases: list[str] = field(
        default_factory=lambda: list(DEFAULT_FILLER_PHRASES)
    )
    max_name_words: int = DEFAULT_MAX_NAME_WORDS
    max_project_name_words: int = DEFAULT_MAX_PROJECT_NAME_WORDS

    def __post_init__(self) -> None:
        self._topic_re = _phrase_pattern(self.topic_keywords)
        self._filler_re = _phrase_pattern(self.filler_phrases)

    def is_topic(self, name: str) -> bool:
        """True if ``name`` mentions a course topic rather than an assessment."""
        if self._topic_re is None:
            return False
        return self._topic_re.search(name) is not None

    def strip_fillers(self, text: str) -> str:
        """Remove filler phrases from ``text``."""
        if self._filler_re is None:
            return text
        return self._filler_re.sub(" ", text)

    def word_limit(self, name: str) -> int:
        """Maximum word count allowed for ``name``."""
        if "project" in name.lower():
            return self.max_project_name_words
        return self.max_name_words


def _phrase_pattern(phrases: list[str]) -> re.Pattern[str] | None:
    """Compile phrases into one case-insensitive, word-bounded alternation."""
    cleaned = [p.strip() for p in phrases if p and p.strip()]
    if not cleaned:
        return None
    # Longest first so "not specified" wins over a shorter overlapping entry
    cleaned.sort(key=len, reverse=True)
    alternation = "|".join(re.escape(p) for p in cleaned)
    return re.compile(rf"(?<![\w-])(?:{alternation})(?![\w-])", re.IGNORECASE)


# Module-level cache
_cached_heuristics: ParserHeuristics | None = None


def load_heuristics(force_reload: bool = False) -> ParserHeuristics:
    """Load heuristic tables from the config file.

    Args:
        force_reload: If True, ignore cache and reload from file.

    Returns:
        ParserHeuristics with file values merged over the defaults.
    """
    global _cached_heuristics

    if _cached_heuristics is not None and not force_reload:
        return _cached_heuristics

    if not HEURISTICS_FILE.exists():
        logger.debug("heuristics_file_not_found", path=str(HEURISTICS_FILE))
        _cached_heuristics = ParserHeuristics()
        return _cached_heuristics

    try:
        data = yaml.safe_load(HEURISTICS_FILE.read_text(encoding="utf-8")) or {}
        _cached_heuristics = ParserHeuristics(
            topic_keywords=data.get("topic_keywords", list(DEFAULT_TOPIC_KEYWORDS)),
            filler_phrases=data.get("filler_phrases", list(DEFAULT_FILLER_PHRASES)),
            max_name_words=data.get("max_name_words", DEFAULT_MAX_NAME_WORDS),
            max_project_name_words=data.get(
                "max_project_name_words", DEFAULT_MAX_PROJECT_NAME_WORDS
            ),
        )
        logger.debug(
            "loaded_heuristics",
            topics=len(_cached_heuristics.topic_keywords),
            fillers=len(_cached_heuristics.filler_phrases),
        )
        return _cached_heuristics

    except (yaml.YAMLError, OSError, AttributeError, TypeError) as e:
        logger.error("failed_to_load_heuristics", error=str(e))
        _cached_heuristics = ParserHeuristics()
        return _cached_heuristics


def clear_heuristics_cache() -> None:
    """Clear the heuristics cache.

    Useful for testing or when the tables are edited at runtime.
    """
    global _cached_heuristics
    _cached_heuristics = None
