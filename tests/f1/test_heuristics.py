"""Tests for the parser heuristic tables."""

import pytest

from courseflow.config import heuristics as heuristics_module
from courseflow.config.heuristics import (
    DEFAULT_MAX_NAME_WORDS,
    ParserHeuristics,
    clear_heuristics_cache,
    load_heuristics,
)


@pytest.fixture(autouse=True)
def _fresh_cache():
    clear_heuristics_cache()
    yield
    clear_heuristics_cache()


class TestParserHeuristics:
    """Tests for ParserHeuristics matching rules."""

    @pytest.mark.parametrize(
        "name",
        ["Loops", "if-statements, loops, and program flow", "Intro to Recursion"],
    )
    def test_detects_topics(self, name):
        """Course topics are recognized case-insensitively."""
        assert ParserHeuristics().is_topic(name)

    @pytest.mark.parametrize("name", ["Quiz 1", "Final Exam", "Loopsided Essay"])
    def test_ignores_assessments(self, name):
        """Real assessment names and partial words are not topics."""
        assert not ParserHeuristics().is_topic(name)

    def test_word_limit(self):
        """Project names get a larger word limit."""
        h = ParserHeuristics()

        assert h.word_limit("Lab Report") == DEFAULT_MAX_NAME_WORDS
        assert h.word_limit("Final Group Project") == 6

    def test_empty_tables_match_nothing(self):
        """Empty keyword lists disable the filters."""
        h = ParserHeuristics(topic_keywords=[], filler_phrases=[])

        assert not h.is_topic("loops")
        assert h.strip_fillers("Quiz TBD") == "Quiz TBD"


class TestLoadHeuristics:
    """Tests for loading heuristics from YAML."""

    def test_missing_file_uses_defaults(self, tmp_path, monkeypatch):
        """No file means built-in tables."""
        monkeypatch.chdir(tmp_path)

        h = load_heuristics()

        assert h.is_topic("polymorphism")
        assert h.max_name_words == DEFAULT_MAX_NAME_WORDS

    def test_file_overrides_defaults(self, tmp_path, monkeypatch):
        """Keys present in the file replace the defaults."""
        monkeypatch.chdir(tmp_path)
        path = tmp_path / heuristics_module.HEURISTICS_FILE
        path.parent.mkdir(parents=True)
        path.write_text("topic_keywords:\n  - photosynthesis\nmax_name_words: 3\n")

        h = load_heuristics()

        assert h.is_topic("Photosynthesis basics")
        assert not h.is_topic("loops")
        assert h.max_name_words == 3
        assert h.max_project_name_words == 6

    def test_invalid_yaml_falls_back(self, tmp_path, monkeypatch):
        """A broken file is logged and ignored."""
        monkeypatch.chdir(tmp_path)
        path = tmp_path / heuristics_module.HEURISTICS_FILE
        path.parent.mkdir(parents=True)
        path.write_text("topic_keywords: [unclosed\n")

        h = load_heuristics()

        assert h.is_topic("loops")

    def test_cached(self, tmp_path, monkeypatch):
        """Second call returns the cached object."""
        monkeypatch.chdir(tmp_path)

        assert load_heuristics() is load_heuristics()
        assert load_heuristics(force_reload=True) is not None
