"""Tests for LLM syllabus extraction."""

import pytest

from courseflow.core.syllabus_extractor import (
    MAX_SYLLABUS_CHARS,
    RATE_LIMIT_MESSAGE,
    ExtractionServiceError,
    extract_syllabus_info,
    is_rate_limit_error,
)
from courseflow.llm.client import LLMConnectionError, LLMError, LLMRateLimitError


class TestExtractSyllabusInfo:
    """Tests for extract_syllabus_info."""

    def test_returns_outline(self, mock_llm_client, syllabus_text, sample_outline):
        outline = extract_syllabus_info(syllabus_text, mock_llm_client, "syllabus.pdf")

        assert outline == sample_outline

    def test_prompt_contains_text(self, mock_llm_client, syllabus_text):
        extract_syllabus_info(syllabus_text, mock_llm_client)

        system_prompt, user_prompt = mock_llm_client.simple_chat.call_args.args
        assert "Course Name:" in user_prompt
        assert "Midterm exam March 1 25%" in user_prompt
        assert "{syllabus_text}" not in user_prompt
        assert system_prompt

    def test_long_text_truncated(self, mock_llm_client):
        extract_syllabus_info("x" * (MAX_SYLLABUS_CHARS + 500), mock_llm_client)

        user_prompt = mock_llm_client.simple_chat.call_args.args[1]
        assert "x" * MAX_SYLLABUS_CHARS in user_prompt
        assert "x" * (MAX_SYLLABUS_CHARS + 1) not in user_prompt

    @pytest.mark.parametrize("text", ["", "   ", "too short"])
    def test_short_text_rejected(self, mock_llm_client, text):
        with pytest.raises(ExtractionServiceError):
            extract_syllabus_info(text, mock_llm_client)

        mock_llm_client.simple_chat.assert_not_called()

    def test_rate_limit_rewritten(self, mock_llm_client, syllabus_text):
        """Rate limits become a friendly message pointing at text input."""
        mock_llm_client.simple_chat.side_effect = LLMRateLimitError("429 quota")

        with pytest.raises(ExtractionServiceError) as exc_info:
            extract_syllabus_info(syllabus_text, mock_llm_client)

        assert exc_info.value.rate_limited
        assert exc_info.value.user_message == RATE_LIMIT_MESSAGE
        assert "text input option" in exc_info.value.user_message

    def test_quota_message_counts_as_rate_limit(self, mock_llm_client, syllabus_text):
        mock_llm_client.simple_chat.side_effect = LLMError("Resource has been exhausted (quota)")

        with pytest.raises(ExtractionServiceError) as exc_info:
            extract_syllabus_info(syllabus_text, mock_llm_client)

        assert exc_info.value.rate_limited

    def test_other_errors_keep_detail(self, mock_llm_client, syllabus_text):
        mock_llm_client.simple_chat.side_effect = LLMConnectionError("server down")

        with pytest.raises(ExtractionServiceError) as exc_info:
            extract_syllabus_info(syllabus_text, mock_llm_client)

        assert not exc_info.value.rate_limited
        assert "server down" in exc_info.value.user_message

    def test_empty_answer(self, mock_llm_client, syllabus_text):
        mock_llm_client.simple_chat.return_value = "  \n"

        with pytest.raises(ExtractionServiceError):
            extract_syllabus_info(syllabus_text, mock_llm_client)


class TestIsRateLimitError:
    """Tests for is_rate_limit_error."""

    @pytest.mark.parametrize(
        "error",
        [
            LLMRateLimitError("slow down"),
            LLMError("HTTP 429"),
            LLMError("Too Many Requests"),
            RuntimeError("rate limit reached"),
        ],
    )
    def test_detects(self, error):
        assert is_rate_limit_error(error)

    def test_ignores_others(self):
        assert not is_rate_limit_error(LLMError("model not found"))
        assert not is_rate_limit_error(LLMError("took 4290 ms"))
