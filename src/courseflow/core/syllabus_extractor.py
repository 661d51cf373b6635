"""Syllabus outline extraction through the LLM.

Sends syllabus plaintext with the extraction prompt and returns the model's
free-text outline (``Course Name:``, ``Instructor:``, ``Quizzes:`` ...),
which response_parser turns into a ParsedSyllabus.
"""

from __future__ import annotations

import re

import structlog

from courseflow.llm.client import LLMClient, LLMError, LLMRateLimitError
from courseflow.prompts.registry import get_prompt

logger = structlog.get_logger(__name__)

MIN_SYLLABUS_CHARS = 10
MAX_SYLLABUS_CHARS = 60_000

RATE_LIMIT_MESSAGE = (
    "The syllabus analysis service is temporarily unavailable due to rate limits. "
    "Please try again later or use the text input option to enter the syllabus manually."
)

_RATE_LIMIT_RE = re.compile(r"\b429\b|quota|too many requests|rate limit", re.IGNORECASE)


class ExtractionServiceError(Exception):
    """The LLM extraction step failed.

    ``user_message`` is safe to show to end users.
    """

    def __init__(self, user_message: str, rate_limited: bool = False):
        self.user_message = user_message
        self.rate_limited = rate_limited
        super().__init__(user_message)


def is_rate_limit_error(error: Exception) -> bool:
    """True for provider errors that mean "slow down" or "out of quota"."""
    if isinstance(error, LLMRateLimitError):
        return True
    return bool(_RATE_LIMIT_RE.search(str(error)))


def extract_syllabus_info(
    text: str,
    client: LLMClient,
    file_name: str | None = None,
) -> str:
    """Ask the LLM for the structured syllabus outline.

    Args:
        text: Syllabus plaintext
        client: LLM client
        file_name: Source file name, for logging only

    Returns:
        Raw outline text from the model.

    Raises:
        ExtractionServiceError: If the text is too short or the LLM call fails
    """
    if not text or len(text.strip()) < MIN_SYLLABUS_CHARS:
        raise ExtractionServiceError(
            "Syllabus text is empty or too short. The document may not be readable."
        )

    if len(text) > MAX_SYLLABUS_CHARS:
        logger.warning(
            "syllabus_extractor.text_truncated",
            file=file_name,
            chars=len(text),
            limit=MAX_SYLLABUS_CHARS,
        )
        text = text[:MAX_SYLLABUS_CHARS]

    system_prompt = get_prompt("syllabus/system")
    user_prompt = get_prompt("syllabus/extract", syllabus_text=text)

    logger.info(
        "syllabus_extractor.request",
        file=file_name,
        chars=len(text),
        provider=client.config.provider,
        model=client.config.model,
    )

    try:
        outline = client.simple_chat(system_prompt, user_prompt)
    except LLMError as e:
        if is_rate_limit_error(e):
            logger.warning("syllabus_extractor.rate_limited", file=file_name, error=str(e))
            raise ExtractionServiceError(RATE_LIMIT_MESSAGE, rate_limited=True) from e
        logger.error("syllabus_extractor.failed", file=file_name, error=str(e))
        raise ExtractionServiceError(f"Error analyzing syllabus: {e}") from e

    if not outline.strip():
        raise ExtractionServiceError("The syllabus analysis service returned an empty response.")

    logger.info("syllabus_extractor.response", file=file_name, chars=len(outline))
    return outline
