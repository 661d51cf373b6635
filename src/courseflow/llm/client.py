"""LLM client for Gemini / OpenAI-compatible providers.

Provides a unified interface for the syllabus extraction call, speaking the
OpenAI chat-completions protocol to every provider.

Supported providers:
- gemini: Google Gemini through its OpenAI-compatible endpoint
- openai: OpenAI API
- lmstudio: Local LM Studio server (OpenAI-compatible API)
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from typing import Any, Literal

import openai
import structlog
from openai import OpenAI

from courseflow.config.app_config import AppConfig, load_app_config

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

Provider = Literal["gemini", "openai", "lmstudio"]

PROVIDER_DEFAULTS: dict[str, dict[str, Any]] = {
    "gemini": {
        "base_url": "https://generativelanguage.googleapis.com/v1beta/openai/",
        "api_key_env": "GEMINI_API_KEY",
    },
    "openai": {
        "base_url": "https://api.openai.com/v1",
        "api_key_env": "OPENAI_API_KEY",
    },
    "lmstudio": {
        "base_url": "http://localhost:1234/v1",
        "api_key": "lm-studio",  # LM Studio ignores the key
    },
}

# Some local models emit reasoning blocks before the answer
SANITIZE_PATTERNS = [
    re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<analysis>.*?</analysis>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<reasoning>.*?</reasoning>", re.DOTALL | re.IGNORECASE),
]


def strip_reasoning(text: str) -> str:
    """Remove thinking/reasoning tags from model output."""
    result = text
    for pattern in SANITIZE_PATTERNS:
        result = pattern.sub("", result)
    return result.strip()


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class LLMConfig:
    """Configuration for LLM client."""

    provider: Provider = "gemini"
    base_url: str = PROVIDER_DEFAULTS["gemini"]["base_url"]
    model: str = "gemini-1.5-flash"
    temperature: float = 0.2
    max_tokens: int = 4096
    timeout: int = 120
    api_key: str | None = None

    @classmethod
    def from_app_config(
        cls,
        provider: str | None = None,
        app_config: AppConfig | None = None,
    ) -> LLMConfig:
        """Build client configuration from the application config.

        Args:
            provider: Provider name; defaults to extraction.default_provider
            app_config: Loaded config (loads from YAML if not provided)
        """
        app_config = app_config or load_app_config()
        provider = provider or app_config.extraction.default_provider
        defaults = PROVIDER_DEFAULTS.get(provider, {})
        pconfig = app_config.providers.get(provider)

        if pconfig is None:
            logger.warning("llm.provider_not_configured", provider=provider)
            api_key = defaults.get("api_key")
            return cls(
                provider=provider,
                base_url=defaults.get("base_url", ""),
                temperature=app_config.extraction.temperature,
                max_tokens=app_config.extraction.max_tokens,
                api_key=api_key,
            )

        api_key = pconfig.get_api_key() or defaults.get("api_key")
        return cls(
            provider=provider,
            base_url=pconfig.base_url or defaults.get("base_url", ""),
            model=pconfig.default_model,
            temperature=app_config.extraction.temperature,
            max_tokens=app_config.extraction.max_tokens,
            api_key=api_key,
        )


@dataclass
class Message:
    """A chat message."""

    role: Literal["system", "user", "assistant"]
    content: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for API call."""
        return {"role": self.role, "content": self.content}


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: str
    model: str
    provider: str
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: int = 0

    @property
    def total_tokens(self) -> int:
        """Get total token count."""
        return self.usage.get("total_tokens", 0)


class LLMError(Exception):
    """Error during LLM interaction."""

    pass


class LLMConnectionError(LLMError):
    """Error connecting to LLM server."""

    pass


class LLMRateLimitError(LLMError):
    """Provider refused the request because of rate limits or quota."""

    pass


class LLMResponseError(LLMError):
    """Error in LLM response."""

    pass


# =============================================================================
# LLM CLIENT
# =============================================================================


class LLMClient:
    """Unified client for LLM interactions over the OpenAI-compatible API."""

    def __init__(
        self,
        config: LLMConfig | None = None,
        provider: str | None = None,
        model: str | None = None,
    ):
        """Initialize LLM client.

        Args:
            config: LLM configuration (built from app config if not provided)
            provider: Override provider from config
            model: Override model from config
        """
        if config is None:
            config = LLMConfig.from_app_config(provider)
        elif provider is not None and provider != config.provider:
            config = LLMConfig.from_app_config(provider)

        self.config = config

        if model is not None:
            self.config.model = model

        self._client = OpenAI(
            base_url=self.config.base_url,
            api_key=self.config.api_key or "not-needed",
            timeout=self.config.timeout,
        )

        logger.info(
            "llm.client_initialized",
            provider=self.config.provider,
            model=self.config.model,
            base_url=self.config.base_url,
        )

    def chat(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Send chat completion request.

        Args:
            messages: List of messages in conversation
            temperature: Override default temperature
            max_tokens: Override default max tokens

        Returns:
            LLMResponse with content and metadata

        Raises:
            LLMConnectionError: If cannot connect to server
            LLMRateLimitError: If the provider reports rate limiting or quota
            LLMResponseError: If response is invalid
            LLMError: Any other API failure
        """
        if temperature is None:
            temperature = self.config.temperature
        if max_tokens is None:
            max_tokens = self.config.max_tokens

        request_kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        start_time = time.time()

        try:
            response = self._client.chat.completions.create(**request_kwargs)
        except openai.APIConnectionError as e:
            raise LLMConnectionError(
                f"Could not connect to {self.config.provider} at {self.config.base_url}: {e}"
            ) from e
        except openai.RateLimitError as e:
            raise LLMRateLimitError(f"Rate limit reached for {self.config.provider}: {e}") from e
        except openai.OpenAIError as e:
            raise LLMError(f"LLM call failed: {e}") from e

        latency_ms = int((time.time() - start_time) * 1000)

        if not response.choices:
            raise LLMResponseError("Empty response from LLM")

        content = response.choices[0].message.content or ""

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        logger.debug(
            "llm.response",
            provider=self.config.provider,
            model=response.model,
            tokens=usage.get("total_tokens", 0),
            latency_ms=latency_ms,
        )

        return LLMResponse(
            content=content,
            model=response.model,
            provider=self.config.provider,
            usage=usage,
            latency_ms=latency_ms,
        )

    def simple_chat(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Single-turn chat; reasoning tags are stripped from the reply.

        Returns:
            Response content as string
        """
        messages = [
            Message(role="system", content=system_prompt),
            Message(role="user", content=user_message),
        ]

        response = self.chat(
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        return strip_reasoning(response.content)

    def is_available(self) -> bool:
        """Check if LLM server is available.

        Returns:
            True if server responds, False otherwise
        """
        try:
            self._client.models.list()
            return True
        except openai.OpenAIError:
            return False
