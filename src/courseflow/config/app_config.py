"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml
(or the file named by COURSEFLOW_CONFIG) and falls back to built-in
defaults when no file is present.

Usage:
    from courseflow.config.app_config import load_app_config, get_provider_config

    config = load_app_config()
    provider = get_provider_config("gemini")
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")
CONFIG_ENV_VAR = "COURSEFLOW_CONFIG"


@dataclass
class ProviderConfig:
    """Configuration for a single LLM provider."""

    base_url: str | None
    default_model: str
    api_key_env: str | None = None

    def get_api_key(self) -> str | None:
        """Get API key from environment variable."""
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


@dataclass
class LedgerConfig:
    """Where the grade ledger and its side files live."""

    database_path: Path = Path("data/database.json")
    uploads_dir: Path = Path("data/uploads")
    calendar_dir: Path = Path("data/calendars")
    clear_data_on_start: bool = False


@dataclass
class ExtractionConfig:
    """Document extraction and LLM extraction settings."""

    default_provider: str = "gemini"
    min_text_chars: int = 50
    ocr_fallback: bool = True
    temperature: float = 0.2
    max_tokens: int = 4096


@dataclass
class SyncConfig:
    """Mirroring of stored courses into the secondary grade service."""

    enabled: bool = False


@dataclass
class AppConfig:
    """Application-wide configuration."""

    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "providers": {
            "gemini": {
                "base_url": "https://generativelanguage.googleapis.com/v1beta/openai/",
                "default_model": "gemini-1.5-flash",
                "api_key_env": "GEMINI_API_KEY",
            },
            "openai": {
                "base_url": None,
                "default_model": "gpt-4o-mini",
                "api_key_env": "OPENAI_API_KEY",
            },
            "lmstudio": {
                "base_url": "http://localhost:1234/v1",
                "default_model": "llama-3.2-3b-instruct",
                "api_key_env": None,
            },
        },
        "ledger": {
            "database_path": "data/database.json",
            "uploads_dir": "data/uploads",
            "calendar_dir": "data/calendars",
            "clear_data_on_start": False,
        },
        "extraction": {
            "default_provider": "gemini",
            "min_text_chars": 50,
            "ocr_fallback": True,
            "temperature": 0.2,
            "max_tokens": 4096,
        },
        "sync": {
            "enabled": False,
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object.

    Sections missing from ``data`` take their default values, so a partial
    YAML file only needs to list what it overrides.
    """
    defaults = _get_defaults()

    providers = {}
    providers_data = data.get("providers") or defaults["providers"]
    for name, pconfig in providers_data.items():
        providers[name] = ProviderConfig(
            base_url=pconfig.get("base_url"),
            default_model=pconfig.get("default_model", "default"),
            api_key_env=pconfig.get("api_key_env"),
        )

    ledger_data = {**defaults["ledger"], **(data.get("ledger") or {})}
    ledger = LedgerConfig(
        database_path=Path(ledger_data["database_path"]),
        uploads_dir=Path(ledger_data["uploads_dir"]),
        calendar_dir=Path(ledger_data["calendar_dir"]),
        clear_data_on_start=bool(ledger_data["clear_data_on_start"]),
    )

    extraction_data = {**defaults["extraction"], **(data.get("extraction") or {})}
    extraction = ExtractionConfig(
        default_provider=extraction_data["default_provider"],
        min_text_chars=int(extraction_data["min_text_chars"]),
        ocr_fallback=bool(extraction_data["ocr_fallback"]),
        temperature=float(extraction_data["temperature"]),
        max_tokens=int(extraction_data["max_tokens"]),
    )

    sync_data = {**defaults["sync"], **(data.get("sync") or {})}
    sync = SyncConfig(enabled=bool(sync_data["enabled"]))

    return AppConfig(
        providers=providers,
        ledger=ledger,
        extraction=extraction,
        sync=sync,
    )


def _config_path() -> Path:
    """Resolve the config file path, honouring the environment override."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return CONFIG_FILE


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    config_path = _config_path()
    data: dict[str, Any]

    if config_path.exists():
        logger.debug("loading_app_config", source=str(config_path))
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def get_provider_config(provider: str) -> ProviderConfig | None:
    """Get configuration for a specific provider.

    Args:
        provider: Provider name (e.g., "gemini", "openai")

    Returns:
        ProviderConfig or None if provider not found.
    """
    config = load_app_config()
    return config.providers.get(provider)


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
