"""Configuration package for CourseFlow."""

from courseflow.config.app_config import (
    AppConfig,
    ExtractionConfig,
    LedgerConfig,
    ProviderConfig,
    SyncConfig,
    get_provider_config,
    load_app_config,
)
from courseflow.config.heuristics import (
    ParserHeuristics,
    load_heuristics,
)

__all__ = [
    "AppConfig",
    "ExtractionConfig",
    "LedgerConfig",
    "ProviderConfig",
    "SyncConfig",
    "get_provider_config",
    "load_app_config",
    "ParserHeuristics",
    "load_heuristics",
]
