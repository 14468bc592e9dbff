"""Configuration models and loaders."""

from .config import (
    DEFAULT_USER_AGENT,
    Config,
    ExtractionConfig,
    FetchConfig,
    MonitoringConfig,
    ParserConfig,
    find_config_file,
    load_config,
    settings,
)

__all__ = [
    "DEFAULT_USER_AGENT",
    "Config",
    "ExtractionConfig",
    "FetchConfig",
    "MonitoringConfig",
    "ParserConfig",
    "find_config_file",
    "load_config",
    "settings",
]
