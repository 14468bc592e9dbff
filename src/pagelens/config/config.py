"""
Configuration management for pagelens using Pydantic.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Literal, Optional, cast

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagelens import __version__
from pagelens.exceptions import ConfigError

# --- Setup Logging ---
log = logging.getLogger(__name__)

DEFAULT_USER_AGENT = f"pagelens/{__version__} (+https://github.com/pagelens/pagelens)"

# --- Nested Configuration Models ---


class FetchConfig(BaseModel):
    """HTTP fetch configuration."""

    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds.")
    retries: int = Field(default=3, ge=0, description="Retry attempts on timeouts and connection failures.")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent string for HTTP requests.")
    follow_redirects: bool = Field(default=True, description="Whether to follow HTTP redirects.")
    max_redirects: int = Field(default=10, ge=0, description="Maximum number of redirects to follow.")
    headers: Dict[str, str] = Field(default_factory=dict, description="Extra request headers.")


class ParserConfig(BaseModel):
    """HTML parser configuration."""

    backend: Literal["html.parser", "lxml", "html5lib"] = Field(
        default="html.parser", description="BeautifulSoup tree builder."
    )


class ExtractionConfig(BaseModel):
    """Content extraction settings."""

    snippet_min_length: int = Field(
        default=120, ge=0, description="Minimum paragraph length to stand in for a missing description."
    )
    snippet_max_length: int = Field(default=256, gt=0, description="Maximum length of the description snippet.")
    skipped_link_schemes: List[str] = Field(
        default_factory=lambda: ["javascript:", "mailto:", "tel:"],
        description="Anchor hrefs starting with these prefixes are not collected.",
    )

    @field_validator("skipped_link_schemes")
    @classmethod
    def validate_schemes(cls, v: List[str]) -> List[str]:
        if any(not scheme for scheme in v):
            raise ValueError("skipped_link_schemes must not contain empty prefixes")
        return v


class MonitoringConfig(BaseModel):
    """Logging and metrics configuration."""

    log_level: str = Field(default="WARNING", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(default=None, description="Path to log file. If None, logs to the console.")
    metrics_enabled: bool = Field(default=True, description="Record Prometheus metrics.")

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "pagelens"
    version: str = __version__
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    parser: ParserConfig = Field(default_factory=ParserConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="PAGELENS_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise ConfigError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            try:
                yaml_data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        if not isinstance(yaml_data, dict):
            raise ConfigError(f"Configuration file must contain a mapping: {path}")
        try:
            return cls.model_validate(yaml_data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {path}: {e}") from e


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    paths_to_check = [
        current_dir / "pagelens.yaml",
        current_dir / "pagelens.yml",
    ]
    for path in paths_to_check:
        if path.exists():
            return path
    return None


# --- Lazy Configuration Loader ---


class LazyConfig:
    """
    A proxy for the Config object that delays its loading and validation
    until an attribute is first accessed. This prevents configuration errors
    from crashing the application on import.
    """

    _config: ClassVar[Config | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        if self.__class__._config is None:
            with self.__class__._lock:
                if self.__class__._config is None:
                    self.__class__._config = self._load_config_with_fallback()
        return getattr(self.__class__._config, name)

    @classmethod
    def reset(cls) -> None:
        with cls._lock:
            cls._config = None

    def _load_config_with_fallback(self) -> Config:
        """Load configuration from file or fall back to defaults."""
        config_path = find_config_file()
        if config_path:
            try:
                log.info("Lazy loading configuration from: %s", config_path)
                return Config.from_yaml(config_path)
            except ConfigError as e:
                log.error(
                    "Failed to load configuration from '%s': %s. Falling back to default settings.",
                    config_path,
                    e,
                    exc_info=log.getEffectiveLevel() <= logging.DEBUG,
                )
        else:
            log.debug("No config file found. Using default settings for lazy load.")

        try:
            return Config()
        except ValidationError as e:
            log.critical("FATAL: Default configuration is invalid: %s", e, exc_info=True)
            raise RuntimeError(f"Default configuration is invalid, cannot start: {e}") from e


# --- Global Settings Instance ---
settings: "Config" = cast("Config", LazyConfig())


def load_config(path: Optional[Path] = None) -> Config:
    """Load configuration from ``path``, a discovered file, or the environment."""
    if path is not None:
        return Config.from_yaml(path)
    found = find_config_file()
    if found is not None:
        return Config.from_yaml(found)
    return Config()
