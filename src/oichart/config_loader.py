"""Configuration loader with Pydantic validation and environment variable interpolation."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

# Load environment variables at module level
load_dotenv(find_dotenv(usecwd=True))

from oichart.constants import (
    DEFAULT_ASCII_HEIGHT,
    DEFAULT_ASCII_WIDTH,
    DEFAULT_BASE_URL,
    DEFAULT_DATABASE,
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_SAMPLE_SIZE,
    DEFAULT_STEP,
    DEFAULT_SYMBOL,
    DEFAULT_TABLE,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_WEB_INTERVAL_SECONDS,
    DEFAULT_WEB_PORT,
    DEFAULT_WEB_STEP,
    DEFAULT_WEB_WINDOW_SIZE,
    DEFAULT_WINDOW_SIZE,
    MIN_WINDOW_POINTS,
    LogLevel,
)


def interpolate_env_vars(value: Any) -> Any:
    """
    Interpolate environment variables in string values.

    Supports formats:
    - ${VAR_NAME} - replaced by the variable, or an empty string if unset
    - ${VAR_NAME:default} - optional with default value
    """
    if not isinstance(value, str):
        return value

    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)

        env_value = os.environ.get(var_name)

        if env_value is not None:
            return env_value
        elif default is not None:
            return default
        else:
            return ""

    return re.sub(pattern, replacer, value)


def process_config_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively process config dict to interpolate env vars."""
    result = {}
    for key, value in data.items():
        if isinstance(value, dict):
            result[key] = process_config_dict(value)
        elif isinstance(value, list):
            result[key] = [
                process_config_dict(item) if isinstance(item, dict) else interpolate_env_vars(item)
                for item in value
            ]
        else:
            result[key] = interpolate_env_vars(value)
    return result


# ============================================
# Pydantic Configuration Models
# ============================================


class EnvironmentConfig(BaseModel):
    """Environment and runtime settings."""

    log_level: LogLevel = LogLevel.INFO


class ClickHouseConfig(BaseModel):
    """Upstream ClickHouse HTTP endpoint."""

    base_url: str = DEFAULT_BASE_URL
    database: str = DEFAULT_DATABASE
    table: str = DEFAULT_TABLE
    symbol: str = DEFAULT_SYMBOL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL so the query path can be appended."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got: {v}")
        return v.rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be positive, got: {v}")
        return v


class WindowConfig(BaseModel):
    """Sliding window settings for the terminal front ends."""

    size: int = DEFAULT_WINDOW_SIZE
    step: int = DEFAULT_STEP
    scroll_step: int | None = None  # Defaults to size // 4
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS

    @field_validator("size")
    @classmethod
    def validate_size(cls, v: int) -> int:
        """A window needs at least two points to draw a line."""
        if v < MIN_WINDOW_POINTS:
            raise ValueError(f"Window size must be at least {MIN_WINDOW_POINTS}, got: {v}")
        return v

    @field_validator("step")
    @classmethod
    def validate_step(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Step must be positive, got: {v}")
        return v

    @field_validator("interval_seconds")
    @classmethod
    def validate_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Interval must be positive, got: {v}")
        return v

    @model_validator(mode="after")
    def validate_scroll_step(self) -> WindowConfig:
        """Validate manual scroll step when given."""
        if self.scroll_step is not None and self.scroll_step < 1:
            raise ValueError(f"scroll_step must be positive, got: {self.scroll_step}")
        return self


class AsciiConfig(BaseModel):
    """Raw ASCII chart dimensions."""

    width: int = DEFAULT_ASCII_WIDTH
    height: int = DEFAULT_ASCII_HEIGHT

    @field_validator("width", "height")
    @classmethod
    def validate_dimension(cls, v: int) -> int:
        if v < 2:
            raise ValueError(f"Chart dimension must be at least 2, got: {v}")
        return v


class WebConfig(BaseModel):
    """Web server and polling API settings."""

    host: str = "127.0.0.1"
    port: int = DEFAULT_WEB_PORT
    window_size: int = DEFAULT_WEB_WINDOW_SIZE
    step: int = DEFAULT_WEB_STEP
    interval_seconds: float = DEFAULT_WEB_INTERVAL_SECONDS
    sample_size: int = DEFAULT_SAMPLE_SIZE
    allowed_tables: list[str] = Field(default_factory=list)

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError(f"Port must be 1-65535, got: {v}")
        return v

    @field_validator("window_size")
    @classmethod
    def validate_window_size(cls, v: int) -> int:
        if v < MIN_WINDOW_POINTS:
            raise ValueError(f"Window size must be at least {MIN_WINDOW_POINTS}, got: {v}")
        return v

    @field_validator("step", "sample_size")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Value must be positive, got: {v}")
        return v

    @field_validator("interval_seconds")
    @classmethod
    def validate_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Interval must be positive, got: {v}")
        return v


class AppConfig(BaseModel):
    """Root application configuration."""

    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    clickhouse: ClickHouseConfig = Field(default_factory=ClickHouseConfig)
    window: WindowConfig = Field(default_factory=WindowConfig)
    ascii: AsciiConfig = Field(default_factory=AsciiConfig)
    web: WebConfig = Field(default_factory=WebConfig)


# ============================================
# Configuration Loader
# ============================================


class ConfigLoader:
    """Load and validate configuration from YAML files with env var interpolation."""

    def __init__(self, config_path: str | Path) -> None:
        """
        Initialize config loader.

        Args:
            config_path: Path to the YAML configuration file.
        """
        self.config_path = Path(config_path)
        self._config: AppConfig | None = None

    def load(self) -> AppConfig:
        """
        Load and validate configuration.

        Returns:
            Validated AppConfig instance.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            yaml.YAMLError: If YAML is invalid.
            pydantic.ValidationError: If config validation fails.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        with open(self.config_path, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            raw_config = {}

        processed_config = process_config_dict(raw_config)
        self._config = AppConfig.model_validate(processed_config)

        return self._config

    @property
    def config(self) -> AppConfig:
        """Get loaded config, loading if necessary."""
        if self._config is None:
            return self.load()
        return self._config

    def reload(self) -> AppConfig:
        """Force reload configuration from disk."""
        self._config = None
        return self.load()


def load_config(config_path: str | Path | None) -> AppConfig:
    """
    Convenience function to load configuration.

    Args:
        config_path: Path to the YAML configuration file, or None for defaults.

    Returns:
        Validated AppConfig instance.
    """
    if config_path is None:
        return AppConfig()
    loader = ConfigLoader(config_path)
    return loader.load()


def load_config_with_overrides(
    config_path: str | Path | None,
    *,
    table: str | None = None,
    symbol: str | None = None,
    window_size: int | None = None,
    interval_seconds: float | None = None,
) -> AppConfig:
    """
    Load configuration with CLI overrides.

    Args:
        config_path: Path to the YAML configuration file, or None for defaults.
        table: Override source table.
        symbol: Override instrument symbol.
        window_size: Override terminal window size.
        interval_seconds: Override auto-advance interval.

    Returns:
        Validated AppConfig instance with overrides applied.
    """
    config = load_config(config_path)

    updates: dict[str, Any] = {}

    clickhouse_updates: dict[str, Any] = {}
    if table is not None:
        clickhouse_updates["table"] = table
    if symbol is not None:
        clickhouse_updates["symbol"] = symbol
    if clickhouse_updates:
        updates["clickhouse"] = config.clickhouse.model_copy(update=clickhouse_updates)

    window_updates: dict[str, Any] = {}
    if window_size is not None:
        window_updates["size"] = window_size
    if interval_seconds is not None:
        window_updates["interval_seconds"] = interval_seconds
    if window_updates:
        # model_copy() does not run validators
        updates["window"] = WindowConfig.model_validate(
            {**config.window.model_dump(), **window_updates}
        )

    if updates:
        return config.model_copy(update=updates)

    return config
