"""Tests for configuration loading and validation."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from oichart.config_loader import (
    AppConfig,
    ConfigLoader,
    interpolate_env_vars,
    load_config,
    load_config_with_overrides,
    process_config_dict,
)
from oichart.constants import LogLevel


class TestEnvVarInterpolation:
    """Tests for environment variable interpolation."""

    def test_no_interpolation_needed(self) -> None:
        """Test that plain strings and non-strings pass through unchanged."""
        assert interpolate_env_vars("hello") == "hello"
        assert interpolate_env_vars(8123) == 8123
        assert interpolate_env_vars(None) is None

    def test_simple_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CH_TABLE", "rb")
        assert interpolate_env_vars("${CH_TABLE}") == "rb"

    def test_env_var_with_default(self) -> None:
        """Test ${VAR:default} with the variable unset."""
        os.environ.pop("MISSING_CH_URL", None)
        assert interpolate_env_vars("${MISSING_CH_URL:http://localhost:8123}") == "http://localhost:8123"

    def test_env_var_with_default_when_set(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SET_CH_URL", "http://db:8123")
        assert interpolate_env_vars("${SET_CH_URL:http://localhost:8123}") == "http://db:8123"

    def test_missing_var_no_default(self) -> None:
        os.environ.pop("TOTALLY_MISSING", None)
        assert interpolate_env_vars("${TOTALLY_MISSING}") == ""

    def test_mixed_text_and_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CH_HOST", "xm.local")
        assert interpolate_env_vars("http://${CH_HOST}:8123") == "http://xm.local:8123"


class TestProcessConfigDict:
    """Tests for recursive config dict processing."""

    def test_nested_dict(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NESTED_SYMBOL", "rb2510")
        result = process_config_dict({"clickhouse": {"symbol": "${NESTED_SYMBOL}"}})
        assert result["clickhouse"]["symbol"] == "rb2510"

    def test_list_processing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EXTRA_TABLE", "rb")
        result = process_config_dict({"allowed_tables": ["jm", "${EXTRA_TABLE}"]})
        assert result["allowed_tables"] == ["jm", "rb"]


class TestConfigLoader:
    """Tests for ConfigLoader class."""

    def test_load_valid_config(self, tmp_path: Path) -> None:
        config_content = """
environment:
  log_level: DEBUG

clickhouse:
  base_url: http://db.example:8123/
  database: feature
  table: rb
  symbol: rb2510

window:
  size: 300
  interval_seconds: 1.5

web:
  port: 9000
  allowed_tables: [jm, rb]
"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(config_content)

        config = ConfigLoader(config_file).load()

        assert config.environment.log_level == LogLevel.DEBUG
        assert config.clickhouse.base_url == "http://db.example:8123"
        assert config.clickhouse.table == "rb"
        assert config.clickhouse.symbol == "rb2510"
        assert config.window.size == 300
        assert config.window.interval_seconds == 1.5
        assert config.web.port == 9000
        assert config.web.allowed_tables == ["jm", "rb"]

    def test_file_not_found(self) -> None:
        loader = ConfigLoader(Path("/nonexistent/path/config.yaml"))
        with pytest.raises(FileNotFoundError):
            loader.load()

    def test_empty_config_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        config = load_config(config_file)

        assert config.clickhouse.base_url == "http://xm.local:8123"
        assert config.clickhouse.database == "feature"
        assert config.clickhouse.table == "jm"
        assert config.clickhouse.symbol == "jm2509"
        assert config.window.size == 200
        assert config.window.step == 1
        assert config.window.interval_seconds == 5.0
        assert config.web.window_size == 1000
        assert config.web.step == 50

    def test_no_path_uses_defaults(self) -> None:
        assert load_config(None) == AppConfig()

    def test_reload_config(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("clickhouse:\n  symbol: jm2509")

        loader = ConfigLoader(config_file)
        assert loader.load().clickhouse.symbol == "jm2509"

        config_file.write_text("clickhouse:\n  symbol: jm2601")
        assert loader.reload().clickhouse.symbol == "jm2601"

    def test_env_interpolation_in_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OICHART_TEST_URL", "https://ch.internal:8443")
        config_file = tmp_path / "config.yaml"
        config_file.write_text("clickhouse:\n  base_url: ${OICHART_TEST_URL:http://xm.local:8123}")

        config = load_config(config_file)
        assert config.clickhouse.base_url == "https://ch.internal:8443"


class TestConfigWithOverrides:
    """Tests for CLI override functionality."""

    def test_source_override(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("clickhouse:\n  table: jm\n  symbol: jm2509")

        config = load_config_with_overrides(config_file, table="rb", symbol="rb2510")
        assert config.clickhouse.table == "rb"
        assert config.clickhouse.symbol == "rb2510"

    def test_window_override(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        config = load_config_with_overrides(config_file, window_size=50, interval_seconds=0.5)
        assert config.window.size == 50
        assert config.window.interval_seconds == 0.5

    def test_override_is_validated(self) -> None:
        with pytest.raises(ValueError, match="at least 2"):
            load_config_with_overrides(None, window_size=1)

    def test_no_overrides_returns_loaded_config(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("clickhouse:\n  symbol: jm2601")

        config = load_config_with_overrides(config_file)
        assert config.clickhouse.symbol == "jm2601"


class TestConfigValidation:
    """Tests for configuration validation."""

    def test_invalid_base_url(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("clickhouse:\n  base_url: xm.local:8123")

        with pytest.raises(ValueError, match="http"):
            load_config(config_file)

    def test_window_too_small(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("window:\n  size: 1")

        with pytest.raises(ValueError, match="at least 2"):
            load_config(config_file)

    def test_non_positive_interval(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("window:\n  interval_seconds: 0")

        with pytest.raises(ValueError, match="positive"):
            load_config(config_file)

    def test_invalid_scroll_step(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("window:\n  scroll_step: 0")

        with pytest.raises(ValueError, match="scroll_step"):
            load_config(config_file)

    def test_invalid_port(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("web:\n  port: 70000")

        with pytest.raises(ValueError, match="1-65535"):
            load_config(config_file)
