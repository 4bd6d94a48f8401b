"""Tests for the Configuration Loader module.

Tests configuration loading from YAML files and environment variables.
"""

import pytest
from unittest.mock import patch

from hazardwatch.core.config import Config, USGS_FEED_URL
from hazardwatch.shell.config_loader import (
    _resolve_value,
    load_config,
    load_config_from_dict,
    load_config_from_env,
)


class TestResolveValue:
    """Tests for _resolve_value function."""

    def test_returns_non_string_unchanged(self):
        assert _resolve_value(123) == 123
        assert _resolve_value(None) is None

    def test_returns_plain_string_unchanged(self):
        assert _resolve_value("sqlite:///hazardwatch.db") == "sqlite:///hazardwatch.db"

    def test_resolves_env_var(self):
        with patch.dict("os.environ", {"DATABASE_URL": "postgresql://db/hazards"}):
            assert _resolve_value("${DATABASE_URL}") == "postgresql://db/hazards"

    def test_unset_env_var_left_in_place(self):
        with patch.dict("os.environ", {}, clear=True):
            assert _resolve_value("${DATABASE_URL}") == "${DATABASE_URL}"


class TestLoadConfigFromDict:
    """Tests for load_config_from_dict function."""

    def test_empty_dict_gives_defaults(self):
        assert load_config_from_dict({}) == Config()

    def test_values_are_coerced(self):
        config = load_config_from_dict({
            "weather_interval_seconds": "120",
            "match_radius_km": "250",
            "log_level": "DEBUG",
        })

        assert config.weather_interval_seconds == 120
        assert config.match_radius_km == 250.0
        assert config.log_level == "DEBUG"

    def test_unknown_keys_ignored(self):
        config = load_config_from_dict({"alert_channels": [], "earthquake_interval_seconds": 90})

        assert config.earthquake_interval_seconds == 90

    def test_none_values_keep_defaults(self):
        config = load_config_from_dict({"usgs_feed_url": None})

        assert config.usgs_feed_url == USGS_FEED_URL

    def test_unresolved_placeholder_keeps_default(self):
        with patch.dict("os.environ", {}, clear=True):
            config = load_config_from_dict({"database_url": "${DATABASE_URL}"})

        assert config.database_url == Config().database_url

    def test_invalid_number_raises(self):
        with pytest.raises(ValueError):
            load_config_from_dict({"request_timeout_seconds": "soon"})


class TestLoadConfig:
    """Tests for load_config function."""

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "missing.yaml") == Config()

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(path) == Config()

    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "database_url: sqlite:///test.db\n"
            "earthquake_interval_seconds: 45\n"
            "match_radius_km: 300\n"
        )

        config = load_config(path)

        assert config.database_url == "sqlite:///test.db"
        assert config.earthquake_interval_seconds == 45
        assert config.match_radius_km == 300.0

    def test_uses_config_path_env(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("log_level: WARNING\n")

        with patch.dict("os.environ", {"CONFIG_PATH": str(path)}):
            config = load_config()

        assert config.log_level == "WARNING"


class TestLoadConfigFromEnv:
    def test_reads_mapped_variables(self):
        env = {
            "DATABASE_URL": "postgresql://db/hazards",
            "WEATHER_INTERVAL_SECONDS": "600",
            "READING_DEDUP_WINDOW_SECONDS": "20",
        }
        with patch.dict("os.environ", env, clear=True):
            config = load_config_from_env()

        assert config.database_url == "postgresql://db/hazards"
        assert config.weather_interval_seconds == 600
        assert config.reading_dedup_window_seconds == 20
        assert config.earthquake_interval_seconds == 60

    def test_no_variables_gives_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            assert load_config_from_env() == Config()
