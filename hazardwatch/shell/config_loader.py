"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

The Config model is defined in hazardwatch/core/config.py.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from hazardwatch.core.config import Config


logger = logging.getLogger(__name__)


# YAML key / Config field -> environment variable
ENV_VARS: dict[str, str] = {
    "database_url": "DATABASE_URL",
    "weather_api_url": "OPEN_METEO_FORECAST_URL",
    "air_quality_api_url": "OPEN_METEO_AIR_QUALITY_URL",
    "usgs_feed_url": "USGS_FEED_URL",
    "request_timeout_seconds": "REQUEST_TIMEOUT_SECONDS",
    "weather_interval_seconds": "WEATHER_INTERVAL_SECONDS",
    "earthquake_interval_seconds": "EARTHQUAKE_INTERVAL_SECONDS",
    "min_interval_seconds": "MIN_INTERVAL_SECONDS",
    "match_radius_km": "MATCH_RADIUS_KM",
    "reading_dedup_window_seconds": "READING_DEDUP_WINDOW_SECONDS",
    "log_level": "LOG_LEVEL",
}

_INT_FIELDS = {
    "request_timeout_seconds",
    "weather_interval_seconds",
    "earthquake_interval_seconds",
    "min_interval_seconds",
    "reading_dedup_window_seconds",
}
_FLOAT_FIELDS = {"match_radius_km"}


def _resolve_value(value: Any) -> Any:
    """Resolve a ``${VAR}`` environment placeholder.

    Non-strings and plain strings are returned unchanged. An unset
    variable leaves the placeholder in place and logs a warning.
    """
    if not isinstance(value, str):
        return value

    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        env_value = os.environ.get(var_name)
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", var_name)

    return value


def _coerce(name: str, value: Any) -> Any:
    """Convert a raw config value to the field's type."""
    if name in _INT_FIELDS:
        return int(value)
    if name in _FLOAT_FIELDS:
        return float(value)
    return str(value)


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only env var expansion has side effects).
    Unknown keys are ignored with a warning; keys whose placeholder does
    not resolve keep their defaults.

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    kwargs: dict[str, Any] = {}

    for key, raw in data.items():
        if key not in ENV_VARS:
            logger.warning("Ignoring unknown config key: %s", key)
            continue
        if raw is None:
            continue
        value = _resolve_value(raw)
        if isinstance(value, str) and value.startswith("${"):
            # Unresolved placeholder, keep the default
            continue
        kwargs[key] = _coerce(key, value)

    return Config(**kwargs)


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: weather every %ds, earthquakes every %ds, radius %.0f km",
        config.weather_interval_seconds,
        config.earthquake_interval_seconds,
        config.match_radius_km,
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for deployments without a YAML file. Every Config field can
    be set through the variable named in ENV_VARS; unset variables keep
    their defaults.

    Returns:
        Config object from environment
    """
    data = {
        key: os.environ[var]
        for key, var in ENV_VARS.items()
        if os.environ.get(var)
    }
    return load_config_from_dict(data)
