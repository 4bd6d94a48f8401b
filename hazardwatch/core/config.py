"""Configuration models - Pure data structures.

These are domain models for configuration plus the pure schedule maths
that turn a settings value into a poll delay. The actual loading (I/O)
is handled by the shell layer.
"""

import re
from dataclasses import dataclass, field


OPEN_METEO_FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
OPEN_METEO_AIR_QUALITY_URL = "https://air-quality-api.open-meteo.com/v1/air-quality"
USGS_FEED_URL = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary/all_hour.geojson"

# Settings store keys for the poll interval overrides
WEATHER_INTERVAL_KEY = "weather_fetch_interval"
EARTHQUAKE_INTERVAL_KEY = "earthquake_fetch_interval"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        database_url: SQLAlchemy URL of the relational store
        weather_api_url: Open-Meteo forecast endpoint
        air_quality_api_url: Open-Meteo air-quality endpoint
        usgs_feed_url: USGS GeoJSON summary feed
        request_timeout_seconds: Timeout for each outbound fetch
        weather_interval_seconds: Default continuous-signal poll interval
        earthquake_interval_seconds: Default point-event poll interval
        min_interval_seconds: Floor applied to both intervals
        match_radius_km: Point-event match radius
        reading_dedup_window_seconds: Duplicate window for readings
        log_level: Logging level name
    """
    database_url: str = "sqlite:///hazardwatch.db"
    weather_api_url: str = OPEN_METEO_FORECAST_URL
    air_quality_api_url: str = OPEN_METEO_AIR_QUALITY_URL
    usgs_feed_url: str = USGS_FEED_URL
    request_timeout_seconds: int = 10
    weather_interval_seconds: int = 300
    earthquake_interval_seconds: int = 60
    min_interval_seconds: int = 30
    match_radius_km: float = 500.0
    reading_dedup_window_seconds: int = 30
    log_level: str = "INFO"


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def parse_interval(raw: str | None) -> int | None:
    """Parse an interval setting as integer seconds.

    Pure function. Only the leading integer is read, so '120s' gives 120
    and '90.5' gives 90. Returns None when there is no leading integer.
    """
    if raw is None:
        return None
    match = _LEADING_INT.match(str(raw))
    if match is None:
        return None
    return int(match.group(1))


def resolve_interval(raw: str | None, default: int, floor: int) -> int:
    """Turn a settings value into a poll delay in seconds.

    Pure function.

    Args:
        raw: Value from the settings store, None if the key is absent
        default: Interval used when the value is absent or unparseable
        floor: Minimum interval

    Returns:
        Interval in seconds, never below ``floor``
    """
    seconds = parse_interval(raw)
    if seconds is None:
        seconds = default
    return max(floor, seconds)


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    if not config.database_url:
        errors.append(ValidationError(
            field="database_url",
            message="Database URL is required",
        ))

    for name in ("weather_api_url", "air_quality_api_url", "usgs_feed_url"):
        url = getattr(config, name)
        if not url.startswith(("http://", "https://")):
            errors.append(ValidationError(
                field=name,
                message=f"Expected an http(s) URL, got {url!r}",
            ))

    if config.request_timeout_seconds <= 0:
        errors.append(ValidationError(
            field="request_timeout_seconds",
            message=f"Timeout must be positive, got {config.request_timeout_seconds}",
        ))

    if config.min_interval_seconds <= 0:
        errors.append(ValidationError(
            field="min_interval_seconds",
            message=f"Interval floor must be positive, got {config.min_interval_seconds}",
        ))

    for name in ("weather_interval_seconds", "earthquake_interval_seconds"):
        seconds = getattr(config, name)
        if seconds < config.min_interval_seconds:
            errors.append(ValidationError(
                field=name,
                message=(
                    f"{seconds}s is below the {config.min_interval_seconds}s floor "
                    f"and will be clamped"
                ),
                severity="warning",
            ))

    if config.match_radius_km <= 0:
        errors.append(ValidationError(
            field="match_radius_km",
            message=f"Match radius must be positive, got {config.match_radius_km}",
        ))

    if config.reading_dedup_window_seconds < 0:
        errors.append(ValidationError(
            field="reading_dedup_window_seconds",
            message="Duplicate window cannot be negative",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
