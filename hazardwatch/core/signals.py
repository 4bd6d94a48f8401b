"""Continuous-signal snapshot models - Pure functions.

Weather and air-quality values for one location at one point in time.
Translation from the Open-Meteo response shape lives here so the HTTP
client stays thin.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class WeatherReading:
    """Current weather/air-quality values for a location.

    Any value may be None when the provider omitted it.

    Attributes:
        temperature: Air temperature at 2 m (deg C)
        humidity: Relative humidity at 2 m (%)
        rain_sum: Rainfall (mm)
        wind_speed: Wind speed at 10 m (km/h)
        aqi: US air-quality index
        fetched_at: When the values were fetched
        manual: True for operator-simulated readings
    """
    temperature: float | None = None
    humidity: float | None = None
    rain_sum: float | None = None
    wind_speed: float | None = None
    aqi: float | None = None
    fetched_at: datetime | None = None
    manual: bool = False

    def as_dict(self) -> dict[str, float | None]:
        """Return the measured values keyed by condition name."""
        return {
            "temperature": self.temperature,
            "humidity": self.humidity,
            "rain_sum": self.rain_sum,
            "wind_speed": self.wind_speed,
            "aqi": self.aqi,
        }


def _as_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_weather_reading(
    current: dict[str, Any],
    air_quality: dict[str, Any] | None = None,
    fetched_at: datetime | None = None,
) -> WeatherReading:
    """Build a WeatherReading from Open-Meteo ``current`` blocks.

    Pure function.

    Args:
        current: ``current`` object of the forecast response
        air_quality: ``current`` object of the air-quality response
        fetched_at: Fetch timestamp

    Returns:
        WeatherReading with unparseable values left as None
    """
    air_quality = air_quality or {}
    return WeatherReading(
        temperature=_as_float(current.get("temperature_2m")),
        humidity=_as_float(current.get("relative_humidity_2m")),
        rain_sum=_as_float(current.get("rain")),
        wind_speed=_as_float(current.get("wind_speed_10m")),
        aqi=_as_float(air_quality.get("us_aqi")),
        fetched_at=fetched_at,
    )


def make_simulated_reading(
    temperature: Any = None,
    humidity: Any = None,
    rain_sum: Any = None,
    wind_speed: Any = None,
    aqi: Any = None,
    fetched_at: datetime | None = None,
) -> WeatherReading:
    """Build an operator-simulated reading.

    Missing weather values default to 0; a missing AQI stays None so
    AQI rules are skipped rather than evaluated against zero.
    """
    return WeatherReading(
        temperature=_as_float(temperature) or 0.0,
        humidity=_as_float(humidity) or 0.0,
        rain_sum=_as_float(rain_sum) or 0.0,
        wind_speed=_as_float(wind_speed) or 0.0,
        aqi=_as_float(aqi),
        fetched_at=fetched_at,
        manual=True,
    )
