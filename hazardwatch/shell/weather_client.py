"""Open-Meteo Client - Imperative Shell.

This module fetches current weather and air-quality values for a
coordinate. All I/O is contained here; translation into a
WeatherReading is in the core module.
"""

import logging
from datetime import datetime, timezone
from typing import Any

import requests

from hazardwatch.core.config import OPEN_METEO_AIR_QUALITY_URL, OPEN_METEO_FORECAST_URL
from hazardwatch.core.signals import WeatherReading, parse_weather_reading
from hazardwatch.exceptions import UpstreamUnavailable


logger = logging.getLogger(__name__)


# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 10

WEATHER_FIELDS = "temperature_2m,relative_humidity_2m,rain,wind_speed_10m"
AIR_QUALITY_FIELDS = "us_aqi"


class WeatherClient:
    """Client for the Open-Meteo forecast and air-quality APIs.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        forecast_url: str = OPEN_METEO_FORECAST_URL,
        air_quality_url: str = OPEN_METEO_AIR_QUALITY_URL,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize weather client.

        Args:
            forecast_url: Forecast endpoint
            air_quality_url: Air-quality endpoint
            timeout: Request timeout in seconds
        """
        self.forecast_url = forecast_url
        self.air_quality_url = air_quality_url
        self.timeout = timeout

    def _get_current(self, url: str, latitude: float, longitude: float, fields: str) -> dict[str, Any]:
        """GET one endpoint and return its ``current`` object."""
        params = {
            "latitude": str(latitude),
            "longitude": str(longitude),
            "current": fields,
            "timezone": "auto",
        }
        response = requests.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()

        current = response.json().get("current")
        if not isinstance(current, dict):
            raise ValueError(f"No 'current' block in response from {url}")
        return current

    def fetch_reading(self, latitude: float, longitude: float) -> WeatherReading:
        """Fetch current weather and AQI for a coordinate.

        This method performs HTTP I/O.

        Args:
            latitude: Location latitude
            longitude: Location longitude

        Returns:
            WeatherReading for the coordinate

        Raises:
            UpstreamUnavailable: If either request fails or times out
        """
        try:
            weather = self._get_current(
                self.forecast_url, latitude, longitude, WEATHER_FIELDS,
            )
            air_quality = self._get_current(
                self.air_quality_url, latitude, longitude, AIR_QUALITY_FIELDS,
            )
        except (requests.RequestException, ValueError, AttributeError) as e:
            logger.error(
                "Failed to fetch weather/AQI for (%s, %s): %s",
                latitude,
                longitude,
                str(e),
            )
            raise UpstreamUnavailable(f"Weather provider unavailable: {e}") from e

        return parse_weather_reading(
            weather,
            air_quality,
            fetched_at=datetime.now(timezone.utc),
        )
