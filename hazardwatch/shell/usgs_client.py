"""USGS Feed Client - Imperative Shell.

This module handles HTTP communication with the USGS earthquake summary
feed. All I/O is contained here; parsing and matching are in the core
module.
"""

import logging
from typing import Any

import requests

from hazardwatch.core.config import USGS_FEED_URL
from hazardwatch.core.events import PointEvent, parse_point_events
from hazardwatch.exceptions import UpstreamUnavailable


logger = logging.getLogger(__name__)


# Default timeout for feed requests (seconds)
DEFAULT_TIMEOUT = 10


class USGSClient:
    """Client for fetching the recent global seismic feed.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        feed_url: str = USGS_FEED_URL,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize USGS client.

        Args:
            feed_url: GeoJSON summary feed URL
            timeout: Request timeout in seconds
        """
        self.feed_url = feed_url
        self.timeout = timeout

    def fetch_feed(self) -> dict[str, Any]:
        """Fetch the raw GeoJSON feed.

        This method performs HTTP I/O.

        Returns:
            Raw GeoJSON FeatureCollection

        Raises:
            UpstreamUnavailable: If the request fails or times out
        """
        logger.info("Fetching seismic feed from %s", self.feed_url)

        try:
            response = requests.get(self.feed_url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Failed to fetch seismic feed: %s", str(e))
            raise UpstreamUnavailable(f"Seismic feed unavailable: {e}") from e

        if not isinstance(data, dict):
            raise UpstreamUnavailable("Seismic feed returned a non-object body")

        return data

    def fetch_recent_events(self) -> list[PointEvent]:
        """Fetch and parse the recent events.

        Returns:
            Parsed events, newest first

        Raises:
            UpstreamUnavailable: If the request fails or times out
        """
        events = parse_point_events(self.fetch_feed())
        logger.info("Fetched %d seismic events", len(events))
        return events
