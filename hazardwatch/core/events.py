"""Point-event data models and parsing - Pure functions.

This module turns the USGS GeoJSON summary feed into typed PointEvent
objects. All functions are pure with no side effects.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class PointEvent:
    """Immutable seismic event from the global feed.

    Attributes:
        id: Globally unique external event ID (USGS id)
        magnitude: Event magnitude
        place: Human-readable location description
        time: Event timestamp (UTC)
        latitude: Epicenter latitude
        longitude: Epicenter longitude
        depth_km: Depth in kilometers
        url: Event detail URL
        manual: True for operator-simulated events
    """
    id: str
    magnitude: float
    place: str
    time: datetime
    latitude: float
    longitude: float
    depth_km: float = 0.0
    url: str = ""
    manual: bool = False

    @property
    def coordinates(self) -> tuple[float, float]:
        """Return (latitude, longitude) tuple."""
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class NearbyEvent:
    """A point event matched to a location, with its distance.

    Attributes:
        event: The matched event
        distance_km: Great-circle distance from the location
    """
    event: PointEvent
    distance_km: float

    @property
    def id(self) -> str:
        return self.event.id

    @property
    def magnitude(self) -> float:
        return self.event.magnitude

    @property
    def place(self) -> str:
        return self.event.place


def parse_point_event(feature: dict[str, Any]) -> PointEvent | None:
    """Parse a single GeoJSON feature into a PointEvent.

    Pure function: takes raw dict, returns typed PointEvent or None if invalid.

    Args:
        feature: GeoJSON feature dict from the USGS feed

    Returns:
        PointEvent object or None if parsing fails
    """
    try:
        props = feature.get("properties") or {}
        geometry = feature.get("geometry") or {}
        coords = geometry.get("coordinates") or []

        if len(coords) < 2:
            return None

        # USGS uses milliseconds since epoch
        time_ms = props.get("time")
        if time_ms is None:
            return None

        magnitude = props.get("mag")
        if magnitude is None:
            return None

        event_id = feature.get("id")
        if not event_id:
            return None

        return PointEvent(
            id=event_id,
            magnitude=float(magnitude),
            place=props.get("place") or "Unknown location",
            time=datetime.fromtimestamp(time_ms / 1000, tz=timezone.utc),
            longitude=float(coords[0]),
            latitude=float(coords[1]),
            depth_km=float(coords[2]) if len(coords) > 2 and coords[2] is not None else 0.0,
            url=props.get("url") or "",
        )
    except (KeyError, TypeError, ValueError, AttributeError):
        return None


def parse_point_events(geojson: dict[str, Any]) -> list[PointEvent]:
    """Parse a USGS GeoJSON FeatureCollection into PointEvents.

    Pure function: filters out invalid features, returns valid events.

    Args:
        geojson: Full GeoJSON FeatureCollection

    Returns:
        List of valid PointEvent objects, sorted by time (newest first)
    """
    events = []

    for feature in geojson.get("features") or []:
        event = parse_point_event(feature)
        if event is not None:
            events.append(event)

    return sorted(events, key=lambda e: e.time, reverse=True)


def make_simulated_event(
    latitude: float,
    longitude: float,
    magnitude: float,
    now: datetime,
) -> PointEvent:
    """Build an operator-simulated seismic event.

    Pure function. The id is derived from the timestamp so repeated
    simulations start separate alert lifecycles.
    """
    return PointEvent(
        id=f"test-eq-{int(now.timestamp() * 1000)}",
        magnitude=float(magnitude),
        place=f"Simulated event at ({latitude:.4f}, {longitude:.4f})",
        time=now,
        latitude=float(latitude),
        longitude=float(longitude),
        manual=True,
    )
