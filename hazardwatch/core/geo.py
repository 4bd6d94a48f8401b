"""Geographic calculations - Pure functions.

Distance calculations and nearest-event matching for point-event hazards.
All functions are pure with no side effects, so one feed snapshot can be
matched against many locations in the same cycle.
"""

import math
from typing import Iterable, Protocol, TypeVar

from hazardwatch.core.events import NearbyEvent, PointEvent


# Mean Earth radius in kilometers
EARTH_RADIUS_KM = 6371.0

# Default match radius for seismic events
DEFAULT_RADIUS_KM = 500.0


class HasCoordinates(Protocol):
    latitude: float
    longitude: float


T = TypeVar("T", bound=HasCoordinates)


def calculate_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate distance between two points using Haversine formula.

    Pure function.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def find_nearest_event(
    events: Iterable[PointEvent],
    target_lat: float,
    target_lon: float,
    radius_km: float = DEFAULT_RADIUS_KM,
) -> NearbyEvent | None:
    """Find the representative event for a location.

    Pure function.

    Among the events within ``radius_km`` of the target, returns the one
    with the highest magnitude, not the closest one. On equal magnitude
    the first event seen is kept.

    Args:
        events: Feed snapshot to search
        target_lat: Location latitude
        target_lon: Location longitude
        radius_km: Match radius in kilometers (inclusive)

    Returns:
        NearbyEvent for the strongest event in range, or None
    """
    best: NearbyEvent | None = None

    for event in events:
        distance = calculate_distance(
            target_lat,
            target_lon,
            event.latitude,
            event.longitude,
        )
        if distance > radius_km:
            continue

        if best is None or event.magnitude > best.magnitude:
            best = NearbyEvent(event=event, distance_km=distance)

    return best


def locations_within_radius(
    locations: Iterable[T],
    center_lat: float,
    center_lon: float,
    radius_km: float = DEFAULT_RADIUS_KM,
) -> list[tuple[T, float]]:
    """Return (location, distance_km) for every location within radius.

    Pure function. Used to fan a single simulated epicenter out to the
    locations it affects.
    """
    result = []
    for location in locations:
        distance = calculate_distance(
            center_lat,
            center_lon,
            location.latitude,
            location.longitude,
        )
        if distance <= radius_km:
            result.append((location, distance))
    return result
