"""Domain records shared by the core and the shell.

Locations and disasters are owned by the management layer; the engine
only reads them. Alerts are created and deactivated by the engine, never
deleted.
"""

from dataclasses import dataclass
from datetime import datetime


# Alert sources
SOURCE_SYSTEM = "System"
SOURCE_ADMIN = "Admin"


@dataclass(frozen=True)
class Location:
    """A monitored location.

    Attributes:
        id: Location ID
        name: Display name
        latitude: Latitude
        longitude: Longitude
        is_active: Only active locations are polled
    """
    id: int
    name: str
    latitude: float
    longitude: float
    is_active: bool = True


@dataclass(frozen=True)
class Alert:
    """One row of alert history for a (disaster, location) pair.

    Attributes:
        id: Alert ID
        disaster_id: Disaster type
        location_id: Location
        title: Short title
        description: Human-readable detail
        severity: Severity label as stored
        source: SOURCE_SYSTEM or SOURCE_ADMIN
        is_active: At most one active row per (disaster, location)
        external_id: Point-event ID for seismic alerts, None otherwise
        created_at: Creation timestamp
        expires_at: Optional expiry
    """
    id: int
    disaster_id: int
    location_id: int
    title: str
    description: str
    severity: str
    source: str = SOURCE_SYSTEM
    is_active: bool = True
    external_id: str | None = None
    created_at: datetime | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True)
class NewAlert:
    """An alert about to be inserted.

    Attributes:
        disaster_id: Disaster type
        location_id: Location
        title: Short title
        description: Human-readable detail
        severity: Severity label
        external_id: Point-event ID, None for continuous-signal alerts
        source: SOURCE_SYSTEM or SOURCE_ADMIN
    """
    disaster_id: int
    location_id: int
    title: str
    description: str
    severity: str
    external_id: str | None = None
    source: str = SOURCE_SYSTEM
