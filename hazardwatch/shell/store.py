"""Hazard Store - Imperative Shell.

This module is the engine's only gateway to the relational store. Every
operation is a short, parameterized read or write in its own
transaction. Dedup and lifecycle decisions are made in the core module;
this module only applies them.
"""

import logging
from datetime import datetime
from typing import Any, Callable, TypeVar

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from hazardwatch.core.dedup import DEFAULT_READING_WINDOW_SECONDS, is_duplicate_reading
from hazardwatch.core.events import NearbyEvent, PointEvent
from hazardwatch.core.models import Alert, Location, NewAlert
from hazardwatch.core.rules import Rule
from hazardwatch.core.signals import WeatherReading
from hazardwatch.exceptions import PersistenceFailure
from hazardwatch.shell.database import (
    AlertRow,
    AlertRuleRow,
    DisasterRow,
    EarthquakeLogRow,
    LocationRow,
    SettingRow,
    WeatherLogRow,
    to_storage_time,
    utcnow,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")


def _to_location(row: LocationRow) -> Location:
    return Location(
        id=row.id,
        name=row.name,
        latitude=row.latitude,
        longitude=row.longitude,
        is_active=row.is_active,
    )


def _to_rule(row: AlertRuleRow) -> Rule:
    return Rule(
        id=row.id,
        disaster_id=row.disaster_id,
        condition=row.weather_condition,
        operator=row.operator,
        threshold=row.threshold_value,
        severity=row.severity_level,
        message_template=row.message_template,
        location_id=row.location_id,
        is_active=row.is_active,
    )


def _to_alert(row: AlertRow) -> Alert:
    return Alert(
        id=row.id,
        disaster_id=row.disaster_id,
        location_id=row.location_id,
        title=row.title,
        description=row.description or "",
        severity=row.severity,
        source=row.source,
        is_active=row.is_active,
        external_id=row.external_id,
        created_at=row.created_at,
        expires_at=row.expires_at,
    )


def _event_payload(nearby: NearbyEvent | None) -> dict[str, Any] | None:
    if nearby is None:
        return None
    return {
        "id": nearby.id,
        "magnitude": nearby.magnitude,
        "distance": nearby.distance_km,
        "place": nearby.place,
        "time": nearby.event.time.isoformat(),
    }


class HazardStore:
    """Parameterized reads and writes against the hazard tables.

    This is part of the imperative shell - it handles database I/O.
    SQLAlchemy errors are logged and re-raised as PersistenceFailure.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        """Initialize the store.

        Args:
            session_factory: SQLAlchemy session factory
        """
        self._session_factory = session_factory

    def _run(self, operation: str, work: Callable[[Session], T]) -> T:
        """Run ``work`` in one transaction, wrapping database errors."""
        try:
            with self._session_factory() as session:
                with session.begin():
                    return work(session)
        except SQLAlchemyError as e:
            logger.error("Store operation %s failed: %s", operation, str(e))
            raise PersistenceFailure(f"{operation} failed: {e}") from e

    # Locations and rules

    def get_active_locations(self) -> list[Location]:
        """Fetch every active location."""
        def work(session: Session) -> list[Location]:
            rows = session.scalars(
                select(LocationRow)
                .where(LocationRow.is_active.is_(True))
                .order_by(LocationRow.id)
            )
            return [_to_location(r) for r in rows]

        return self._run("get_active_locations", work)

    def get_location(self, location_id: int) -> Location | None:
        """Fetch one location by ID, active or not."""
        def work(session: Session) -> Location | None:
            row = session.get(LocationRow, location_id)
            return _to_location(row) if row is not None else None

        return self._run("get_location", work)

    def get_rules_for_location(self, location_id: int) -> list[Rule]:
        """Fetch active rules that apply to a location.

        Location-specific rules plus global rules, restricted to active
        disasters, in ascending rule ID order.
        """
        def work(session: Session) -> list[Rule]:
            rows = session.scalars(
                select(AlertRuleRow)
                .join(DisasterRow, DisasterRow.id == AlertRuleRow.disaster_id)
                .where(
                    or_(
                        AlertRuleRow.location_id == location_id,
                        AlertRuleRow.location_id.is_(None),
                    ),
                    DisasterRow.is_active.is_(True),
                    AlertRuleRow.is_active.is_(True),
                )
                .order_by(AlertRuleRow.id)
            )
            return [_to_rule(r) for r in rows]

        return self._run("get_rules_for_location", work)

    # Readings and point-event logs

    def log_reading(
        self,
        location_id: int,
        reading: WeatherReading,
        nearby: NearbyEvent | None = None,
        now: datetime | None = None,
        window_seconds: int = DEFAULT_READING_WINDOW_SECONDS,
    ) -> bool:
        """Append a reading snapshot unless one was written very recently.

        Args:
            location_id: Location the reading belongs to
            reading: Continuous-signal values
            nearby: Strongest nearby quake seen this cycle, if any
            now: Reading timestamp (defaults to current time)
            window_seconds: Duplicate window

        Returns:
            True if a row was written, False if it was a duplicate
        """
        timestamp = to_storage_time(now) if now is not None else utcnow()

        def work(session: Session) -> bool:
            last = session.scalar(
                select(func.max(WeatherLogRow.fetched_at))
                .where(WeatherLogRow.location_id == location_id)
            )
            if is_duplicate_reading(last, timestamp, window_seconds):
                return False

            session.add(WeatherLogRow(
                location_id=location_id,
                data={"weather": reading.as_dict(), "earthquake": _event_payload(nearby)},
                temperature=reading.temperature,
                humidity=reading.humidity,
                rain_sum=reading.rain_sum,
                wind_speed=reading.wind_speed,
                aqi=reading.aqi,
                earthquake_magnitude=nearby.magnitude if nearby else None,
                earthquake_id=nearby.id if nearby else None,
                fetched_at=timestamp,
            ))
            return True

        written = self._run("log_reading", work)
        if written:
            logger.info("Weather/AQI logged for location %d", location_id)
        else:
            logger.debug("Skipped duplicate reading for location %d", location_id)
        return written

    def log_point_event(
        self,
        location_id: int,
        event: PointEvent,
        now: datetime | None = None,
    ) -> bool:
        """Record the strongest nearby event for a location.

        A repeat of the same (location, event ID) only refreshes the fetch
        time; it is a no-op, not an error.

        Returns:
            True if a new row was written, False if already logged
        """
        timestamp = to_storage_time(now) if now is not None else utcnow()

        def work(session: Session) -> bool:
            existing = session.scalar(
                select(EarthquakeLogRow).where(
                    EarthquakeLogRow.location_id == location_id,
                    EarthquakeLogRow.usgs_id == event.id,
                )
            )
            if existing is not None:
                existing.fetched_at = timestamp
                return False

            session.add(EarthquakeLogRow(
                location_id=location_id,
                magnitude=event.magnitude,
                usgs_id=event.id,
                is_manual=event.manual,
                fetched_at=timestamp,
            ))
            return True

        try:
            return self._run("log_point_event", work)
        except PersistenceFailure as e:
            # Lost a race with another writer on the unique key
            if isinstance(e.__cause__, IntegrityError):
                return False
            raise

    # Alerts

    def find_alert_by_external_id(self, external_id: str, location_id: int) -> Alert | None:
        """Find any alert (active or not) for a point event at a location."""
        def work(session: Session) -> Alert | None:
            row = session.scalar(
                select(AlertRow)
                .where(
                    AlertRow.external_id == external_id,
                    AlertRow.location_id == location_id,
                )
                .limit(1)
            )
            return _to_alert(row) if row is not None else None

        return self._run("find_alert_by_external_id", work)

    def get_active_alert(self, disaster_id: int, location_id: int) -> Alert | None:
        """Fetch the active alert for a (disaster, location), if any."""
        def work(session: Session) -> Alert | None:
            row = session.scalar(
                select(AlertRow)
                .where(
                    AlertRow.disaster_id == disaster_id,
                    AlertRow.location_id == location_id,
                    AlertRow.is_active.is_(True),
                )
                .order_by(AlertRow.created_at.desc(), AlertRow.id.desc())
                .limit(1)
            )
            return _to_alert(row) if row is not None else None

        return self._run("get_active_alert", work)

    def get_active_alerts(self, location_id: int | None = None) -> list[Alert]:
        """Fetch active alerts, optionally for one location."""
        def work(session: Session) -> list[Alert]:
            query = select(AlertRow).where(AlertRow.is_active.is_(True))
            if location_id is not None:
                query = query.where(AlertRow.location_id == location_id)
            rows = session.scalars(query.order_by(AlertRow.created_at, AlertRow.id))
            return [_to_alert(r) for r in rows]

        return self._run("get_active_alerts", work)

    def get_alert_history(self, disaster_id: int, location_id: int) -> list[Alert]:
        """Fetch every alert row for a (disaster, location), oldest first."""
        def work(session: Session) -> list[Alert]:
            rows = session.scalars(
                select(AlertRow)
                .where(
                    AlertRow.disaster_id == disaster_id,
                    AlertRow.location_id == location_id,
                )
                .order_by(AlertRow.created_at, AlertRow.id)
            )
            return [_to_alert(r) for r in rows]

        return self._run("get_alert_history", work)

    def deactivate_alerts(self, disaster_id: int, location_id: int) -> int:
        """Deactivate the active alert(s) for a (disaster, location).

        Returns:
            Number of rows deactivated
        """
        def work(session: Session) -> int:
            result = session.execute(
                update(AlertRow)
                .where(
                    AlertRow.disaster_id == disaster_id,
                    AlertRow.location_id == location_id,
                    AlertRow.is_active.is_(True),
                )
                .values(is_active=False)
            )
            return result.rowcount or 0

        return self._run("deactivate_alerts", work)

    def replace_active_alert(self, alert: NewAlert, now: datetime | None = None) -> Alert:
        """Deactivate the current alert for the pair and insert a new one.

        Both writes share one transaction, so the pair never has two
        active rows and never loses its active row to a half-applied
        transition.

        Returns:
            The inserted alert
        """
        timestamp = to_storage_time(now) if now is not None else utcnow()

        def work(session: Session) -> Alert:
            session.execute(
                update(AlertRow)
                .where(
                    AlertRow.disaster_id == alert.disaster_id,
                    AlertRow.location_id == alert.location_id,
                    AlertRow.is_active.is_(True),
                )
                .values(is_active=False)
            )
            row = AlertRow(
                disaster_id=alert.disaster_id,
                location_id=alert.location_id,
                title=alert.title,
                description=alert.description,
                severity=alert.severity,
                source=alert.source,
                is_active=True,
                external_id=alert.external_id,
                created_at=timestamp,
            )
            session.add(row)
            session.flush()
            return _to_alert(row)

        return self._run("replace_active_alert", work)

    # Settings

    def get_setting(self, key: str) -> str | None:
        """Read one settings value fresh from the store.

        Returns None when the key is absent or the read fails, so callers
        fall back to their defaults.
        """
        try:
            return self._run(
                "get_setting",
                lambda session: session.scalar(
                    select(SettingRow.setting_value).where(SettingRow.setting_key == key)
                ),
            )
        except PersistenceFailure:
            return None
