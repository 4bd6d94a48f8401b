"""Hazard Engine - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional
core and the I/O-performing shell components: fetch signals, log them,
evaluate rules, and apply the resulting alert transitions to the store.

A failure for one location never aborts the others; failures are logged
and collected on the cycle result.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from hazardwatch.core.config import Config
from hazardwatch.core.events import NearbyEvent, PointEvent, make_simulated_event
from hazardwatch.core.formatter import (
    format_alert_description,
    format_alert_title,
    format_cycle_summary,
)
from hazardwatch.core.geo import find_nearest_event, locations_within_radius
from hazardwatch.core.lifecycle import Transition, disasters_to_clear, plan_transitions
from hazardwatch.core.models import Alert, Location, NewAlert
from hazardwatch.core.rules import evaluate_rules
from hazardwatch.core.signals import WeatherReading, make_simulated_reading
from hazardwatch.exceptions import LocationNotFound, PersistenceFailure, UpstreamUnavailable
from hazardwatch.feed_cache import PointEventFeedCache
from hazardwatch.shell.store import HazardStore
from hazardwatch.shell.usgs_client import USGSClient
from hazardwatch.shell.weather_client import WeatherClient


logger = logging.getLogger(__name__)

WEATHER = "weather"
EARTHQUAKE = "earthquake"

SIMULATED_SIGNAL_FIELDS = ("temperature", "humidity", "rain_sum", "wind_speed", "aqi")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class LocationResult:
    """Alert transitions applied for one location.

    Attributes:
        location: The evaluated location
        opened: Alerts inserted this pass
        cleared: Disaster IDs auto-cleared this pass
        duplicates: Point-event IDs already alerted for this location
    """
    location: Location
    opened: list[Alert] = field(default_factory=list)
    cleared: list[int] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)


@dataclass
class CycleResult:
    """Result of one poll-evaluate-persist pass.

    Attributes:
        kind: 'weather' or 'earthquake'
        locations_checked: Active locations visited
        readings_logged: Reading or point-event rows written
        alerts_opened: Alerts inserted
        alerts_cleared: (disaster, location) pairs auto-cleared
        errors: Per-location or per-cycle failures
    """
    kind: str
    locations_checked: int = 0
    readings_logged: int = 0
    alerts_opened: list[Alert] = field(default_factory=list)
    alerts_cleared: int = 0
    errors: list[str] = field(default_factory=list)

    def absorb(self, location_result: LocationResult) -> None:
        self.alerts_opened.extend(location_result.opened)
        self.alerts_cleared += len(location_result.cleared)

    @property
    def success(self) -> bool:
        """Returns True if no errors occurred."""
        return len(self.errors) == 0

    @property
    def summary(self) -> str:
        """Human-readable summary of the cycle."""
        return format_cycle_summary(
            self.kind,
            self.locations_checked,
            len(self.alerts_opened),
            self.alerts_cleared,
            len(self.errors),
        )


@dataclass
class SimulationResult:
    """Result of an operator-simulated seismic event.

    Attributes:
        event: The simulated event
        affected: (location, distance_km) for every location in range
        alerts_opened: Alerts inserted
        errors: Per-location failures
    """
    event: PointEvent
    affected: list[tuple[Location, float]] = field(default_factory=list)
    alerts_opened: list[Alert] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return (
            f"Earthquake simulated. {len(self.affected)} location(s) within "
            f"radius alerted."
        )


class HazardEngine:
    """Coordinates hazard monitoring and the alert lifecycle.

    This class wires together:
    - Weather client (continuous signals)
    - USGS client (point events)
    - Core functions (matching, rules, lifecycle, formatting)
    - Hazard store (rules, logs, alerts)
    - Feed cache (last point-event feed, shared with the weather cycle)
    """

    def __init__(
        self,
        config: Config,
        store: HazardStore,
        weather_client: WeatherClient | None = None,
        usgs_client: USGSClient | None = None,
        feed_cache: PointEventFeedCache | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize engine.

        Args:
            config: Application configuration
            store: Relational store gateway
            weather_client: Weather client (created if not provided)
            usgs_client: USGS client (created if not provided)
            feed_cache: Shared feed cache (created if not provided)
            clock: Source of the current time
        """
        self.config = config
        self.store = store
        self.weather_client = weather_client or WeatherClient(
            forecast_url=config.weather_api_url,
            air_quality_url=config.air_quality_api_url,
            timeout=config.request_timeout_seconds,
        )
        self.usgs_client = usgs_client or USGSClient(
            feed_url=config.usgs_feed_url,
            timeout=config.request_timeout_seconds,
        )
        self.feed_cache = feed_cache or PointEventFeedCache()
        self.clock = clock

    def match_nearest_point_event(
        self,
        feed: Iterable[PointEvent],
        latitude: float,
        longitude: float,
        radius_km: float | None = None,
    ) -> NearbyEvent | None:
        """Find the strongest event within radius of a coordinate."""
        if radius_km is None:
            radius_km = self.config.match_radius_km
        return find_nearest_event(feed, latitude, longitude, radius_km)

    def _apply_transition(
        self,
        location: Location,
        transition: Transition,
        event: NearbyEvent | None,
        result: LocationResult,
    ) -> None:
        """Open a new alert for one triggered disaster."""
        outcome = transition.outcome

        if transition.is_point_event and transition.external_id:
            existing = self.store.find_alert_by_external_id(
                transition.external_id, location.id,
            )
            if existing is not None:
                logger.info(
                    "Alert for event %s already exists at %s",
                    transition.external_id,
                    location.name,
                )
                result.duplicates.append(transition.external_id)
                return

        alert = self.store.replace_active_alert(
            NewAlert(
                disaster_id=outcome.disaster_id,
                location_id=location.id,
                title=format_alert_title(outcome),
                description=format_alert_description(outcome, event),
                severity=outcome.severity.label,
                external_id=transition.external_id,
            ),
            now=self.clock(),
        )
        result.opened.append(alert)

        logger.info(
            "Opened %s alert for %s: %s=%s (threshold: %s)",
            alert.severity,
            location.name,
            outcome.condition,
            outcome.observed_value,
            outcome.threshold,
        )

    def evaluate_location(
        self,
        location: Location,
        reading: WeatherReading | None,
        event: NearbyEvent | None,
    ) -> LocationResult:
        """Evaluate rules for one location and apply alert transitions.

        Steps:
        1. Load active rules (location-specific + global)
        2. Evaluate them against whichever signals were supplied
        3. Open one alert per triggered disaster (highest severity wins)
        4. Auto-clear continuous-signal disasters that did not trigger,
           only when continuous-signal data was supplied

        Args:
            location: Location to evaluate
            reading: Continuous-signal snapshot, None if not fetched
            event: Matched point event, None if none this cycle

        Returns:
            LocationResult with the transitions applied

        Raises:
            PersistenceFailure: If a store operation fails
        """
        result = LocationResult(location=location)

        rules = self.store.get_rules_for_location(location.id)
        evaluation = evaluate_rules(rules, reading, event)
        for error in evaluation.malformed:
            logger.warning("Skipping rule at %s: %s", location.name, error)

        external_id = event.id if event is not None else None
        for transition in plan_transitions(evaluation, external_id):
            self._apply_transition(location, transition, event, result)

        for disaster_id in disasters_to_clear(evaluation, rules):
            cleared = self.store.deactivate_alerts(disaster_id, location.id)
            if cleared:
                logger.info(
                    "All-clear: deactivated %d alert(s) for disaster %d at %s",
                    cleared,
                    disaster_id,
                    location.name,
                )
                result.cleared.append(disaster_id)

        return result

    def _load_locations(self, result: CycleResult) -> list[Location]:
        try:
            return self.store.get_active_locations()
        except PersistenceFailure as e:
            result.errors.append(f"Failed to load locations: {e}")
            return []

    def run_continuous_signal_cycle(self) -> CycleResult:
        """Run one weather/AQI pass across all active locations.

        For each location: fetch current values, log them (annotated with
        the strongest nearby quake from the cached feed), then evaluate
        continuous-signal rules. A fetch failure skips only that location,
        and no auto-clear is attempted for it.

        Returns:
            CycleResult with details of what happened
        """
        result = CycleResult(kind=WEATHER)
        locations = self._load_locations(result)
        snapshot = self.feed_cache.snapshot()

        for location in locations:
            result.locations_checked += 1

            try:
                reading = self.weather_client.fetch_reading(
                    location.latitude, location.longitude,
                )
            except UpstreamUnavailable as e:
                logger.warning("Skipping weather check for %s: %s", location.name, e)
                result.errors.append(f"{location.name}: {e}")
                continue

            nearby = None
            if snapshot is not None:
                nearby = self.match_nearest_point_event(
                    snapshot.events, location.latitude, location.longitude,
                )

            try:
                if self.store.log_reading(
                    location.id,
                    reading,
                    nearby,
                    now=self.clock(),
                    window_seconds=self.config.reading_dedup_window_seconds,
                ):
                    result.readings_logged += 1
            except PersistenceFailure as e:
                result.errors.append(f"{location.name}: {e}")

            try:
                result.absorb(self.evaluate_location(location, reading, None))
            except PersistenceFailure as e:
                result.errors.append(f"{location.name}: {e}")

        logger.info("Completed: %s", result.summary)
        return result

    def run_point_event_cycle(self) -> CycleResult:
        """Run one seismic pass across all active locations.

        Fetches the feed once, refreshes the shared feed cache, then for
        each location logs and evaluates the strongest event in range.
        A feed failure skips the whole pass.

        Returns:
            CycleResult with details of what happened
        """
        result = CycleResult(kind=EARTHQUAKE)

        try:
            events = self.usgs_client.fetch_recent_events()
        except UpstreamUnavailable as e:
            logger.warning("Skipping earthquake check: %s", e)
            result.errors.append(str(e))
            return result

        self.feed_cache.store(events, self.clock())

        for location in self._load_locations(result):
            result.locations_checked += 1

            nearby = self.match_nearest_point_event(
                events, location.latitude, location.longitude,
            )
            if nearby is None:
                continue

            try:
                if self.store.log_point_event(location.id, nearby.event, now=self.clock()):
                    result.readings_logged += 1
            except PersistenceFailure as e:
                result.errors.append(f"{location.name}: {e}")

            try:
                result.absorb(self.evaluate_location(location, None, nearby))
            except PersistenceFailure as e:
                result.errors.append(f"{location.name}: {e}")

        logger.info("Completed: %s", result.summary)
        return result

    def simulate_point_event(
        self,
        latitude: float,
        longitude: float,
        magnitude: float,
    ) -> SimulationResult:
        """Inject an operator-simulated quake.

        Every active location within the match radius gets the event
        logged (flagged manual) and its rules evaluated, exactly as a
        real feed event would.

        Raises:
            PersistenceFailure: If active locations cannot be loaded
        """
        event = make_simulated_event(latitude, longitude, magnitude, self.clock())
        result = SimulationResult(event=event)

        affected = locations_within_radius(
            self.store.get_active_locations(),
            latitude,
            longitude,
            self.config.match_radius_km,
        )

        for location, distance in affected:
            result.affected.append((location, distance))
            nearby = NearbyEvent(event=event, distance_km=distance)
            try:
                self.store.log_point_event(location.id, event, now=self.clock())
                location_result = self.evaluate_location(location, None, nearby)
            except PersistenceFailure as e:
                result.errors.append(f"{location.name}: {e}")
                continue
            result.alerts_opened.extend(location_result.opened)

        logger.info(
            "Simulated M%.1f at (%.4f, %.4f): %d location(s) affected",
            magnitude,
            latitude,
            longitude,
            len(result.affected),
        )
        return result

    def simulate_continuous_signal(
        self,
        location_id: int,
        values: dict[str, Any],
    ) -> LocationResult:
        """Evaluate an operator-supplied weather/AQI reading for a location.

        Raises:
            LocationNotFound: If the location does not exist
            PersistenceFailure: If a store operation fails
        """
        location = self.store.get_location(location_id)
        if location is None:
            raise LocationNotFound(f"Location {location_id} not found")

        reading = make_simulated_reading(
            fetched_at=self.clock(),
            **{k: values.get(k) for k in SIMULATED_SIGNAL_FIELDS},
        )
        return self.evaluate_location(location, reading, None)
