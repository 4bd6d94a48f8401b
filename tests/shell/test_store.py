"""Tests for HazardStore against an in-memory SQLite database."""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from hazardwatch.core.events import NearbyEvent, PointEvent
from hazardwatch.core.lifecycle import active_alert_violations
from hazardwatch.core.models import NewAlert
from hazardwatch.core.signals import WeatherReading
from hazardwatch.exceptions import PersistenceFailure
from hazardwatch.shell.database import (
    AlertRuleRow,
    DisasterRow,
    EarthquakeLogRow,
    LocationRow,
    SettingRow,
    WeatherLogRow,
)
from hazardwatch.shell.store import HazardStore


NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_event(event_id="us1", magnitude=6.8, manual=False):
    return PointEvent(
        id=event_id,
        magnitude=magnitude,
        place="Near Dhaka",
        time=NOW,
        latitude=24.0,
        longitude=90.5,
        manual=manual,
    )


def new_alert(disaster_id=1, location_id=1, severity="Medium", external_id=None):
    return NewAlert(
        disaster_id=disaster_id,
        location_id=location_id,
        title="Automated Alert: Test",
        description="rain_sum is 30 (threshold: 25).",
        severity=severity,
        external_id=external_id,
    )


class TestLocationsAndRules:
    """Tests for location and rule reads."""

    def test_active_locations_only(self, store, seed):
        seed(
            LocationRow(id=1, name="Dhaka", latitude=23.81, longitude=90.41, is_active=True),
            LocationRow(id=2, name="Sylhet", latitude=24.89, longitude=91.87, is_active=False),
        )

        locations = store.get_active_locations()

        assert [loc.name for loc in locations] == ["Dhaka"]

    def test_get_location_includes_inactive(self, store, seed):
        seed(LocationRow(id=2, name="Sylhet", latitude=24.89, longitude=91.87, is_active=False))

        assert store.get_location(2).name == "Sylhet"
        assert store.get_location(99) is None

    def test_rules_include_location_specific_and_global(self, store, seed, flood_rules, quake_rule):
        seed(
            LocationRow(id=2, name="Sylhet", latitude=24.89, longitude=91.87),
            AlertRuleRow(
                id=3, location_id=2, disaster_id=1, weather_condition="rain_sum",
                operator=">=", threshold_value=10, severity_level="Low",
            ),
        )

        rules = store.get_rules_for_location(1)

        assert [r.id for r in rules] == [1, 2, 10]
        assert rules[2].location_id is None
        assert rules[0].threshold == 25.0
        assert rules[0].condition == "rain_sum"

    def test_inactive_rules_and_disasters_excluded(self, store, seed, dhaka):
        seed(
            DisasterRow(id=3, name="Heatwave", is_active=False),
            AlertRuleRow(
                id=1, location_id=1, disaster_id=3, weather_condition="temperature",
                operator=">", threshold_value=40, severity_level="High",
            ),
            AlertRuleRow(
                id=2, location_id=1, disaster_id=1, weather_condition="rain_sum",
                operator=">", threshold_value=40, severity_level="High", is_active=False,
            ),
        )

        assert store.get_rules_for_location(1) == []


class TestLogReading:
    """Tests for log_reading() and its duplicate window."""

    def test_writes_reading_with_nearby_event(self, store, session_factory, dhaka):
        reading = WeatherReading(temperature=29.0, humidity=88.0, rain_sum=30.0, wind_speed=12.0, aqi=80.0)
        nearby = NearbyEvent(event=make_event(), distance_km=23.0)

        assert store.log_reading(1, reading, nearby, now=NOW) is True

        with session_factory() as session:
            row = session.scalar(select(WeatherLogRow))
        assert row.rain_sum == 30.0
        assert row.aqi == 80.0
        assert row.earthquake_id == "us1"
        assert row.earthquake_magnitude == 6.8
        assert row.data["weather"]["rain_sum"] == 30.0
        assert row.data["earthquake"]["id"] == "us1"

    def test_duplicate_within_window_skipped(self, store, session_factory, dhaka):
        reading = WeatherReading(rain_sum=1.0)

        assert store.log_reading(1, reading, now=NOW) is True
        assert store.log_reading(1, reading, now=NOW + timedelta(seconds=10)) is False
        assert store.log_reading(1, reading, now=NOW + timedelta(seconds=45)) is True

        with session_factory() as session:
            assert len(session.scalars(select(WeatherLogRow)).all()) == 2

    def test_window_is_per_location(self, store, seed, dhaka):
        seed(LocationRow(id=2, name="Sylhet", latitude=24.89, longitude=91.87))
        reading = WeatherReading(rain_sum=1.0)

        assert store.log_reading(1, reading, now=NOW) is True
        assert store.log_reading(2, reading, now=NOW) is True


class TestLogPointEvent:
    """Tests for log_point_event()."""

    def test_first_delivery_written(self, store, session_factory, dhaka):
        assert store.log_point_event(1, make_event(manual=True), now=NOW) is True

        with session_factory() as session:
            row = session.scalar(select(EarthquakeLogRow))
        assert row.usgs_id == "us1"
        assert row.is_manual is True

    def test_redelivery_is_noop_that_refreshes_fetch_time(self, store, session_factory, dhaka):
        store.log_point_event(1, make_event(), now=NOW)

        later = NOW + timedelta(minutes=5)
        assert store.log_point_event(1, make_event(), now=later) is False

        with session_factory() as session:
            rows = session.scalars(select(EarthquakeLogRow)).all()
        assert len(rows) == 1
        assert rows[0].fetched_at == later.replace(tzinfo=None)

    def test_same_event_different_location_is_logged(self, store, seed, dhaka):
        seed(LocationRow(id=2, name="Sylhet", latitude=24.89, longitude=91.87))

        assert store.log_point_event(1, make_event(), now=NOW) is True
        assert store.log_point_event(2, make_event(), now=NOW) is True


class TestAlerts:
    """Tests for alert reads and lifecycle writes."""

    def test_replace_keeps_single_active_row(self, store, dhaka):
        first = store.replace_active_alert(new_alert(severity="Medium"), now=NOW)
        second = store.replace_active_alert(new_alert(severity="Medium"), now=NOW + timedelta(minutes=5))

        history = store.get_alert_history(1, 1)

        assert [a.id for a in history] == [first.id, second.id]
        assert [a.is_active for a in history] == [False, True]
        assert store.get_active_alert(1, 1).id == second.id

    def test_no_pair_ever_has_two_active_alerts(self, store, dhaka):
        for minute, (disaster_id, severity) in enumerate(
            [(1, "Medium"), (2, "Critical"), (1, "High"), (1, "Medium"), (2, "Critical")]
        ):
            store.replace_active_alert(
                new_alert(disaster_id=disaster_id, severity=severity),
                now=NOW + timedelta(minutes=minute),
            )

            assert active_alert_violations(store.get_active_alerts()) == []

        assert len(store.get_active_alerts()) == 2

    def test_replace_does_not_touch_other_pairs(self, store, dhaka):
        quake = store.replace_active_alert(new_alert(disaster_id=2, external_id="us1"), now=NOW)
        store.replace_active_alert(new_alert(disaster_id=1), now=NOW)

        assert store.get_active_alert(2, 1).id == quake.id

    def test_find_by_external_id_includes_inactive(self, store, dhaka):
        store.replace_active_alert(new_alert(disaster_id=2, external_id="us1"), now=NOW)
        store.deactivate_alerts(2, 1)

        found = store.find_alert_by_external_id("us1", 1)

        assert found is not None
        assert found.is_active is False
        assert store.find_alert_by_external_id("us1", 2) is None

    def test_deactivate_returns_count(self, store, dhaka):
        store.replace_active_alert(new_alert(), now=NOW)

        assert store.deactivate_alerts(1, 1) == 1
        assert store.deactivate_alerts(1, 1) == 0
        assert store.get_active_alert(1, 1) is None

    def test_inserted_alert_fields(self, store, dhaka):
        alert = store.replace_active_alert(new_alert(disaster_id=2, severity="Critical", external_id="us1"), now=NOW)

        assert alert.source == "System"
        assert alert.severity == "Critical"
        assert alert.external_id == "us1"
        assert alert.created_at == NOW.replace(tzinfo=None)
        assert alert.expires_at is None

    def test_active_alerts_by_location(self, store, seed, dhaka):
        seed(LocationRow(id=2, name="Sylhet", latitude=24.89, longitude=91.87))
        store.replace_active_alert(new_alert(location_id=1), now=NOW)
        store.replace_active_alert(new_alert(location_id=2), now=NOW)

        assert len(store.get_active_alerts()) == 2
        assert [a.location_id for a in store.get_active_alerts(location_id=2)] == [2]


class TestSettings:
    def test_present_and_absent_keys(self, store, seed):
        seed(SettingRow(setting_key="weather_fetch_interval", setting_value="120"))

        assert store.get_setting("weather_fetch_interval") == "120"
        assert store.get_setting("earthquake_fetch_interval") is None

    def test_read_failure_returns_none(self):
        factory = MagicMock(side_effect=OperationalError("SELECT", {}, Exception("db down")))

        assert HazardStore(factory).get_setting("weather_fetch_interval") is None


class TestPersistenceFailure:
    def test_database_errors_are_wrapped(self):
        factory = MagicMock(side_effect=OperationalError("SELECT", {}, Exception("db down")))

        with pytest.raises(PersistenceFailure):
            HazardStore(factory).get_active_locations()
