"""Shared fixtures for shell tests: an in-memory database with seed data."""

import pytest

from hazardwatch.shell.database import (
    AlertRuleRow,
    DisasterRow,
    LocationRow,
    create_db_engine,
    create_session_factory,
    create_tables,
)
from hazardwatch.shell.store import HazardStore


@pytest.fixture
def session_factory():
    engine = create_db_engine("sqlite:///:memory:")
    create_tables(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return HazardStore(session_factory)


@pytest.fixture
def seed(session_factory):
    """Insert rows and return them; use as seed(Model(...), ...)."""
    def _seed(*rows):
        with session_factory() as session, session.begin():
            session.add_all(rows)
        return rows

    return _seed


@pytest.fixture
def dhaka(seed):
    """Dhaka plus Flash Flood and Earthquake disasters."""
    seed(
        LocationRow(id=1, name="Dhaka", latitude=23.81, longitude=90.41, is_active=True),
        DisasterRow(id=1, name="Flash Flood", is_active=True),
        DisasterRow(id=2, name="Earthquake", is_active=True),
    )


@pytest.fixture
def flood_rules(seed, dhaka):
    """Medium and High flash-flood tiers for Dhaka."""
    seed(
        AlertRuleRow(
            id=1, location_id=1, disaster_id=1, weather_condition="rain_sum",
            operator=">=", threshold_value=25, severity_level="Medium",
            message_template="Flash Flood Watch",
        ),
        AlertRuleRow(
            id=2, location_id=1, disaster_id=1, weather_condition="rain_sum",
            operator=">=", threshold_value=50, severity_level="High",
            message_template="Flash Flood Warning",
        ),
    )


@pytest.fixture
def quake_rule(seed, dhaka):
    """Global critical earthquake rule."""
    seed(
        AlertRuleRow(
            id=10, location_id=None, disaster_id=2,
            weather_condition="earthquake_magnitude", operator=">=",
            threshold_value=6.5, severity_level="Critical",
            message_template="Major Earthquake",
        ),
    )
