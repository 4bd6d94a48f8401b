"""Functional Core - Pure functions with no side effects.

Rules, matching and lifecycle decisions, as pure functions:
- Point-event and weather parsing
- Geo/distance calculations and nearest-event matching
- Threshold rule evaluation
- Alert lifecycle decisions
- Alert text formatting
- Reading deduplication

All functions here are deterministic and have no I/O.
"""

from hazardwatch.core.events import PointEvent, NearbyEvent, parse_point_events
from hazardwatch.core.signals import WeatherReading, parse_weather_reading
from hazardwatch.core.geo import calculate_distance, find_nearest_event, locations_within_radius
from hazardwatch.core.rules import Rule, RuleOutcome, Severity, evaluate_rules
from hazardwatch.core.lifecycle import disasters_to_clear, plan_transitions, select_winning_outcomes
from hazardwatch.core.formatter import format_alert_title, format_alert_description
from hazardwatch.core.dedup import is_duplicate_reading

__all__ = [
    # Events
    "PointEvent",
    "NearbyEvent",
    "parse_point_events",
    # Signals
    "WeatherReading",
    "parse_weather_reading",
    # Geo
    "calculate_distance",
    "find_nearest_event",
    "locations_within_radius",
    # Rules
    "Rule",
    "RuleOutcome",
    "Severity",
    "evaluate_rules",
    # Lifecycle
    "disasters_to_clear",
    "plan_transitions",
    "select_winning_outcomes",
    # Formatter
    "format_alert_title",
    "format_alert_description",
    # Dedup
    "is_duplicate_reading",
]
