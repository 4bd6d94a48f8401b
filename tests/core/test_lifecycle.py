"""Unit tests for alert lifecycle decisions.

Pure function tests - fast, no mocks needed.
"""

import pytest

from hazardwatch.core.lifecycle import (
    active_alert_violations,
    disasters_to_clear,
    plan_transitions,
    select_winning_outcomes,
)
from hazardwatch.core.models import Alert
from hazardwatch.core.rules import Rule, Severity, evaluate_rules
from hazardwatch.core.signals import WeatherReading


FLASH_FLOOD = 1
HEATWAVE = 2
EARTHQUAKE = 3


def rule(rule_id, disaster_id, condition, threshold, severity, op=">="):
    return Rule(
        id=rule_id,
        disaster_id=disaster_id,
        condition=condition,
        operator=op,
        threshold=threshold,
        severity=severity,
    )


@pytest.fixture
def flood_tiers():
    """Severity tiers deliberately stored highest-first."""
    return [
        rule(1, FLASH_FLOOD, "rain_sum", 80, "Critical"),
        rule(2, FLASH_FLOOD, "rain_sum", 50, "High"),
        rule(3, FLASH_FLOOD, "rain_sum", 25, "Medium"),
    ]


class TestSelectWinningOutcomes:
    """Tests for select_winning_outcomes()."""

    def test_highest_severity_wins_regardless_of_order(self, flood_tiers):
        evaluation = evaluate_rules(flood_tiers, WeatherReading(rain_sum=60), None)

        winners = select_winning_outcomes(evaluation.outcomes)

        assert len(winners) == 1
        assert winners[0].severity is Severity.HIGH
        assert winners[0].rule_id == 2

    def test_one_winner_per_disaster(self):
        rules = [
            rule(1, FLASH_FLOOD, "rain_sum", 25, "Medium"),
            rule(2, HEATWAVE, "temperature", 40, "High"),
        ]
        evaluation = evaluate_rules(rules, WeatherReading(rain_sum=30, temperature=42), None)

        winners = select_winning_outcomes(evaluation.outcomes)

        assert [w.disaster_id for w in winners] == [FLASH_FLOOD, HEATWAVE]

    def test_equal_severity_later_rule_wins(self):
        rules = [
            rule(1, FLASH_FLOOD, "rain_sum", 25, "Medium"),
            rule(2, FLASH_FLOOD, "humidity", 80, "medium"),
        ]
        evaluation = evaluate_rules(rules, WeatherReading(rain_sum=30, humidity=90), None)

        assert select_winning_outcomes(evaluation.outcomes)[0].rule_id == 2

    def test_untriggered_outcomes_ignored(self, flood_tiers):
        evaluation = evaluate_rules(flood_tiers, WeatherReading(rain_sum=0), None)
        assert select_winning_outcomes(evaluation.outcomes) == []


class TestPlanTransitions:
    def test_external_id_only_on_point_event_transitions(self):
        from datetime import datetime, timezone
        from hazardwatch.core.events import NearbyEvent, PointEvent

        event = NearbyEvent(
            event=PointEvent(
                id="us1",
                magnitude=6.8,
                place="x",
                time=datetime(2024, 1, 1, tzinfo=timezone.utc),
                latitude=0,
                longitude=0,
            ),
            distance_km=1.0,
        )
        rules = [
            rule(1, FLASH_FLOOD, "rain_sum", 25, "Medium"),
            rule(2, EARTHQUAKE, "earthquake_magnitude", 6.5, "Critical"),
        ]
        evaluation = evaluate_rules(rules, WeatherReading(rain_sum=30), event)

        transitions = plan_transitions(evaluation, external_id="us1")

        by_disaster = {t.disaster_id: t for t in transitions}
        assert by_disaster[FLASH_FLOOD].external_id is None
        assert by_disaster[FLASH_FLOOD].is_point_event is False
        assert by_disaster[EARTHQUAKE].external_id == "us1"
        assert by_disaster[EARTHQUAKE].is_point_event is True


class TestDisastersToClear:
    """Tests for disasters_to_clear()."""

    def test_clears_untriggered_continuous_disaster(self, flood_tiers):
        evaluation = evaluate_rules(flood_tiers, WeatherReading(rain_sum=0), None)
        assert disasters_to_clear(evaluation, flood_tiers) == [FLASH_FLOOD]

    def test_does_not_clear_triggered_disaster(self, flood_tiers):
        evaluation = evaluate_rules(flood_tiers, WeatherReading(rain_sum=30), None)
        assert disasters_to_clear(evaluation, flood_tiers) == []

    def test_nothing_cleared_without_continuous_data(self, flood_tiers):
        evaluation = evaluate_rules(flood_tiers, None, None)
        assert disasters_to_clear(evaluation, flood_tiers) == []

    def test_point_event_disasters_never_cleared(self):
        rules = [rule(1, EARTHQUAKE, "earthquake_magnitude", 6.5, "Critical")]
        evaluation = evaluate_rules(rules, WeatherReading(rain_sum=0), None)
        assert disasters_to_clear(evaluation, rules) == []

    def test_missing_value_still_counts_as_not_triggered(self):
        rules = [rule(1, HEATWAVE, "aqi", 150, "High", op=">")]
        evaluation = evaluate_rules(rules, WeatherReading(rain_sum=0, aqi=None), None)
        assert disasters_to_clear(evaluation, rules) == [HEATWAVE]

    def test_malformed_rules_ignored(self):
        rules = [rule(1, HEATWAVE, "snow_depth", 1, "High")]
        evaluation = evaluate_rules(rules, WeatherReading(rain_sum=0), None)
        assert disasters_to_clear(evaluation, rules) == []


class TestActiveAlertViolations:
    def make_alert(self, alert_id, disaster_id, location_id, active):
        return Alert(
            id=alert_id,
            disaster_id=disaster_id,
            location_id=location_id,
            title="t",
            description="d",
            severity="Medium",
            is_active=active,
        )

    def test_consistent_history(self):
        alerts = [
            self.make_alert(1, 1, 1, False),
            self.make_alert(2, 1, 1, True),
            self.make_alert(3, 2, 1, True),
        ]
        assert active_alert_violations(alerts) == []

    def test_detects_two_active_rows(self):
        alerts = [self.make_alert(1, 1, 1, True), self.make_alert(2, 1, 1, True)]
        assert active_alert_violations(alerts) == [(1, 1)]
