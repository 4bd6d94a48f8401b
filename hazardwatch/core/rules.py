"""Threshold rule evaluation - Pure functions.

This module evaluates configurable threshold rules against the signals
fetched for one location in one cycle. All functions are pure with no
side effects; deciding which alert wins is left to core.lifecycle.
"""

import operator
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Callable

from hazardwatch.core.events import NearbyEvent
from hazardwatch.core.signals import WeatherReading
from hazardwatch.exceptions import MalformedRule


class SignalCategory(Enum):
    """Which signal source a condition is read from."""
    CONTINUOUS = "continuous"
    POINT_EVENT = "point_event"


class Severity(IntEnum):
    """Alert severity tiers, ordered by rank."""
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    @classmethod
    def parse(cls, value: str | None) -> "Severity":
        """Parse a severity label case-insensitively.

        Blank or unknown labels fall back to MEDIUM.
        """
        if not value:
            return cls.MEDIUM
        try:
            return cls[value.strip().upper()]
        except KeyError:
            return cls.MEDIUM

    @property
    def label(self) -> str:
        """Label as stored, e.g. 'Critical'."""
        return self.name.capitalize()


@dataclass(frozen=True)
class ConditionSpec:
    """How to read one named condition.

    Attributes:
        category: Signal source the condition belongs to
        extract: Reads the value from that source's input
    """
    category: SignalCategory
    extract: Callable[[Any], float | None]


# Condition name -> source and extractor. New hazard types are added here.
CONDITIONS: dict[str, ConditionSpec] = {
    "rain_sum": ConditionSpec(SignalCategory.CONTINUOUS, lambda r: r.rain_sum),
    "wind_speed": ConditionSpec(SignalCategory.CONTINUOUS, lambda r: r.wind_speed),
    "temperature": ConditionSpec(SignalCategory.CONTINUOUS, lambda r: r.temperature),
    "humidity": ConditionSpec(SignalCategory.CONTINUOUS, lambda r: r.humidity),
    "aqi": ConditionSpec(SignalCategory.CONTINUOUS, lambda r: r.aqi),
    "earthquake_magnitude": ConditionSpec(SignalCategory.POINT_EVENT, lambda e: e.magnitude),
}

# Plain float comparison, no epsilon.
OPERATORS: dict[str, Callable[[float, float], bool]] = {
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
}


@dataclass(frozen=True)
class Rule:
    """A threshold rule.

    Attributes:
        id: Rule ID
        disaster_id: Disaster type this rule raises alerts for
        condition: Condition name, a key of CONDITIONS
        operator: One of '>', '<', '>=', '<='
        threshold: Numeric threshold
        severity: Severity label (case-insensitive)
        message_template: Alert title template (optional)
        location_id: Location, or None for a global rule
        is_active: Inactive rules are never loaded
    """
    id: int
    disaster_id: int
    condition: str
    operator: str
    threshold: float | None
    severity: str = "Medium"
    message_template: str | None = None
    location_id: int | None = None
    is_active: bool = True

    @property
    def category(self) -> SignalCategory | None:
        """Signal category, or None for an unknown condition."""
        spec = CONDITIONS.get(self.condition)
        return spec.category if spec else None


@dataclass(frozen=True)
class RuleOutcome:
    """Result of evaluating one rule in one cycle.

    Attributes:
        rule_id: Rule evaluated
        disaster_id: Rule's disaster type
        triggered: Whether the comparison held
        severity: Parsed severity
        message_template: Rule's template (optional)
        condition: Condition name
        observed_value: Value read from the signal
        threshold: Rule threshold
        category: Signal category of the condition
    """
    rule_id: int
    disaster_id: int
    triggered: bool
    severity: Severity
    message_template: str | None
    condition: str
    observed_value: float
    threshold: float
    category: SignalCategory


@dataclass(frozen=True)
class Evaluation:
    """All outcomes for one location in one cycle.

    Attributes:
        outcomes: One outcome per evaluated rule, in rule order
        point_event_disaster_ids: Disasters with point-event rules, whether
            or not a point event was supplied this cycle
        continuous_supplied: True if continuous-signal data was supplied
        malformed: Rules skipped because they could not be evaluated
    """
    outcomes: tuple[RuleOutcome, ...]
    point_event_disaster_ids: frozenset[int]
    continuous_supplied: bool
    malformed: tuple[MalformedRule, ...] = ()

    @property
    def triggered(self) -> tuple[RuleOutcome, ...]:
        return tuple(o for o in self.outcomes if o.triggered)

    @property
    def triggered_disaster_ids(self) -> set[int]:
        return {o.disaster_id for o in self.outcomes if o.triggered}


def evaluate_rule(
    rule: Rule,
    reading: WeatherReading | None,
    event: NearbyEvent | None,
) -> RuleOutcome | None:
    """Evaluate a single rule.

    Pure function.

    Args:
        rule: Rule to evaluate
        reading: Continuous-signal snapshot, None if not fetched
        event: Matched point event, None if none this cycle

    Returns:
        RuleOutcome, or None when the rule's input or value is absent

    Raises:
        MalformedRule: Unknown condition or operator, or no threshold
    """
    spec = CONDITIONS.get(rule.condition)
    if spec is None:
        raise MalformedRule(rule.id, f"unknown condition {rule.condition!r}")

    compare = OPERATORS.get(rule.operator)
    if compare is None:
        raise MalformedRule(rule.id, f"unknown operator {rule.operator!r}")

    if rule.threshold is None:
        raise MalformedRule(rule.id, "missing threshold")

    source = reading if spec.category is SignalCategory.CONTINUOUS else event
    if source is None:
        return None

    value = spec.extract(source)
    if value is None:
        return None

    return RuleOutcome(
        rule_id=rule.id,
        disaster_id=rule.disaster_id,
        triggered=compare(value, rule.threshold),
        severity=Severity.parse(rule.severity),
        message_template=rule.message_template,
        condition=rule.condition,
        observed_value=value,
        threshold=rule.threshold,
        category=spec.category,
    )


def evaluate_rules(
    rules: list[Rule],
    reading: WeatherReading | None,
    event: NearbyEvent | None,
) -> Evaluation:
    """Evaluate every rule loaded for a location.

    Pure function. Malformed rules and rules whose input was not supplied
    are skipped; neither fails the evaluation.

    Args:
        rules: Active rules for the location (location-specific + global)
        reading: Continuous-signal snapshot, None if not fetched
        event: Matched point event, None if none this cycle

    Returns:
        Evaluation with one outcome per evaluable rule
    """
    outcomes = []
    malformed = []
    point_event_disaster_ids = set()

    for rule in rules:
        if rule.category is SignalCategory.POINT_EVENT:
            point_event_disaster_ids.add(rule.disaster_id)

        try:
            outcome = evaluate_rule(rule, reading, event)
        except MalformedRule as e:
            malformed.append(e)
            continue

        if outcome is not None:
            outcomes.append(outcome)

    return Evaluation(
        outcomes=tuple(outcomes),
        point_event_disaster_ids=frozenset(point_event_disaster_ids),
        continuous_supplied=reading is not None,
        malformed=tuple(malformed),
    )
