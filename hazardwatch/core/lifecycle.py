"""Alert lifecycle decisions - Pure functions.

This module decides which alert transitions a cycle should produce:
which triggered outcome wins for each disaster, and which disasters
should be auto-cleared. Applying those decisions to the store is the
engine's job.
"""

from dataclasses import dataclass
from typing import Iterable

from hazardwatch.core.models import Alert
from hazardwatch.core.rules import Evaluation, Rule, RuleOutcome, SignalCategory


@dataclass(frozen=True)
class Transition:
    """A planned open-alert transition for one (disaster, location).

    Attributes:
        outcome: The winning triggered outcome
        external_id: Point-event ID for seismic alerts, None otherwise
    """
    outcome: RuleOutcome
    external_id: str | None = None

    @property
    def disaster_id(self) -> int:
        return self.outcome.disaster_id

    @property
    def is_point_event(self) -> bool:
        return self.outcome.category is SignalCategory.POINT_EVENT


def select_winning_outcomes(outcomes: Iterable[RuleOutcome]) -> list[RuleOutcome]:
    """Pick one triggered outcome per disaster.

    Pure function.

    Severity tiers are independent rules, so several may fire for the
    same disaster in one cycle. The highest severity wins; on equal
    severity the later rule in iteration order wins. Result order
    follows the first triggered outcome of each disaster.

    Args:
        outcomes: Outcomes in rule order

    Returns:
        At most one outcome per disaster, all triggered
    """
    winners: dict[int, RuleOutcome] = {}

    for outcome in outcomes:
        if not outcome.triggered:
            continue
        current = winners.get(outcome.disaster_id)
        if current is None or outcome.severity >= current.severity:
            winners[outcome.disaster_id] = outcome

    return list(winners.values())


def plan_transitions(
    evaluation: Evaluation,
    external_id: str | None = None,
) -> list[Transition]:
    """Plan the open-alert transitions for a cycle.

    Pure function.

    Args:
        evaluation: Outcomes for one location
        external_id: ID of the point event evaluated this cycle, if any

    Returns:
        One transition per disaster that triggered
    """
    return [
        Transition(
            outcome=outcome,
            external_id=(
                external_id
                if outcome.category is SignalCategory.POINT_EVENT
                else None
            ),
        )
        for outcome in select_winning_outcomes(evaluation.outcomes)
    ]


def disasters_to_clear(evaluation: Evaluation, rules: Iterable[Rule]) -> list[int]:
    """Compute the continuous-signal disasters to auto-clear.

    Pure function.

    A disaster is cleared when it has at least one continuous-signal rule
    for this location and none of its rules triggered this cycle. Nothing
    is cleared when no continuous-signal data was supplied, so a provider
    outage never produces an all-clear. Point-event disasters are never
    cleared.

    Args:
        evaluation: Outcomes for one location
        rules: Rules the evaluation was computed from

    Returns:
        Disaster IDs in first-seen rule order
    """
    if not evaluation.continuous_supplied:
        return []

    triggered = evaluation.triggered_disaster_ids
    result: list[int] = []

    for rule in rules:
        if rule.category is not SignalCategory.CONTINUOUS:
            continue
        if rule.disaster_id in triggered or rule.disaster_id in result:
            continue
        result.append(rule.disaster_id)

    return result


def active_alert_violations(alerts: Iterable[Alert]) -> list[tuple[int, int]]:
    """Find (disaster_id, location_id) pairs with more than one active alert.

    Pure function. An empty result means the history is consistent.
    """
    seen: set[tuple[int, int]] = set()
    violations: list[tuple[int, int]] = []

    for alert in alerts:
        if not alert.is_active:
            continue
        key = (alert.disaster_id, alert.location_id)
        if key in seen and key not in violations:
            violations.append(key)
        seen.add(key)

    return violations
