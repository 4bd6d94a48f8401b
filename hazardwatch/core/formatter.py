"""Alert text formatting - Pure functions.

This module formats rule outcomes into alert titles and descriptions,
and cycle results into one-line summaries. All functions are pure with
no side effects.
"""

from hazardwatch.core.events import NearbyEvent
from hazardwatch.core.rules import RuleOutcome, SignalCategory


TITLE_PREFIX = "Automated Alert"
DEFAULT_SEISMIC_TEMPLATE = "Seismic Event Detected"
DEFAULT_HAZARD_TEMPLATE = "Hazard Detected"


def format_number(value: float) -> str:
    """Format a measured value without trailing zeros.

    Pure function. 30.0 -> '30', 6.8 -> '6.8'.
    """
    return f"{value:g}"


def format_alert_title(outcome: RuleOutcome) -> str:
    """Format the alert title for a triggered outcome.

    Pure function.
    """
    template = outcome.message_template
    if not template:
        if outcome.category is SignalCategory.POINT_EVENT:
            template = DEFAULT_SEISMIC_TEMPLATE
        else:
            template = DEFAULT_HAZARD_TEMPLATE
    return f"{TITLE_PREFIX}: {template}"


def format_alert_description(
    outcome: RuleOutcome,
    event: NearbyEvent | None = None,
) -> str:
    """Format the alert description for a triggered outcome.

    Pure function.

    Args:
        outcome: The winning triggered outcome
        event: The matched point event, for seismic alerts

    Returns:
        Human-readable description
    """
    value = format_number(outcome.observed_value)
    threshold = format_number(outcome.threshold)

    if outcome.category is SignalCategory.POINT_EVENT:
        place = event.place if event is not None else "Unknown location"
        return (
            f"Magnitude {value} detected. Epicenter: {place}. "
            f"Threshold: {threshold}."
        )

    return f"{outcome.condition} is {value} (threshold: {threshold})."


def format_cycle_summary(
    kind: str,
    locations_checked: int,
    alerts_opened: int,
    alerts_cleared: int,
    errors: int,
) -> str:
    """Format a one-line summary of a polling cycle.

    Pure function.
    """
    return (
        f"{kind} cycle: {locations_checked} locations checked, "
        f"{alerts_opened} alerts opened, "
        f"{alerts_cleared} cleared, "
        f"{errors} errors"
    )
