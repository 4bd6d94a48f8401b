"""Error taxonomy for the hazard monitoring engine.

None of these are fatal to the process. Shell components raise them,
the engine catches them per location or per cycle and records them on
the cycle result.
"""


class HazardWatchError(Exception):
    """Base class for all engine errors."""


class UpstreamUnavailable(HazardWatchError):
    """A signal provider fetch failed or timed out.

    The affected signal is skipped for this cycle and the auto-clear
    pass is suppressed.
    """


class PersistenceFailure(HazardWatchError):
    """A read or write against the relational store failed."""


class MalformedRule(HazardWatchError):
    """A rule names an unknown condition or operator."""

    def __init__(self, rule_id: int, reason: str) -> None:
        super().__init__(f"Rule {rule_id}: {reason}")
        self.rule_id = rule_id
        self.reason = reason


class LocationNotFound(HazardWatchError):
    """A location ID passed to a simulation does not exist."""
