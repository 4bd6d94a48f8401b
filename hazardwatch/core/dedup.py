"""Deduplication logic - Pure functions.

This module decides when a reading has already been
recorded recently. All functions are pure with no side effects.

Note: The actual lookups are done by the store (shell). This module only
contains the pure logic.
"""

from datetime import datetime, timedelta


# Readings for the same location closer together than this are dropped
DEFAULT_READING_WINDOW_SECONDS = 30


def reading_window_start(
    now: datetime,
    window_seconds: int = DEFAULT_READING_WINDOW_SECONDS,
) -> datetime:
    """Return the earliest timestamp that still counts as a duplicate.

    Pure function.
    """
    return now - timedelta(seconds=window_seconds)


def is_duplicate_reading(
    last_logged_at: datetime | None,
    now: datetime,
    window_seconds: int = DEFAULT_READING_WINDOW_SECONDS,
) -> bool:
    """Check whether a new reading falls inside the duplicate window.

    Pure function.

    Args:
        last_logged_at: Timestamp of the latest reading for the location
        now: Timestamp of the new reading
        window_seconds: Duplicate window length

    Returns:
        True if the new reading should not be written
    """
    if last_logged_at is None:
        return False
    return last_logged_at > reading_window_start(now, window_seconds)

