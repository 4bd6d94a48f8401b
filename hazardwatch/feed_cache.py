"""Process-wide cache of the last point-event feed.

Lifecycle: written by the point-event loop after every successful feed
fetch, read by the continuous-signal loop to annotate readings with the
strongest nearby quake, empty after a process restart.

The snapshot is immutable and replaced by a single assignment, so a
reader always sees a complete feed with its matching fetch time.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from hazardwatch.core.events import PointEvent


@dataclass(frozen=True)
class FeedSnapshot:
    """One fetched feed.

    Attributes:
        events: Parsed events
        fetched_at: When the feed was fetched
    """
    events: tuple[PointEvent, ...]
    fetched_at: datetime


class PointEventFeedCache:
    """Holds the most recent FeedSnapshot."""

    def __init__(self) -> None:
        self._snapshot: FeedSnapshot | None = None

    def store(self, events: Iterable[PointEvent], fetched_at: datetime) -> FeedSnapshot:
        snapshot = FeedSnapshot(events=tuple(events), fetched_at=fetched_at)
        self._snapshot = snapshot
        return snapshot

    def snapshot(self) -> FeedSnapshot | None:
        return self._snapshot

    def clear(self) -> None:
        self._snapshot = None
