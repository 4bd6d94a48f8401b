"""Adaptive Scheduler - two self-rearming polling loops.

One loop per signal category. Each iteration runs its cycle, then reads
its interval override from the settings store, clamps it to the
configured floor, and re-arms itself as a one-shot job. Operators can
therefore change a poll interval at runtime without a restart.

Each loop gets its own worker, so a slow weather pass never delays
seismic polling. A loop never overlaps itself: there is one job per loop
and it is re-armed only after its iteration finishes. The shared feed
cache is replaced by a single assignment, so the weather loop always sees
a complete snapshot.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler

from hazardwatch.core.config import (
    EARTHQUAKE_INTERVAL_KEY,
    WEATHER_INTERVAL_KEY,
    Config,
    resolve_interval,
)
from hazardwatch.engine import EARTHQUAKE, WEATHER, HazardEngine
from hazardwatch.shell.store import HazardStore


logger = logging.getLogger(__name__)

# Weather and earthquake
LOOP_COUNT = 2


@dataclass(frozen=True)
class PollingLoop:
    """Definition of one adaptive loop.

    Attributes:
        name: Loop name, also the job ID
        run: One full cycle
        setting_key: Settings key holding the interval override
        default_seconds: Interval when the key is absent
    """
    name: str
    run: Callable[[], object]
    setting_key: str
    default_seconds: int


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_blocking_scheduler() -> BlockingScheduler:
    """APScheduler instance with one worker per loop."""
    return BlockingScheduler(
        executors={"default": ThreadPoolExecutor(max_workers=LOOP_COUNT)},
        job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": None},
        timezone=timezone.utc,
    )


class AdaptiveScheduler:
    """Runs the weather and earthquake loops."""

    def __init__(
        self,
        config: Config,
        engine: HazardEngine,
        store: HazardStore,
        scheduler: BaseScheduler | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config
        self.store = store
        self.scheduler = scheduler or create_blocking_scheduler()
        self.clock = clock
        self.loops = {
            WEATHER: PollingLoop(
                name=WEATHER,
                run=engine.run_continuous_signal_cycle,
                setting_key=WEATHER_INTERVAL_KEY,
                default_seconds=config.weather_interval_seconds,
            ),
            EARTHQUAKE: PollingLoop(
                name=EARTHQUAKE,
                run=engine.run_point_event_cycle,
                setting_key=EARTHQUAKE_INTERVAL_KEY,
                default_seconds=config.earthquake_interval_seconds,
            ),
        }

    def next_interval(self, loop: PollingLoop) -> int:
        """Read the loop's interval fresh from the settings store."""
        return resolve_interval(
            self.store.get_setting(loop.setting_key),
            loop.default_seconds,
            self.config.min_interval_seconds,
        )

    def _arm(self, loop: PollingLoop, delay_seconds: int) -> None:
        self.scheduler.add_job(
            self.run_iteration,
            trigger="date",
            run_date=self.clock() + timedelta(seconds=delay_seconds),
            args=[loop.name],
            id=loop.name,
            replace_existing=True,
        )

    def run_iteration(self, name: str) -> int:
        """Run one iteration of a loop and re-arm it.

        The loop is re-armed whatever happened in the cycle.

        Returns:
            Delay in seconds until the next iteration
        """
        loop = self.loops[name]
        logger.info("Running adaptive %s check", loop.name)

        try:
            loop.run()
        except Exception:
            logger.exception("Unexpected error in %s loop", loop.name)

        delay = self.next_interval(loop)
        self._arm(loop, delay)
        logger.info("Next %s check in %ds", loop.name, delay)
        return delay

    def start(self) -> None:
        """Arm both loops to run now, then start the scheduler.

        With the default BlockingScheduler this call blocks until
        shutdown.
        """
        for loop in self.loops.values():
            self._arm(loop, 0)
        logger.info("Automated adaptive schedulers started")
        self.scheduler.start()

    def shutdown(self) -> None:
        """Stop the scheduler after the running iteration finishes."""
        self.scheduler.shutdown(wait=True)
        logger.info("Adaptive schedulers stopped")
