"""Sync scheduling.

Drives the sync engine on two cadences:

- **incremental** (default every 30 minutes): sync with the held token,
  picking up only events that changed
- **full** (default every 60 minutes): drop the token and resync the whole
  window, so forecasts for unchanged events are refreshed

One sync also runs at startup: incremental when a persisted token was
restored, full otherwise. Jobs never overlap: APScheduler keeps
one instance per job and the engine skips a cycle started while another is in
flight. A failing cycle is logged and the jobs keep running.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from calendar_weather.calendar.sync import SyncEngine, SyncReport
from calendar_weather.models.health import HealthStatus

logger = logging.getLogger(__name__)

INCREMENTAL_JOB_ID = "incremental_sync"
FULL_JOB_ID = "full_sync"
INITIAL_JOB_ID = "initial_sync"


class SyncScheduler:
    """Runs incremental and full sync cycles on fixed intervals.

    Example:
        ```python
        scheduler = SyncScheduler(
            engine,
            watch_interval=timedelta(minutes=30),
            full_sync_interval=timedelta(hours=1),
        )
        scheduler.start()   # inside a running event loop
        ...
        scheduler.shutdown()
        ```
    """

    def __init__(
        self,
        engine: SyncEngine,
        watch_interval: timedelta,
        full_sync_interval: timedelta,
        scheduler: AsyncIOScheduler | None = None,
    ):
        if watch_interval >= full_sync_interval:
            raise ValueError("watch_interval must be shorter than full_sync_interval")

        self.engine = engine
        self.watch_interval = watch_interval
        self.full_sync_interval = full_sync_interval
        self._scheduler = scheduler or AsyncIOScheduler(timezone=timezone.utc)

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self, initial_sync: bool = True) -> None:
        """Register the sync jobs and start the scheduler."""
        self._scheduler.add_job(
            self.run_incremental,
            "interval",
            seconds=int(self.watch_interval.total_seconds()),
            id=INCREMENTAL_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.add_job(
            self.run_full,
            "interval",
            seconds=int(self.full_sync_interval.total_seconds()),
            id=FULL_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        if initial_sync:
            # No trigger: runs once, immediately. A restored token is resumed.
            self._scheduler.add_job(
                self.run_incremental if self.engine.sync_token else self.run_full,
                id=INITIAL_JOB_ID,
                replace_existing=True,
            )

        self._scheduler.start()

        next_full = datetime.now(timezone.utc) + self.full_sync_interval
        logger.info(
            f"Sync scheduler started: changes checked every {self.watch_interval}, "
            f"full sync every {self.full_sync_interval} "
            f"(next full sync at {next_full.isoformat(timespec='seconds')})"
        )

    def shutdown(self) -> None:
        """Stop the scheduler without waiting for running jobs."""
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Sync scheduler stopped")

    async def run_incremental(self) -> SyncReport | None:
        """Check for calendar changes using the held sync token."""
        logger.info("Checking for calendar changes")
        return await self._run_cycle(force_full=False)

    async def run_full(self) -> SyncReport | None:
        """Drop the sync token and resync the full window."""
        logger.info("Starting scheduled full update")
        return await self._run_cycle(force_full=True)

    async def _run_cycle(self, force_full: bool) -> SyncReport | None:
        try:
            return await self.engine.sync(force_full=force_full)
        except Exception as e:
            logger.exception(f"Error in sync cycle: {e}")
            return None

    def health(self) -> HealthStatus:
        """Current sync status for health checks."""
        return self.engine.health()
