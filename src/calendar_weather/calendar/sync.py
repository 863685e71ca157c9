"""Calendar synchronization engine.

Fetches events and rewrites their titles with weather annotations.

## Sync Process

1. Get events from calendar
   - full: all events from now through the sync window (default 7 days)
   - incremental: only events changed since the held sync token
2. Store the returned sync token, even when no events came back
3. For each event, in the order received:
   a. Skip cancelled events and events starting after the window end
   b. Look up weather for the event's start time
   c. Strip the old annotation and compose the new title
   d. Patch the title only if it changed
4. Report counts of considered, rewritten, skipped and failed events

## Failure Handling

- Expired sync token: drop it and retry once as a full sync
- Any other list failure: abort the cycle, keep the token
- Patch failure or any other per-event error: count it and carry on with
  the next event
- Weather failure: annotate with "(weather unavailable)"

Only one cycle runs at a time; a call made while a cycle is in flight is
skipped and returns a report marked ``skipped_reentrant``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Literal, Protocol

from calendar_weather.calendar.google_calendar import (
    CalendarEvent,
    EventPage,
    SyncWindow,
    TokenInvalidated,
)
from calendar_weather.models.health import HealthStatus
from calendar_weather.titles import annotate
from calendar_weather.weather.lookup import WeatherLookup, utc_now

if TYPE_CHECKING:
    from calendar_weather.database.store import SyncStateStore

logger = logging.getLogger(__name__)

SyncMode = Literal["full", "incremental"]


class CalendarClient(Protocol):
    """Calendar operations the engine depends on."""

    def list_events(
        self,
        calendar_id: str,
        window: SyncWindow | None = None,
        sync_token: str | None = None,
    ) -> EventPage: ...

    def patch_event_title(self, calendar_id: str, event_id: str, title: str) -> None: ...


@dataclass
class SyncReport:
    """Result of one sync cycle."""

    mode: SyncMode
    considered: int = 0
    rewritten: int = 0
    unchanged: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    fetch_error: str | None = None
    sync_token: str | None = None
    recovered_from_invalidation: bool = False
    skipped_reentrant: bool = False
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None

    @property
    def success(self) -> bool:
        """True when events were fetched; per-event failures are counted."""
        return self.fetch_error is None and not self.skipped_reentrant

    def summary(self) -> str:
        return (
            f"{self.mode} sync: {self.considered} considered, "
            f"{self.rewritten} rewritten, {self.unchanged} unchanged, "
            f"{self.skipped} skipped, {self.failed} failed"
        )


class SyncEngine:
    """Keeps event titles annotated with the weather at their start time.

    The engine owns the calendar's sync token. It is read and written only
    while the cycle lock is held.

    Example:
        ```python
        engine = SyncEngine(client, lookup, calendar_id="primary")

        report = await engine.sync()                  # incremental if possible
        report = await engine.sync(force_full=True)   # drop token, full range
        ```
    """

    def __init__(
        self,
        client: CalendarClient,
        lookup: WeatherLookup,
        calendar_id: str = "primary",
        window_days: int = 7,
        prefer_event_location: bool = False,
        state_store: SyncStateStore | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the engine.

        Args:
            client: Calendar collaborator
            lookup: Weather lookup
            calendar_id: Calendar to annotate
            window_days: Days ahead covered by a full sync
            prefer_event_location: Use the event's location for weather
                instead of the lookup's default location
            state_store: Optional durable storage for the sync token
            clock: Returns the current aware datetime
        """
        self.client = client
        self.lookup = lookup
        self.calendar_id = calendar_id
        self.window = timedelta(days=window_days)
        self.prefer_event_location = prefer_event_location
        self.state_store = state_store
        self._clock = clock

        self.sync_token: str | None = None
        self.last_report: SyncReport | None = None
        self.last_cycle_at: datetime | None = None
        self._lock = asyncio.Lock()

    @property
    def cycle_in_progress(self) -> bool:
        return self._lock.locked()

    async def restore(self) -> None:
        """Load a persisted sync token, if a state store is configured."""
        if self.state_store is None:
            return

        async with self._lock:
            state = await self.state_store.load(self.calendar_id)
            if state and state.sync_token:
                self.sync_token = state.sync_token
                self.last_cycle_at = state.last_sync_at
                logger.info(f"Restored sync token for calendar {self.calendar_id}")

    async def sync(self, force_full: bool = False) -> SyncReport:
        """Run one sync cycle.

        Args:
            force_full: Discard the sync token and fetch the full window

        Returns:
            SyncReport for the cycle
        """
        if self._lock.locked():
            logger.info("Sync cycle already in progress, skipping")
            return SyncReport(
                mode="full" if force_full or not self.sync_token else "incremental",
                sync_token=self.sync_token,
                skipped_reentrant=True,
                finished_at=self._clock(),
            )

        async with self._lock:
            if force_full:
                self.sync_token = None

            report = SyncReport(
                mode="incremental" if self.sync_token else "full",
                started_at=self._clock(),
            )
            await self._run_cycle(report)

            report.sync_token = self.sync_token
            report.finished_at = self._clock()
            self.last_report = report
            self.last_cycle_at = report.finished_at

            await self._save_state(report)

        if report.success:
            logger.info(f"Calendar {self.calendar_id} {report.summary()}")
        return report

    def health(self) -> HealthStatus:
        """Snapshot of the engine state for health checks."""
        return HealthStatus(
            token_present=self.sync_token is not None,
            last_sync="active" if self.sync_token else "pending",
            last_cycle_at=self.last_cycle_at,
            last_cycle_success=self.last_report.success if self.last_report else None,
            cycle_in_progress=self.cycle_in_progress,
            timestamp=self._clock(),
        )

    def _full_window(self) -> SyncWindow:
        now = self._clock()
        return SyncWindow(start=now, end=now + self.window)

    async def _list_events(
        self,
        window: SyncWindow | None = None,
        sync_token: str | None = None,
    ) -> EventPage:
        return await asyncio.to_thread(
            self.client.list_events,
            self.calendar_id,
            window=window,
            sync_token=sync_token,
        )

    async def _fetch(self, report: SyncReport) -> tuple[EventPage, SyncWindow]:
        """Fetch events, recovering once from an invalidated token."""
        if self.sync_token:
            try:
                page = await self._list_events(sync_token=self.sync_token)
                return page, self._full_window()
            except TokenInvalidated:
                logger.warning(
                    f"Sync token expired for calendar {self.calendar_id}, "
                    "performing full sync"
                )
                self.sync_token = None
                report.mode = "full"
                report.recovered_from_invalidation = True

        window = self._full_window()
        page = await self._list_events(window=window)
        return page, window

    async def _run_cycle(self, report: SyncReport) -> None:
        try:
            page, window = await self._fetch(report)
        except Exception as e:
            logger.exception(
                f"Error listing events for calendar {self.calendar_id} "
                f"({report.mode} sync): {e}"
            )
            report.fetch_error = str(e)
            return

        self.sync_token = page.next_sync_token
        report.considered = len(page.events)

        if not page.events:
            logger.info(f"No events to update in calendar {self.calendar_id}")
            return

        logger.info(f"Updating {len(page.events)} events with weather forecasts")

        for event in page.events:
            try:
                await self._process_event(event, window, report)
            except Exception as e:
                logger.exception(f"Error processing event {event.id}: {e}")
                report.failed += 1
                report.errors.append(f"Error processing event {event.id}: {e}")

    async def _process_event(
        self,
        event: CalendarEvent,
        window: SyncWindow,
        report: SyncReport,
    ) -> None:
        """Annotate one event, recording the outcome on the report."""
        if event.is_cancelled:
            report.skipped += 1
            return

        start = event.start_time(self.lookup.tz)
        if start is None:
            logger.debug(f"Event {event.id} has no start time, skipping")
            report.skipped += 1
            return

        # Token fetches can return events outside the window.
        if not window.contains(start):
            report.skipped += 1
            return

        location = event.location if self.prefer_event_location else None
        descriptor = await self.lookup.lookup(location, start)
        new_title = annotate(event.summary, descriptor)

        if new_title == event.summary:
            report.unchanged += 1
            return

        logger.info(f"Updating: {event.summary} → {new_title}")
        try:
            await asyncio.to_thread(
                self.client.patch_event_title,
                self.calendar_id,
                event.id,
                new_title,
            )
        except Exception as e:
            logger.error(f"Error patching event {event.id}: {e}")
            report.failed += 1
            report.errors.append(f"Error patching event {event.id}: {e}")
            return

        report.rewritten += 1

    async def _save_state(self, report: SyncReport) -> None:
        if self.state_store is None:
            return

        try:
            await self.state_store.save(
                self.calendar_id,
                sync_token=self.sync_token,
                sync_error=report.fetch_error,
                synced_at=report.finished_at,
            )
        except Exception as e:
            logger.exception(f"Failed to persist sync state: {e}")
