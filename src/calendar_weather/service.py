"""Service assembly.

Wires settings, credentials, the calendar client, the weather provider, the
sync engine and the scheduler into one object with a start/stop lifecycle.

## Usage

```python
service = await build_service(get_settings())
await service.start()
...
await service.stop()
```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from calendar_weather.auth.credentials import CredentialProvider
from calendar_weather.calendar.google_calendar import GoogleCalendarClient
from calendar_weather.calendar.sync import SyncEngine
from calendar_weather.config import Settings
from calendar_weather.database import (
    SyncStateStore,
    close_db,
    create_tables,
    get_session_factory,
    init_db,
)
from calendar_weather.providers.base import WeatherProvider
from calendar_weather.providers.weatherapi import WeatherAPIProvider
from calendar_weather.scheduler import SyncScheduler
from calendar_weather.weather.lookup import WeatherLookup

logger = logging.getLogger(__name__)


@dataclass
class CalendarWeatherService:
    """The running bot: engine, scheduler and the resources they hold."""

    engine: SyncEngine
    scheduler: SyncScheduler
    provider: WeatherProvider
    uses_database: bool = False

    async def start(self, initial_sync: bool = True) -> None:
        """Restore persisted state and start the sync jobs."""
        await self.engine.restore()
        self.scheduler.start(initial_sync=initial_sync)

    async def stop(self) -> None:
        """Stop the sync jobs and release connections."""
        self.scheduler.shutdown()
        await self.provider.aclose()
        if self.uses_database:
            await close_db()


async def build_service(settings: Settings) -> CalendarWeatherService:
    """Build the service from settings.

    Raises:
        CredentialError: If Google credentials are missing or unusable
    """
    credentials = CredentialProvider.from_settings(settings).get_credentials()
    client = GoogleCalendarClient(credentials)

    provider = WeatherAPIProvider(api_key=settings.weatherapi_key)
    if not settings.weatherapi_key:
        logger.warning(
            "WEATHERAPI_KEY is not set; titles will read '(weather unavailable)'"
        )

    lookup = WeatherLookup(
        provider,
        default_location=settings.weather_location,
        tz=settings.timezone,
        horizon_days=settings.forecast_horizon_days,
        nowcast_window=timedelta(minutes=settings.nowcast_minutes),
    )

    state_store = None
    if settings.persistence_enabled:
        await init_db(settings.database_url, echo=settings.database_echo)
        await create_tables()
        state_store = SyncStateStore(get_session_factory())

    engine = SyncEngine(
        client,
        lookup,
        calendar_id=settings.calendar_id,
        window_days=settings.sync_window_days,
        prefer_event_location=settings.prefer_event_location,
        state_store=state_store,
    )

    scheduler = SyncScheduler(
        engine,
        watch_interval=timedelta(minutes=settings.watch_interval_minutes),
        full_sync_interval=timedelta(minutes=settings.full_sync_interval_minutes),
    )

    return CalendarWeatherService(
        engine=engine,
        scheduler=scheduler,
        provider=provider,
        uses_database=state_store is not None,
    )
