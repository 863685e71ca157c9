"""Weather lookup for event start times.

Wraps a `WeatherProvider` and reduces its responses to a single
`WeatherDescriptor` for a location and target time. Lookups never raise:
anything that goes wrong (request failure, unknown location, a date beyond
the forecast horizon) degrades to `UNAVAILABLE`.

## Forecast Matching

1. Days ahead = ceil((target - now) / 1 day); beyond the horizon -> UNAVAILABLE
2. Request (days ahead + 1) forecast days from the provider
3. Pick the forecast day whose date equals the target's local date
4. Pick the hourly slot for the target's local hour, else the day's first slot
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from calendar_weather.models.weather import (
    UNAVAILABLE,
    WeatherDescriptor,
    WeatherResult,
)
from calendar_weather.providers.base import WeatherProvider

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 14
SECONDS_PER_DAY = 24 * 60 * 60


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WeatherLookup:
    """Descriptor lookups for a location and time.

    Example:
        ```python
        lookup = WeatherLookup(provider, default_location="Seoul")
        descriptor = await lookup.forecast("Seoul", event.start_time)
        ```
    """

    def __init__(
        self,
        provider: WeatherProvider,
        default_location: str,
        tz: str = "UTC",
        horizon_days: int = DEFAULT_HORIZON_DAYS,
        nowcast_window: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the lookup.

        Args:
            provider: Weather provider used for network calls
            default_location: Location used when none is given
            tz: IANA timezone for matching forecast days and hours
            horizon_days: Furthest day ahead a forecast is attempted for
            nowcast_window: Targets starting this soon use current conditions
            clock: Returns the current aware datetime
        """
        self.provider = provider
        self.default_location = default_location
        self.tz = ZoneInfo(tz)
        self.horizon_days = horizon_days
        self.nowcast_window = nowcast_window
        self._clock = clock

    def to_local(self, moment: datetime) -> datetime:
        """Convert to the lookup timezone; naive values are taken as local."""
        if moment.tzinfo is None:
            return moment.replace(tzinfo=self.tz)
        return moment.astimezone(self.tz)

    def days_ahead(self, target_time: datetime) -> int:
        """Whole days from now until ``target_time``, rounded up."""
        delta = self.to_local(target_time) - self._clock()
        return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)

    async def current(self, location: str | None = None) -> WeatherResult:
        """Get current conditions as a descriptor."""
        location = location or self.default_location
        try:
            conditions = await self.provider.get_current(location)
            return WeatherDescriptor.from_reading(conditions)
        except Exception as e:
            logger.warning(f"Current weather lookup failed for {location}: {e}")
            return UNAVAILABLE

    async def forecast(
        self,
        location: str | None,
        target_time: datetime,
    ) -> WeatherResult:
        """Get the forecast for the hour containing ``target_time``."""
        location = location or self.default_location
        local_target = self.to_local(target_time)

        days_ahead = self.days_ahead(local_target)
        if days_ahead > self.horizon_days:
            logger.debug(
                f"{local_target.isoformat()} is {days_ahead} days out, "
                f"beyond the {self.horizon_days} day horizon"
            )
            return UNAVAILABLE

        days = min(max(days_ahead + 1, 1), self.provider.get_max_forecast_days())

        try:
            forecast = await self.provider.get_forecast(location, days=days)

            forecast_day = forecast.get_day(local_target.date())
            if forecast_day is None:
                logger.info(
                    f"No forecast for {local_target.date().isoformat()} at {location}"
                )
                return UNAVAILABLE

            slot = forecast_day.get_hour(local_target.hour)
            if slot is None:
                return UNAVAILABLE

            return WeatherDescriptor.from_reading(slot)
        except Exception as e:
            logger.warning(f"Weather forecast lookup failed for {location}: {e}")
            return UNAVAILABLE

    async def lookup(
        self,
        location: str | None,
        target_time: datetime,
    ) -> WeatherResult:
        """Pick current conditions or the forecast depending on how soon
        ``target_time`` is.
        """
        until_start = self.to_local(target_time) - self._clock()
        if timedelta(0) <= until_start <= self.nowcast_window:
            return await self.current(location)
        return await self.forecast(location, target_time)
