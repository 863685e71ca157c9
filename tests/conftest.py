"""Pytest fixtures for calendar weather bot tests.

This module provides test fixtures that ensure:
1. No external API calls are made (WeatherAPI, Google APIs)
2. A fixed clock so forecast matching is deterministic
3. Isolated test environment with controlled configuration
"""

import asyncio
import os
from datetime import date, datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from zoneinfo import ZoneInfo

import pytest

# Set test environment BEFORE importing application modules
os.environ.setdefault("WEATHERAPI_KEY", "test-weatherapi-key")
os.environ.setdefault("DEBUG", "true")
os.environ.pop("DATABASE_URL", None)

from calendar_weather.calendar.google_calendar import (
    CalendarEvent,
    EventPage,
    SyncWindow,
)
from calendar_weather.models.weather import (
    Forecast,
    ForecastDay,
    HourlyForecast,
    WeatherDescriptor,
    WeatherResult,
)

SEOUL = ZoneInfo("Asia/Seoul")

# 2024-06-15 09:00 in Seoul
NOW = datetime(2024, 6, 15, 0, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return NOW


# =============================================================================
# Test Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache before each test to ensure clean state."""
    from calendar_weather.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Fakes
# =============================================================================


class FakeCalendar:
    """In-memory calendar collaborator.

    ``responses`` is consumed one entry per list call; an entry is either an
    EventPage or an exception to raise. Patch failures are keyed by event id.
    """

    def __init__(
        self,
        responses: list[EventPage | Exception] | None = None,
        patch_failures: dict[str, Exception] | None = None,
    ):
        self.responses = list(responses or [])
        self.patch_failures = patch_failures or {}
        self.list_calls: list[dict[str, Any]] = []
        self.patches: list[tuple[str, str]] = []

    def list_events(
        self,
        calendar_id: str,
        window: SyncWindow | None = None,
        sync_token: str | None = None,
    ) -> EventPage:
        self.list_calls.append(
            {"calendar_id": calendar_id, "window": window, "sync_token": sync_token}
        )
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def patch_event_title(self, calendar_id: str, event_id: str, title: str) -> None:
        self.patches.append((event_id, title))
        if event_id in self.patch_failures:
            raise self.patch_failures[event_id]


class FakeLookup:
    """Weather lookup returning a fixed result."""

    def __init__(self, result: WeatherResult, tz: ZoneInfo = SEOUL):
        self.result = result
        self.tz = tz
        self.calls: list[tuple[str | None, datetime]] = []
        self.gate: asyncio.Event | None = None

    async def lookup(self, location: str | None, target_time: datetime) -> WeatherResult:
        self.calls.append((location, target_time))
        if self.gate is not None:
            await self.gate.wait()
        return self.result


def make_event(
    event_id: str,
    summary: str,
    start: str = "2024-06-16T10:00:00+09:00",
    **extra: Any,
) -> CalendarEvent:
    """Build a CalendarEvent from an API-shaped payload."""
    data: dict[str, Any] = {"id": event_id, "summary": summary}
    if "T" in start:
        data["start"] = {"dateTime": start}
    else:
        data["start"] = {"date": start}
    data.update(extra)
    return CalendarEvent.from_api(data, "primary")


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def cloudy() -> WeatherDescriptor:
    return WeatherDescriptor(condition_text="Cloudy", temperature_c=20)


@pytest.fixture
def fake_lookup(cloudy: WeatherDescriptor) -> FakeLookup:
    return FakeLookup(cloudy)


@pytest.fixture
def sample_forecast() -> Forecast:
    """Two forecast days for Seoul with hourly slots from 06:00 to 18:00."""
    days = []
    for offset, condition in ((0, "Sunny"), (1, "Patchy rain nearby")):
        day = date(2024, 6, 15) + timedelta(days=offset)
        hourly = [
            HourlyForecast(
                time=datetime(day.year, day.month, day.day, hour),
                condition_text=condition,
                temperature_c=15.0 + hour * 0.5,
            )
            for hour in range(6, 19)
        ]
        days.append(ForecastDay(day=day, hourly=hourly))

    return Forecast(
        location="Seoul",
        provider="test",
        generated_at=NOW,
        timezone="Asia/Seoul",
        days=days,
    )


@pytest.fixture
def mock_weather_provider(sample_forecast: Forecast) -> MagicMock:
    """Mock weather provider to prevent external API calls."""
    provider = MagicMock()
    provider.name = "mock"
    provider.get_forecast = AsyncMock(return_value=sample_forecast)
    provider.get_current = AsyncMock()
    provider.get_max_forecast_days.return_value = 14
    provider.aclose = AsyncMock()
    return provider


@pytest.fixture
def weatherapi_forecast_payload() -> dict[str, Any]:
    """Trimmed WeatherAPI forecast.json response."""
    return {
        "location": {
            "name": "Seoul",
            "country": "South Korea",
            "tz_id": "Asia/Seoul",
            "localtime": "2024-06-15 9:00",
        },
        "current": {
            "last_updated": "2024-06-15 09:00",
            "temp_c": 21.3,
            "condition": {"text": "Partly cloudy", "code": 1003},
        },
        "forecast": {
            "forecastday": [
                {
                    "date": "2024-06-15",
                    "hour": [
                        {
                            "time": "2024-06-15 00:00",
                            "temp_c": 18.4,
                            "chance_of_rain": 0,
                            "condition": {"text": "Clear", "code": 1000},
                        },
                        {
                            "time": "2024-06-15 01:00",
                            "temp_c": 17.9,
                            "chance_of_rain": 10,
                            "condition": {"text": "Light rain shower", "code": 1240},
                        },
                    ],
                },
                {
                    "date": "2024-06-16",
                    "hour": [
                        {
                            "time": "2024-06-16 00:00",
                            "temp_c": 19.5,
                            "chance_of_rain": 85,
                            "condition": {"text": "Moderate rain", "code": 1189},
                        },
                    ],
                },
            ]
        },
    }
