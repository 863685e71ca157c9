"""Weather and forecast models.

Canonical models that weather providers translate their responses into,
plus the normalized ``WeatherDescriptor`` used to annotate event titles.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Characters that would break the title annotation if they leaked into
# a condition text.
_UNSAFE_CONDITION_CHARS = re.compile(r"[()]")
_WHITESPACE = re.compile(r"\s+")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)


class CurrentConditions(BaseModel):
    """Point-in-time observed conditions."""

    time: datetime | None = Field(default=None, description="Observation time")
    condition_text: str = Field(..., description="Provider condition text")
    temperature_c: float = Field(..., description="Temperature in Celsius")
    raw_data: dict[str, Any] | None = Field(
        default=None, description="Raw data from weather provider"
    )


class HourlyForecast(BaseModel):
    """Weather forecast for a single hour."""

    time: datetime = Field(..., description="Local forecast time (start of hour)")
    condition_text: str = Field(..., description="Provider condition text")
    temperature_c: float = Field(..., description="Temperature in Celsius")
    chance_of_rain_percent: float | None = Field(
        default=None, ge=0, le=100, description="Chance of rain (%)"
    )
    raw_data: dict[str, Any] | None = Field(
        default=None, description="Raw data from weather provider"
    )


class ForecastDay(BaseModel):
    """Forecast for one calendar day, broken into hourly slots."""

    day: date = Field(..., description="Local calendar date")
    hourly: list[HourlyForecast] = Field(default_factory=list)

    def get_hour(self, hour: int) -> HourlyForecast | None:
        """Get the slot for an hour of the day, or the first slot if missing."""
        for slot in self.hourly:
            if slot.time.hour == hour:
                return slot
        return self.hourly[0] if self.hourly else None


class Forecast(BaseModel):
    """Multi-day weather forecast for a location."""

    location: str = Field(..., description="Location query the forecast is for")
    provider: str = Field(..., description="Weather data provider name")
    generated_at: datetime = Field(..., description="When the forecast was fetched")
    timezone: str | None = Field(
        default=None, description="Timezone reported for the forecast location"
    )
    days: list[ForecastDay] = Field(default_factory=list)
    current: CurrentConditions | None = None

    def get_day(self, day: date) -> ForecastDay | None:
        """Get the forecast for a calendar date."""
        for forecast_day in self.days:
            if forecast_day.day == day:
                return forecast_day
        return None


class WeatherDescriptor(BaseModel):
    """Normalized weather used in an event title.

    The condition text is lowercased and cleaned of parentheses so the
    annotation it produces can always be stripped again.
    """

    model_config = ConfigDict(frozen=True)

    condition_text: str
    temperature_c: int

    @field_validator("condition_text", mode="before")
    @classmethod
    def normalize_condition(cls, v: str) -> str:
        text = _UNSAFE_CONDITION_CHARS.sub(" ", str(v))
        return _WHITESPACE.sub(" ", text).strip().lower()

    @field_validator("temperature_c", mode="before")
    @classmethod
    def round_temperature(cls, v: float) -> int:
        return round_half_up(float(v))

    @classmethod
    def from_reading(
        cls, reading: CurrentConditions | HourlyForecast
    ) -> WeatherDescriptor:
        """Build a descriptor from a current or hourly reading."""
        return cls(
            condition_text=reading.condition_text,
            temperature_c=reading.temperature_c,
        )


class UnavailableWeather:
    """Sentinel for a lookup that produced no usable weather."""

    _instance: UnavailableWeather | None = None

    def __new__(cls) -> UnavailableWeather:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNAVAILABLE"

    def __bool__(self) -> bool:
        return False


UNAVAILABLE = UnavailableWeather()

WeatherResult = Union[WeatherDescriptor, UnavailableWeather]
