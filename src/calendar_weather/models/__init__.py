"""Domain models for the calendar weather bot."""

from calendar_weather.models.health import HealthStatus
from calendar_weather.models.weather import (
    UNAVAILABLE,
    CurrentConditions,
    Forecast,
    ForecastDay,
    HourlyForecast,
    UnavailableWeather,
    WeatherDescriptor,
    WeatherResult,
)

__all__ = [
    # Weather
    "CurrentConditions",
    "Forecast",
    "ForecastDay",
    "HourlyForecast",
    "WeatherDescriptor",
    "UnavailableWeather",
    "UNAVAILABLE",
    "WeatherResult",
    # Health
    "HealthStatus",
]
