"""Weather lookups for calendar events."""

from calendar_weather.weather.lookup import WeatherLookup

__all__ = ["WeatherLookup"]
