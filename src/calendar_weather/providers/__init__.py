"""Weather data providers."""

from calendar_weather.providers.base import (
    AuthenticationError,
    ProviderError,
    RateLimitError,
    WeatherProvider,
)
from calendar_weather.providers.weatherapi import WeatherAPIProvider

__all__ = [
    "WeatherProvider",
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "WeatherAPIProvider",
]
