"""WeatherAPI.com provider.

## API Documentation Summary
Source: https://www.weatherapi.com/docs/

## Endpoints
- Current: https://api.weatherapi.com/v1/current.json?key={key}&q={location}
- Forecast: https://api.weatherapi.com/v1/forecast.json?key={key}&q={location}&days={n}

## Authentication
- API key passed as the `key` query parameter
- Missing key: HTTP 401; disabled or over-quota key: HTTP 403

## Location Query (`q`)
City name ("Seoul"), "lat,lon", postcode, IATA code or IP address.

## Forecast Horizon
Up to 14 days (`days=1..14`), depending on plan.

## Response Format
```json
{
  "location": {"name": "Seoul", "tz_id": "Asia/Seoul", "localtime": "2024-06-15 9:00"},
  "current": {
    "last_updated": "2024-06-15 09:00",
    "temp_c": 21.0,
    "condition": {"text": "Partly cloudy", "code": 1003}
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
            "condition": {"text": "Clear", "code": 1000}
          }
        ]
      }
    ]
  }
}
```

## Variable Translation (WeatherAPI -> Canonical)
| WeatherAPI Field | Canonical Field | Notes |
|------------------|-----------------|-------|
| forecastday[].date | ForecastDay.day | YYYY-MM-DD |
| hour[].time | HourlyForecast.time | Local time, "YYYY-MM-DD HH:MM" |
| hour[].temp_c | HourlyForecast.temperature_c | °C |
| hour[].condition.text | HourlyForecast.condition_text | Free text |
| hour[].chance_of_rain | HourlyForecast.chance_of_rain_percent | % |
| current.temp_c | CurrentConditions.temperature_c | °C |
| current.condition.text | CurrentConditions.condition_text | Free text |
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from calendar_weather.models.weather import (
    CurrentConditions,
    Forecast,
    ForecastDay,
    HourlyForecast,
)
from calendar_weather.providers.base import AuthenticationError, ProviderError, WeatherProvider

LOCAL_TIME_FORMAT = "%Y-%m-%d %H:%M"
MAX_FORECAST_DAYS = 14


def _parse_local_time(value: str | None) -> datetime | None:
    """Parse WeatherAPI's local "YYYY-MM-DD H:MM" timestamps."""
    if not value:
        return None
    return datetime.strptime(value.strip(), LOCAL_TIME_FORMAT)


class WeatherAPIProvider(WeatherProvider):
    """WeatherAPI.com provider.

    Example:
        ```python
        async with WeatherAPIProvider(api_key="your-api-key") as provider:
            forecast = await provider.get_forecast("Seoul", days=3)
            day = forecast.get_day(date(2024, 6, 15))
        ```
    """

    name = "weatherapi"
    base_url = "https://api.weatherapi.com/v1"
    requires_api_key = True

    def __init__(
        self,
        api_key: str | None,
        user_agent: str | None = None,
        timeout: float = 30.0,
    ):
        """Initialize WeatherAPI provider.

        Args:
            api_key: API key from weatherapi.com
            user_agent: Optional User-Agent string
            timeout: Request timeout in seconds
        """
        super().__init__(api_key=api_key, user_agent=user_agent, timeout=timeout)

    def _require_key(self) -> str:
        if not self.api_key:
            raise AuthenticationError(
                "API key required for WeatherAPI",
                provider=self.name,
            )
        return self.api_key

    async def get_current(self, location: str) -> CurrentConditions:
        """Get current conditions from WeatherAPI.

        Raises:
            ProviderError: If request fails
            AuthenticationError: If API key is missing or invalid
        """
        params = {"key": self._require_key(), "q": location}
        response = await self._fetch(f"{self.base_url}/current.json", params=params)
        data = self._parse_json(response)

        try:
            return self._translate_current(data["current"])
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(
                f"Unexpected current conditions payload: {e}",
                provider=self.name,
                response_body=response.text,
            )

    async def get_forecast(self, location: str, days: int = 1) -> Forecast:
        """Get an hourly forecast from WeatherAPI.

        Args:
            location: Location query
            days: Forecast days, clamped to 1..14

        Raises:
            ProviderError: If request fails
            AuthenticationError: If API key is missing or invalid
        """
        days = max(1, min(days, MAX_FORECAST_DAYS))
        params = {"key": self._require_key(), "q": location, "days": days}
        response = await self._fetch(f"{self.base_url}/forecast.json", params=params)
        data = self._parse_json(response)

        try:
            return self._translate_forecast(data, location)
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(
                f"Unexpected forecast payload: {e}",
                provider=self.name,
                response_body=response.text,
            )

    def _translate_current(self, current: dict[str, Any]) -> CurrentConditions:
        return CurrentConditions(
            time=_parse_local_time(current.get("last_updated")),
            condition_text=current["condition"]["text"],
            temperature_c=current["temp_c"],
            raw_data=current,
        )

    def _translate_forecast(
        self,
        response_data: dict[str, Any],
        location: str,
    ) -> Forecast:
        """Translate WeatherAPI response to canonical format.

        See module docstring for detailed field mapping.
        """
        days: list[ForecastDay] = []

        for day_data in response_data.get("forecast", {}).get("forecastday", []):
            hourly: list[HourlyForecast] = []
            for hour_data in day_data.get("hour", []):
                time = _parse_local_time(hour_data.get("time"))
                temp_c = hour_data.get("temp_c")
                if time is None or temp_c is None:
                    continue  # Skip incomplete slots

                hourly.append(
                    HourlyForecast(
                        time=time,
                        condition_text=hour_data.get("condition", {}).get("text", ""),
                        temperature_c=temp_c,
                        chance_of_rain_percent=hour_data.get("chance_of_rain"),
                        raw_data=hour_data,
                    )
                )

            days.append(
                ForecastDay(
                    day=date.fromisoformat(day_data["date"]),
                    hourly=hourly,
                )
            )

        current = None
        if response_data.get("current"):
            current = self._translate_current(response_data["current"])

        return Forecast(
            location=location,
            provider=self.name,
            generated_at=datetime.now(timezone.utc),
            timezone=response_data.get("location", {}).get("tz_id"),
            days=days,
            current=current,
        )

    def get_max_forecast_days(self) -> int:
        """WeatherAPI serves up to 14 forecast days."""
        return MAX_FORECAST_DAYS
