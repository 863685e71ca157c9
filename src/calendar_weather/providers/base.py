"""Base weather provider abstraction.

This module defines the interface for weather data providers and the canonical
format that all providers must translate their data into.

## Canonical Data Format

All weather providers must translate their API responses into the models
defined in `calendar_weather.models.weather`:

- `CurrentConditions` for point-in-time observations
- `Forecast` made of `ForecastDay` entries, each holding `HourlyForecast` slots

Hourly times are local to the forecast location, so a slot's `.hour` can be
matched directly against an event's local start hour.

### Canonical Units
- Temperature: Celsius (°C)
- Probabilities: percentage (0-100)

## Errors

- `ProviderError`: any failed request or unparseable response
- `RateLimitError`: HTTP 429
- `AuthenticationError`: missing or rejected API key
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from calendar_weather.models.weather import CurrentConditions, Forecast


class ProviderError(Exception):
    """Base exception for weather provider errors."""

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.response_body = response_body


class RateLimitError(ProviderError):
    """Raised when provider rate limit is exceeded."""

    def __init__(
        self,
        provider: str,
        retry_after: int | None = None,
        status_code: int | None = None,
    ):
        super().__init__(
            f"Rate limit exceeded for {provider}",
            provider=provider,
            status_code=status_code,
        )
        self.retry_after = retry_after


class AuthenticationError(ProviderError):
    """Raised when authentication fails."""

    pass


class WeatherProvider(ABC):
    """Abstract base class for weather data providers.

    Attributes:
        name: Human-readable provider name
        base_url: Base URL for the API
        requires_api_key: Whether this provider requires an API key

    Example:
        ```python
        async with WeatherAPIProvider(api_key="...") as provider:
            forecast = await provider.get_forecast("Seoul", days=3)
        ```
    """

    name: str
    base_url: str
    requires_api_key: bool = False

    def __init__(
        self,
        api_key: str | None = None,
        user_agent: str | None = None,
        timeout: float = 30.0,
    ):
        """Initialize the provider.

        Args:
            api_key: API key if required by the provider
            user_agent: User-Agent string for requests
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.user_agent = user_agent or "calendar-weather/0.1.0"
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> WeatherProvider:
        """Enter async context manager."""
        self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _get_default_headers(self) -> dict[str, str]:
        """Get default headers for requests."""
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    async def _fetch(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Fetch data from the API with retry logic.

        Args:
            url: Full URL to fetch
            params: Query parameters
            headers: Additional headers

        Returns:
            HTTP response

        Raises:
            ProviderError: If the request fails
            RateLimitError: If rate limit is exceeded
            AuthenticationError: If the API key is missing or rejected
        """
        client = self._get_client()
        request_headers = self._get_default_headers()
        if headers:
            request_headers.update(headers)

        response = await client.get(url, params=params, headers=request_headers)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                self.name,
                retry_after=int(retry_after) if retry_after else None,
                status_code=429,
            )

        if response.status_code in (401, 403):
            raise AuthenticationError(
                "API key rejected",
                provider=self.name,
                status_code=response.status_code,
                response_body=response.text,
            )

        if response.status_code >= 400:
            raise ProviderError(
                f"API request failed: {response.status_code}",
                provider=self.name,
                status_code=response.status_code,
                response_body=response.text,
            )

        return response

    def _parse_json(self, response: httpx.Response) -> dict[str, Any]:
        """Decode a JSON response body."""
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                f"Failed to parse response: {e}",
                provider=self.name,
                response_body=response.text,
            )

    @abstractmethod
    async def get_current(self, location: str) -> CurrentConditions:
        """Get current conditions for a location.

        Args:
            location: Location query (city name, address or "lat,lon")

        Returns:
            Current conditions in canonical format

        Raises:
            ProviderError: If conditions cannot be retrieved
        """
        pass

    @abstractmethod
    async def get_forecast(self, location: str, days: int = 1) -> Forecast:
        """Get a multi-day hourly forecast for a location.

        Args:
            location: Location query (city name, address or "lat,lon")
            days: Number of forecast days starting today

        Returns:
            Forecast data in canonical format

        Raises:
            ProviderError: If forecast cannot be retrieved
        """
        pass

    @abstractmethod
    def _translate_forecast(
        self,
        response_data: dict[str, Any],
        location: str,
    ) -> Forecast:
        """Translate provider-specific response to canonical format.

        Args:
            response_data: Raw JSON response from provider
            location: Location query the request was made for

        Returns:
            Forecast in canonical format
        """
        pass

    def get_max_forecast_days(self) -> int:
        """Get maximum forecast days supported."""
        return 7
