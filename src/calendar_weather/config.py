"""Application configuration.

Configuration is loaded from environment variables using pydantic-settings.
Credentials and API keys should be provided via environment variables, not
config files.

## Required Environment Variables

- GOOGLE_CREDENTIALS: OAuth client JSON (the ``installed`` or ``web`` block)
- GOOGLE_TOKEN: Authorized-user token JSON (access and refresh token)
- WEATHERAPI_KEY: WeatherAPI.com API key

## Optional Environment Variables

- CALENDAR_ID: Calendar to annotate (default: primary)
- WEATHER_LOCATION: Location query for weather lookups (default: Seoul)
- TIMEZONE: IANA timezone used to match forecast days/hours (default: Asia/Seoul)
- WATCH_INTERVAL_MINUTES: Incremental change check cadence (default: 30)
- FULL_SYNC_INTERVAL_MINUTES: Forced full resync cadence (default: 60)
- DATABASE_URL: Enables durable sync token storage when set
- PORT: Health server port (default: 10000)

## Example .env file

```
GOOGLE_CREDENTIALS={"installed": {"client_id": "...", "client_secret": "..."}}
GOOGLE_TOKEN={"access_token": "...", "refresh_token": "..."}
WEATHERAPI_KEY=your-weatherapi-key
WEATHER_LOCATION=Seoul
```
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Calendar Weather Bot"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 10000

    # Google Calendar
    google_credentials: str | None = Field(
        default=None,
        description="OAuth client configuration JSON",
    )
    google_token: str | None = Field(
        default=None,
        description="Authorized-user token JSON",
    )
    google_calendar_scopes: list[str] = Field(
        default=["https://www.googleapis.com/auth/calendar"],
        description="Google Calendar API scopes",
    )
    calendar_id: str = "primary"

    # Weather
    weatherapi_key: str | None = None
    weather_location: str = "Seoul"
    timezone: str = "Asia/Seoul"
    forecast_horizon_days: int = Field(default=14, ge=1, le=14)
    nowcast_minutes: int = Field(
        default=60,
        ge=0,
        description="Events starting within this many minutes use current conditions",
    )
    prefer_event_location: bool = False

    # Calendar sync
    sync_window_days: int = Field(default=7, ge=1, le=30)
    watch_interval_minutes: int = Field(default=30, ge=1, le=1440)
    full_sync_interval_minutes: int = Field(default=60, ge=1, le=10080)

    # Database (optional sync token persistence)
    database_url: str | None = None
    database_echo: bool = False

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v: str | None) -> str | None:
        """Ensure PostgreSQL URLs use the asyncpg driver."""
        if not v:
            return None
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def validate_intervals(self) -> Settings:
        """The change check must run more often than the full resync."""
        if self.watch_interval_minutes >= self.full_sync_interval_minutes:
            raise ValueError(
                "watch_interval_minutes must be less than full_sync_interval_minutes"
            )
        return self

    @property
    def persistence_enabled(self) -> bool:
        """Check if sync tokens should be stored in the database."""
        return bool(self.database_url)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded once and cached. To reload, clear the cache:
    ```python
    get_settings.cache_clear()
    ```
    """
    return Settings()
