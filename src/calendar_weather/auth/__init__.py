"""Authentication module for the calendar weather bot.

Builds Google OAuth credentials from JSON supplied in the environment.

## Scopes

- https://www.googleapis.com/auth/calendar: Read events and update titles

## Startup

Credentials must load before the first sync; a `CredentialError` is fatal.
"""

from calendar_weather.auth.credentials import (
    CredentialError,
    CredentialProvider,
)

__all__ = [
    "CredentialError",
    "CredentialProvider",
]
