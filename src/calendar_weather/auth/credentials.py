"""Google credentials from pre-provisioned environment JSON.

The bot never runs an interactive consent flow. Instead the OAuth client
configuration and an authorized-user token are supplied as JSON strings:

- GOOGLE_CREDENTIALS: the client secrets file contents, e.g.
  `{"installed": {"client_id": "...", "client_secret": "...", ...}}`
- GOOGLE_TOKEN: a token obtained once out of band. Both the google-auth
  layout (`token`, `refresh_token`, `expiry`) and the Node googleapis layout
  (`access_token`, `refresh_token`, `expiry_date` in milliseconds) are read.

Expired access tokens are refreshed by the Google client library on first use
as long as a refresh token is present.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from google.oauth2.credentials import Credentials

from calendar_weather.config import Settings

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
DEFAULT_SCOPES = ["https://www.googleapis.com/auth/calendar"]


class CredentialError(RuntimeError):
    """Raised when usable Google credentials cannot be built."""


def _load_json(value: str | dict[str, Any] | None, name: str) -> dict[str, Any]:
    if value is None or value == "":
        raise CredentialError(f"No {name} found in environment variables")
    if isinstance(value, dict):
        return value
    try:
        data = json.loads(value)
    except json.JSONDecodeError as e:
        raise CredentialError(f"{name} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise CredentialError(f"{name} must be a JSON object")
    return data


def _parse_expiry(token_info: dict[str, Any]) -> datetime | None:
    """Expiry as naive UTC, which is what google-auth compares against."""
    if token_info.get("expiry"):
        expiry = datetime.fromisoformat(token_info["expiry"].replace("Z", "+00:00"))
    elif token_info.get("expiry_date"):
        expiry = datetime.fromtimestamp(token_info["expiry_date"] / 1000, tz=timezone.utc)
    else:
        return None

    if expiry.tzinfo is not None:
        expiry = expiry.astimezone(timezone.utc).replace(tzinfo=None)
    return expiry


class CredentialProvider:
    """Builds authorized Google credentials.

    Example:
        ```python
        provider = CredentialProvider.from_settings(get_settings())
        credentials = provider.get_credentials()
        client = GoogleCalendarClient(credentials)
        ```
    """

    def __init__(
        self,
        client_config: str | dict[str, Any] | None,
        token: str | dict[str, Any] | None,
        scopes: list[str] | None = None,
    ):
        """Initialize the provider.

        Args:
            client_config: OAuth client JSON (string or parsed)
            token: Authorized-user token JSON (string or parsed)
            scopes: OAuth scopes the token was granted
        """
        self.client_config = client_config
        self.token = token
        self.scopes = scopes or DEFAULT_SCOPES

    @classmethod
    def from_settings(cls, settings: Settings) -> CredentialProvider:
        return cls(
            client_config=settings.google_credentials,
            token=settings.google_token,
            scopes=settings.google_calendar_scopes,
        )

    def get_credentials(self) -> Credentials:
        """Build credentials from the configured JSON.

        Raises:
            CredentialError: If either JSON document is missing or unusable
        """
        config = _load_json(self.client_config, "GOOGLE_CREDENTIALS")
        client = config.get("installed") or config.get("web")
        if not client or not client.get("client_id") or not client.get("client_secret"):
            raise CredentialError(
                "GOOGLE_CREDENTIALS must contain an 'installed' or 'web' client "
                "with client_id and client_secret"
            )

        token_info = _load_json(self.token, "GOOGLE_TOKEN")
        access_token = token_info.get("token") or token_info.get("access_token")
        refresh_token = token_info.get("refresh_token")
        if not access_token and not refresh_token:
            raise CredentialError(
                "GOOGLE_TOKEN must contain an access token or a refresh token"
            )

        try:
            expiry = _parse_expiry(token_info)
        except (TypeError, ValueError) as e:
            raise CredentialError(f"GOOGLE_TOKEN has an invalid expiry: {e}") from e

        credentials = Credentials(
            token=access_token,
            refresh_token=refresh_token,
            token_uri=client.get("token_uri", GOOGLE_TOKEN_URL),
            client_id=client["client_id"],
            client_secret=client["client_secret"],
            scopes=self.scopes,
            expiry=expiry,
        )

        if credentials.expired and not refresh_token:
            raise CredentialError("Access token has expired and no refresh token is set")

        logger.info("Google credentials loaded")
        return credentials
