"""Tests for Google credential loading."""

import json
from datetime import datetime

import pytest

from calendar_weather.auth.credentials import (
    DEFAULT_SCOPES,
    CredentialError,
    CredentialProvider,
)
from calendar_weather.config import Settings

CLIENT_CONFIG = {
    "installed": {
        "client_id": "client-id.apps.googleusercontent.com",
        "client_secret": "client-secret",
        "token_uri": "https://oauth2.googleapis.com/token",
    }
}


class TestCredentialProvider:
    """Tests for CredentialProvider.get_credentials."""

    def test_node_token_layout(self):
        """Test a token with access_token and millisecond expiry_date."""
        token = {
            "access_token": "ya29.token",
            "refresh_token": "1//refresh",
            "expiry_date": 1718409600000,  # 2024-06-15T00:00:00Z
        }
        provider = CredentialProvider(json.dumps(CLIENT_CONFIG), json.dumps(token))

        credentials = provider.get_credentials()

        assert credentials.token == "ya29.token"
        assert credentials.refresh_token == "1//refresh"
        assert credentials.client_id == "client-id.apps.googleusercontent.com"
        assert credentials.expiry == datetime(2024, 6, 15, 0, 0)
        assert credentials.scopes == DEFAULT_SCOPES

    def test_google_auth_token_layout(self):
        """Test a token saved by google-auth with an ISO expiry."""
        token = {
            "token": "ya29.token",
            "refresh_token": "1//refresh",
            "expiry": "2024-06-15T09:00:00+09:00",
        }
        provider = CredentialProvider(CLIENT_CONFIG, token)

        credentials = provider.get_credentials()

        assert credentials.expiry == datetime(2024, 6, 15, 0, 0)

    def test_web_client(self):
        """Test a web client configuration is accepted."""
        provider = CredentialProvider(
            {"web": CLIENT_CONFIG["installed"]}, {"refresh_token": "1//refresh"}
        )

        credentials = provider.get_credentials()

        assert credentials.token is None
        assert credentials.refresh_token == "1//refresh"

    def test_missing_credentials(self):
        """Test a missing client configuration."""
        provider = CredentialProvider(None, {"refresh_token": "x"})

        with pytest.raises(CredentialError, match="GOOGLE_CREDENTIALS"):
            provider.get_credentials()

    def test_missing_token(self):
        """Test a missing token."""
        provider = CredentialProvider(CLIENT_CONFIG, "")

        with pytest.raises(CredentialError, match="GOOGLE_TOKEN"):
            provider.get_credentials()

    def test_invalid_json(self):
        """Test malformed JSON is reported."""
        provider = CredentialProvider("{not json", {"refresh_token": "x"})

        with pytest.raises(CredentialError, match="not valid JSON"):
            provider.get_credentials()

    def test_client_without_secret(self):
        """Test a client block without a secret is rejected."""
        provider = CredentialProvider(
            {"installed": {"client_id": "id"}}, {"refresh_token": "x"}
        )

        with pytest.raises(CredentialError, match="client_secret"):
            provider.get_credentials()

    def test_token_without_tokens(self):
        """Test a token document with neither token is rejected."""
        provider = CredentialProvider(CLIENT_CONFIG, {"scope": "calendar"})

        with pytest.raises(CredentialError, match="access token or a refresh token"):
            provider.get_credentials()

    def test_expired_without_refresh(self):
        """Test an expired access token that cannot be refreshed."""
        provider = CredentialProvider(
            CLIENT_CONFIG,
            {"access_token": "ya29.old", "expiry_date": 1000},
        )

        with pytest.raises(CredentialError, match="expired"):
            provider.get_credentials()

    def test_from_settings(self):
        """Test building from settings."""
        settings = Settings(
            google_credentials=json.dumps(CLIENT_CONFIG),
            google_token=json.dumps({"refresh_token": "1//refresh"}),
        )

        provider = CredentialProvider.from_settings(settings)

        assert provider.get_credentials().refresh_token == "1//refresh"
