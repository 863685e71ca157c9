"""Google Calendar API client.

Provides the two calendar operations the sync engine needs:
- List events (full range or incremental via sync token)
- Patch an event's title

## API Documentation

https://developers.google.com/calendar/api/v3/reference

## Authentication

Uses OAuth 2.0 credentials from `calendar_weather.auth`. Access tokens are
refreshed automatically by the client library when a refresh token is present.

## Sync Tokens

A full list request (`timeMin`/`timeMax`) returns a `nextSyncToken` on its last
page. Passing it back as `syncToken` returns only events changed since then.
The two modes are mutually exclusive: `timeMin`, `timeMax` and `orderBy` are
rejected alongside a sync token. An expired token is answered with HTTP 410
Gone, raised here as `TokenInvalidated`.

## Rate Limits

Google Calendar API has quotas:
- 1,000,000 queries per day (default)
- 500 queries per 100 seconds per user

Use incremental sync (sync tokens) to minimize API calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, tzinfo
from typing import Any

from google.auth.credentials import Credentials
from google.auth.exceptions import GoogleAuthError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

logger = logging.getLogger(__name__)

TOKEN_INVALIDATED_STATUS = 410


class CalendarError(Exception):
    """Base exception for calendar collaborator errors."""


class TokenInvalidated(CalendarError):
    """Raised when the provider no longer accepts a sync token."""


class TransportError(CalendarError):
    """Raised when a calendar request fails."""

    def __init__(
        self,
        message: str,
        phase: str,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.phase = phase
        self.status_code = status_code


@dataclass(frozen=True)
class SyncWindow:
    """Time bounds for a full (range) sync."""

    start: datetime
    end: datetime | None = None

    def contains(self, moment: datetime) -> bool:
        """Check whether a start time falls on or before the upper bound."""
        return self.end is None or moment <= self.end


@dataclass
class CalendarEvent:
    """A calendar event."""

    id: str
    calendar_id: str
    summary: str
    location: str | None = None
    start: datetime | None = None
    start_date: str | None = None  # For all-day events (YYYY-MM-DD)
    time_zone: str | None = None
    is_all_day: bool = False
    status: str = "confirmed"  # confirmed, tentative, cancelled
    etag: str | None = None
    raw_data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict[str, Any], calendar_id: str) -> CalendarEvent:
        """Create from Google Calendar API response."""
        start_data = data.get("start", {})

        # Determine if all-day event
        is_all_day = "date" in start_data

        start = None
        start_date = None
        if is_all_day:
            start_date = start_data.get("date")
        else:
            start_str = start_data.get("dateTime")
            if start_str:
                start = datetime.fromisoformat(start_str.replace("Z", "+00:00"))

        return cls(
            id=data["id"],
            calendar_id=calendar_id,
            summary=data.get("summary", ""),
            location=data.get("location"),
            start=start,
            start_date=start_date,
            time_zone=start_data.get("timeZone"),
            is_all_day=is_all_day,
            status=data.get("status", "confirmed"),
            etag=data.get("etag"),
            raw_data=data,
        )

    @property
    def is_cancelled(self) -> bool:
        return self.status == "cancelled"

    def start_time(self, tz: tzinfo) -> datetime | None:
        """Start as an aware datetime; all-day events start at local midnight."""
        if self.start is not None:
            if self.start.tzinfo is None:
                return self.start.replace(tzinfo=tz)
            return self.start
        if self.start_date:
            return datetime.combine(date.fromisoformat(self.start_date), time(), tzinfo=tz)
        return None


@dataclass
class EventPage:
    """Events returned by one list call, with the token for the next one."""

    events: list[CalendarEvent]
    next_sync_token: str | None


class GoogleCalendarClient:
    """Client for Google Calendar API.

    Example:
        ```python
        client = GoogleCalendarClient(credentials)

        # Full sync
        page = client.list_events("primary", window=SyncWindow(start, end))

        # Incremental sync
        page = client.list_events("primary", sync_token=page.next_sync_token)

        # Update a title
        client.patch_event_title("primary", event_id, "Standup (cloudy, 20°C)")
        ```
    """

    def __init__(self, credentials: Credentials):
        """Initialize the client.

        Args:
            credentials: Authorized Google credentials
        """
        self._credentials = credentials
        self._service = build(
            "calendar", "v3", credentials=credentials, cache_discovery=False
        )

    def list_events(
        self,
        calendar_id: str,
        window: SyncWindow | None = None,
        sync_token: str | None = None,
        max_results: int = 250,
    ) -> EventPage:
        """List events from a calendar.

        Args:
            calendar_id: Calendar ID (use 'primary' for primary calendar)
            window: Time bounds for a full sync (ignored with a sync token)
            sync_token: Token for incremental sync
            max_results: Page size

        Returns:
            EventPage with events in API order and the next sync token

        Raises:
            TokenInvalidated: If the sync token has expired (HTTP 410)
            TransportError: If the request fails for any other reason
        """
        events = []
        page_token = None

        params: dict[str, Any] = {
            "calendarId": calendar_id,
            "maxResults": max_results,
            "singleEvents": True,  # Expand recurring events
        }

        if sync_token:
            params["syncToken"] = sync_token
        else:
            params["orderBy"] = "startTime"
            if window:
                params["timeMin"] = window.start.isoformat()
                if window.end:
                    params["timeMax"] = window.end.isoformat()

        while True:
            if page_token:
                params["pageToken"] = page_token

            try:
                result = self._service.events().list(**params).execute()
            except HttpError as e:
                if e.resp.status == TOKEN_INVALIDATED_STATUS:
                    raise TokenInvalidated(
                        f"Sync token expired for calendar {calendar_id}"
                    ) from e
                raise TransportError(
                    f"Listing events failed: {e.resp.status}",
                    phase="list",
                    status_code=e.resp.status,
                ) from e
            except (GoogleAuthError, OSError) as e:
                raise TransportError(
                    f"Listing events failed: {e}", phase="list"
                ) from e

            for item in result.get("items", []):
                events.append(CalendarEvent.from_api(item, calendar_id))

            page_token = result.get("nextPageToken")
            if not page_token:
                return EventPage(
                    events=events,
                    next_sync_token=result.get("nextSyncToken"),
                )

    def patch_event_title(
        self,
        calendar_id: str,
        event_id: str,
        title: str,
    ) -> None:
        """Replace an event's title, leaving every other field untouched.

        Raises:
            TransportError: If the patch fails
        """
        try:
            (
                self._service.events()
                .patch(
                    calendarId=calendar_id,
                    eventId=event_id,
                    body={"summary": title},
                )
                .execute()
            )
        except HttpError as e:
            raise TransportError(
                f"Patching event {event_id} failed: {e.resp.status}",
                phase="patch",
                status_code=e.resp.status,
            ) from e
        except (GoogleAuthError, OSError) as e:
            raise TransportError(
                f"Patching event {event_id} failed: {e}", phase="patch"
            ) from e
