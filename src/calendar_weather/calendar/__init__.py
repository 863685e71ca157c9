"""Calendar integration module.

Provides the Google Calendar client and the sync engine that annotates event
titles with weather.

## Google Calendar API

Uses the Google Calendar API v3:
- https://developers.google.com/calendar/api/v3/reference

## Sync Modes

1. **Full**: All events from now through the sync window
2. **Incremental**: Only events changed since the last sync token

## Event Processing

1. Fetch events from calendar
2. Skip cancelled events and events beyond the sync window
3. Fetch weather for the event's start time
4. Rewrite the title if its weather annotation changed
"""

from calendar_weather.calendar.google_calendar import (
    CalendarError,
    CalendarEvent,
    EventPage,
    GoogleCalendarClient,
    SyncWindow,
    TokenInvalidated,
    TransportError,
)
from calendar_weather.calendar.sync import (
    CalendarClient,
    SyncEngine,
    SyncReport,
)

__all__ = [
    "GoogleCalendarClient",
    "CalendarClient",
    "CalendarEvent",
    "EventPage",
    "SyncWindow",
    "CalendarError",
    "TokenInvalidated",
    "TransportError",
    "SyncEngine",
    "SyncReport",
]
