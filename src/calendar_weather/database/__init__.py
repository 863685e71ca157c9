"""Database module for the calendar weather bot.

This module provides:
- SQLAlchemy async database connection
- The sync state model holding each calendar's sync token
- A store the sync engine uses to persist that token across restarts
"""

from calendar_weather.database.connection import (
    close_db,
    create_tables,
    get_session_factory,
    init_db,
)
from calendar_weather.database.models import Base, SyncState
from calendar_weather.database.store import SyncStateStore

__all__ = [
    # Connection
    "init_db",
    "close_db",
    "create_tables",
    "get_session_factory",
    # Models
    "Base",
    "SyncState",
    # Store
    "SyncStateStore",
]
