"""Durable sync token storage.

Without a store the sync token lives only in memory and every restart begins
with a full sync. With one, the engine restores the token on startup and
saves it after every cycle.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from calendar_weather.database.models import SyncState

logger = logging.getLogger(__name__)


class SyncStateStore:
    """Reads and writes `SyncState` rows.

    Example:
        ```python
        await init_db(settings.database_url)
        store = SyncStateStore(get_session_factory())

        await store.save("primary", sync_token="CPDAlvWDx70CEPDAlvWDx70CGAU=")
        state = await store.load("primary")
        ```
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def load(self, calendar_id: str) -> SyncState | None:
        """Get the stored state for a calendar, if any."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(SyncState).where(SyncState.calendar_id == calendar_id)
            )
            return result.scalar_one_or_none()

    async def save(
        self,
        calendar_id: str,
        sync_token: str | None,
        sync_error: str | None = None,
        synced_at: datetime | None = None,
    ) -> None:
        """Create or update the stored state for a calendar."""
        async with self._session_factory() as session:
            state = await session.get(SyncState, calendar_id)
            if state is None:
                state = SyncState(calendar_id=calendar_id)
                session.add(state)

            state.sync_token = sync_token
            state.sync_error = sync_error
            if synced_at is not None:
                state.last_sync_at = synced_at

            await session.commit()

        logger.debug(f"Saved sync state for calendar {calendar_id}")
