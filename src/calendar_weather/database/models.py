"""Database models for sync state persistence.

## Schema Overview

```
sync_states
    calendar_id   (PK)  calendar the state belongs to
    sync_token          last nextSyncToken, NULL forces a full sync
    last_sync_at        when the last cycle finished
    sync_error          list error from the last cycle, if any
    updated_at
```
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


class SyncState(Base):
    """Sync token and outcome of the last cycle for one calendar."""

    __tablename__ = "sync_states"

    calendar_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    sync_token: Mapped[str | None] = mapped_column(Text)
    last_sync_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    sync_error: Mapped[str | None] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<SyncState {self.calendar_id} token={'set' if self.sync_token else 'none'}>"
