"""Health status model exposed to operators."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class HealthStatus(BaseModel):
    """Read-only snapshot of the sync engine state."""

    status: Literal["healthy"] = "healthy"
    token_present: bool = Field(..., description="Whether a change token is held")
    last_sync: Literal["active", "pending"] = Field(
        ..., description="'active' once incremental sync is possible"
    )
    last_cycle_at: datetime | None = Field(
        default=None, description="When the last sync cycle finished"
    )
    last_cycle_success: bool | None = Field(
        default=None, description="Whether the last cycle fetched events"
    )
    cycle_in_progress: bool = False
    timestamp: datetime = Field(..., description="When this snapshot was taken")
