"""History entry schema (one immutable audit record)."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class HistoryEntry(BaseModel):
    """Immutable audit record appended to an object's or gap's history."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    action: str
    note: str = ""
    timestamp: datetime
