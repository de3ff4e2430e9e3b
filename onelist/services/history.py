"""Audit ledger: append-only history shared by tracked objects and gaps.

History is an immutable tuple on each entity. Appending returns a new tuple;
entries are never edited or removed.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from onelist.schemas.history import HistoryEntry
from onelist.services.compliance import utc_now


def history_entry(action: str, note: str = "", timestamp: datetime | None = None) -> HistoryEntry:
    """Build one history entry stamped with timestamp (default: now, UTC)."""
    return HistoryEntry(action=action, note=note, timestamp=timestamp or utc_now())


def append_history(
    history: Iterable[HistoryEntry],
    *entries: HistoryEntry,
) -> tuple[HistoryEntry, ...]:
    """Return a new history tuple with entries appended in order."""
    return (*tuple(history), *entries)


def seed_history(action: str, note: str, timestamp: datetime | None = None) -> tuple[HistoryEntry, ...]:
    """Return a single-entry history for a newly created entity."""
    return (history_entry(action, note, timestamp),)
