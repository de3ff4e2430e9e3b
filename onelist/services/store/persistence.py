"""Best-effort snapshot persistence.

The store holds one opaque JSON blob and is read and written whole. Load
always produces a usable snapshot (blank on any failure); save never raises.
The in-memory snapshot stays authoritative when a write fails.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from onelist.schemas.snapshot import Snapshot
from onelist.services.store.migration import migrate_snapshot

logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    """Opaque blob storage for one serialized snapshot."""

    def read(self) -> str | None:
        """Return the stored blob, or None if nothing has been stored."""
        ...

    def write(self, blob: str) -> None:
        """Replace the stored blob."""
        ...


class JsonFileSnapshotStore:
    """Snapshot blob kept in a single JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read(self) -> str | None:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def write(self, blob: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(blob, encoding="utf-8")


class InMemorySnapshotStore:
    """Snapshot blob kept in memory; used by tests and one-off sessions."""

    def __init__(self, blob: str | None = None) -> None:
        self.blob = blob
        self.writes = 0

    def read(self) -> str | None:
        return self.blob

    def write(self, blob: str) -> None:
        self.blob = blob
        self.writes += 1


def export_snapshot(snapshot: Snapshot) -> dict[str, Any]:
    """Plain JSON-compatible dict of the whole snapshot."""
    return snapshot.model_dump(mode="json")


def import_snapshot(raw: Mapping[str, Any]) -> Snapshot:
    """Migrate and validate a raw snapshot dict.

    Raises ValueError (pydantic ValidationError included) when raw cannot be
    migrated into a valid snapshot.
    """
    return Snapshot.model_validate(migrate_snapshot(raw))


def load_snapshot(store: SnapshotStore) -> Snapshot:
    """Read, parse and migrate the stored snapshot; blank snapshot on any failure."""
    try:
        blob = store.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Snapshot read failed, starting blank: %s", e)
        return Snapshot()
    if not blob:
        return Snapshot()
    try:
        return import_snapshot(json.loads(blob))
    except (ValueError, ValidationError, TypeError) as e:
        logger.warning("Stored snapshot could not be migrated, starting blank: %s", e)
        return Snapshot()


def save_snapshot(store: SnapshotStore, snapshot: Snapshot) -> bool:
    """Write the snapshot; returns False (after logging) instead of raising on failure."""
    try:
        store.write(json.dumps(export_snapshot(snapshot)))
    except (OSError, TypeError, ValueError) as e:
        logger.warning("Snapshot save failed; in-memory state kept: %s", e)
        return False
    return True
