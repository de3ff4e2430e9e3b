"""Governance session: current snapshot plus best-effort persistence."""

from __future__ import annotations

import logging
from datetime import datetime

from onelist.schemas.snapshot import Snapshot
from onelist.services.store.commands import Command
from onelist.services.store.persistence import SnapshotStore, load_snapshot, save_snapshot
from onelist.services.store.reducer import apply_command

logger = logging.getLogger(__name__)


class GovernanceSession:
    """Holds the authoritative in-memory snapshot for one store.

    dispatch() runs the pure reducer, swaps in the result, then saves. A
    rejected command leaves the snapshot as it was and nothing is saved.
    """

    def __init__(self, store: SnapshotStore) -> None:
        self.store = store
        self._snapshot = load_snapshot(store)

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    def dispatch(self, command: Command, now: datetime | None = None) -> Snapshot:
        self._snapshot = apply_command(self._snapshot, command, now)
        if not save_snapshot(self.store, self._snapshot):
            logger.warning("Continuing with unsaved %s", type(command).__name__)
        return self._snapshot
