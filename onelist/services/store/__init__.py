"""Snapshot store: commands, pure reducer, migration and persistence."""

from onelist.services.store.migration import migrate_snapshot
from onelist.services.store.persistence import (
    InMemorySnapshotStore,
    JsonFileSnapshotStore,
    SnapshotStore,
    export_snapshot,
    import_snapshot,
    load_snapshot,
    save_snapshot,
)
from onelist.services.store.reducer import apply_command
from onelist.services.store.session import GovernanceSession

__all__ = [
    "GovernanceSession",
    "InMemorySnapshotStore",
    "JsonFileSnapshotStore",
    "SnapshotStore",
    "apply_command",
    "export_snapshot",
    "import_snapshot",
    "load_snapshot",
    "migrate_snapshot",
    "save_snapshot",
]
