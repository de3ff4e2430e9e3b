"""Tests for best-effort snapshot persistence."""

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path

from onelist.schemas.snapshot import Snapshot
from onelist.services.inventory import add_remediation_item
from onelist.services.maturity import set_mlg_assessment
from onelist.services.pipeline.gap_lifecycle import promote_gap, triage_gap
from onelist.services.posture import compute_inventory_posture
from onelist.services.store.persistence import (
    InMemorySnapshotStore,
    JsonFileSnapshotStore,
    export_snapshot,
    import_snapshot,
    load_snapshot,
    save_snapshot,
)
from onelist.services.store.session import GovernanceSession


class _FailingStore:
    def read(self) -> str | None:
        raise OSError("disk gone")

    def write(self, blob: str) -> None:
        raise OSError("disk full")


def _rich_snapshot(snapshot: Snapshot, now: datetime) -> Snapshot:
    gap_id = snapshot.gaps[0].id
    snap = triage_gap(snapshot, gap_id, "Control", "Dana Reyes", "High", now=now)
    snap = add_remediation_item(snap, "obj-mfa", "Enforce on VPN", "RED", now=now)
    snap = set_mlg_assessment(snap, "obj-mfa", {"cadence": "yes", "health_criteria": "weak"})
    return promote_gap(snap, gap_id, now)


class TestRoundTrip:
    """Export then import keeps every scoring-relevant field."""

    def test_equal(self, snapshot_with_gap: Snapshot, now: datetime) -> None:
        snap = _rich_snapshot(snapshot_with_gap, now)
        restored = import_snapshot(json.loads(json.dumps(export_snapshot(snap))))
        assert restored == snap

    def test_same_posture(self, snapshot_with_gap: Snapshot, now: datetime, as_of: date) -> None:
        snap = _rich_snapshot(snapshot_with_gap, now)
        restored = import_snapshot(json.loads(json.dumps(export_snapshot(snap))))
        before = {k: v.to_dict() for k, v in compute_inventory_posture(snap, as_of).items()}
        after = {k: v.to_dict() for k, v in compute_inventory_posture(restored, as_of).items()}
        assert before == after

    def test_file_store(self, tmp_path: Path, snapshot_with_object: Snapshot) -> None:
        store = JsonFileSnapshotStore(tmp_path / "nested" / "snapshot.json")
        assert save_snapshot(store, snapshot_with_object) is True
        assert load_snapshot(store) == snapshot_with_object


class TestLoadFallbacks:
    """Unreadable or unmigratable data yields a blank snapshot."""

    def test_empty_store(self) -> None:
        assert load_snapshot(InMemorySnapshotStore()) == Snapshot()

    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_snapshot(JsonFileSnapshotStore(tmp_path / "absent.json")) == Snapshot()

    def test_corrupt_json(self) -> None:
        assert load_snapshot(InMemorySnapshotStore("{not json")) == Snapshot()

    def test_wrong_shape(self) -> None:
        assert load_snapshot(InMemorySnapshotStore("[1, 2, 3]")) == Snapshot()

    def test_invalid_entity(self) -> None:
        blob = json.dumps({"objects": [{"id": "x", "criticality": "Extreme"}]})
        assert load_snapshot(InMemorySnapshotStore(blob)) == Snapshot()

    def test_read_error(self) -> None:
        assert load_snapshot(_FailingStore()) == Snapshot()

    def test_undecodable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "snapshot.json"
        path.write_bytes(b"\xff\xfe{bad")
        assert load_snapshot(JsonFileSnapshotStore(path)) == Snapshot()

    def test_assessments_not_a_mapping(self) -> None:
        blob = json.dumps({"objects": [], "mlgAssessments": ["x"]})
        assert load_snapshot(InMemorySnapshotStore(blob)) == Snapshot()

    def test_objects_not_a_list(self) -> None:
        blob = json.dumps({"objects": {"id": "x"}, "gaps": []})
        assert load_snapshot(InMemorySnapshotStore(blob)) == Snapshot()

    def test_session_starts_blank(self, tmp_path: Path) -> None:
        path = tmp_path / "snapshot.json"
        path.write_bytes(b"\xff\xfe{bad")
        assert GovernanceSession(JsonFileSnapshotStore(path)).snapshot == Snapshot()


class TestSaveFailures:
    """Write failures are reported, never raised."""

    def test_write_error(self, snapshot_with_object: Snapshot) -> None:
        assert save_snapshot(_FailingStore(), snapshot_with_object) is False

    def test_in_memory_counts_writes(self, snapshot_with_object: Snapshot) -> None:
        store = InMemorySnapshotStore()
        save_snapshot(store, snapshot_with_object)
        assert store.writes == 1
        assert json.loads(store.blob)["objects"][0]["id"] == "obj-mfa"
