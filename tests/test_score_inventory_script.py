"""Tests for scripts/score_inventory.py."""

from __future__ import annotations

import importlib.util
import json
from pathlib import Path

import pytest

from onelist.schemas.snapshot import Snapshot
from onelist.services.store.persistence import export_snapshot

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "score_inventory.py"


@pytest.fixture
def script():
    spec = importlib.util.spec_from_file_location("score_inventory", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _write_snapshot(tmp_path: Path, snapshot: Snapshot) -> Path:
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(export_snapshot(snapshot)), encoding="utf-8")
    return path


class TestScoreInventoryScript:
    """The report script scores every object in a snapshot file."""

    def test_json_output(
        self, script, tmp_path: Path, snapshot_with_gap: Snapshot, capsys: pytest.CaptureFixture
    ) -> None:
        path = _write_snapshot(tmp_path, snapshot_with_gap)
        assert script.main(["--snapshot", str(path), "--as-of", "2026-03-01", "--json"]) == 0
        rows = json.loads(capsys.readouterr().out)
        assert [r["id"] for r in rows] == ["obj-mfa"]
        assert rows[0]["posture"]["breakdown"]["gaps"]["value"] == 70
        assert rows[0]["days_since_review"] == 10
        assert rows[0]["stale"] is False

    def test_table_output(
        self, script, tmp_path: Path, snapshot_with_object: Snapshot, capsys: pytest.CaptureFixture
    ) -> None:
        path = _write_snapshot(tmp_path, snapshot_with_object)
        assert script.main(["--snapshot", str(path), "--as-of", "2026-03-01"]) == 0
        assert "MFA Enforcement" in capsys.readouterr().out

    def test_missing_profile(self, script, tmp_path: Path) -> None:
        assert script.main(["--snapshot", str(tmp_path / "s.json"), "--profile", str(tmp_path / "p.yaml")]) == 1

    def test_bad_date(self, script, tmp_path: Path) -> None:
        assert script.main(["--snapshot", str(tmp_path / "s.json"), "--as-of", "yesterday"]) == 1
