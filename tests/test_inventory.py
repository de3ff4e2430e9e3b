"""Tests for tracked object transitions and remediation items."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

import pytest

from onelist.schemas.snapshot import Snapshot
from onelist.services.errors import FieldValidationError, UnknownEntityError
from onelist.services.inventory import (
    add_object,
    add_remediation_item,
    delete_object,
    import_objects,
    remove_remediation_item,
    update_object,
    update_remediation_item,
)


def _actions(snapshot: Snapshot, object_id: str = "obj-mfa") -> list[str]:
    return [h.action for h in snapshot.object_by_id(object_id).history]


class TestAddObject:
    """add_object seeds defaults and a Created entry."""

    def test_defaults(self, now: datetime) -> None:
        snap = add_object(
            Snapshot(),
            {"list_name": "Patch cadence", "type": "Process", "owner": "Ops", "outcome": "Patched"},
            now,
        )
        obj = snap.objects[0]
        assert obj.criticality == "Medium"
        assert obj.status == "Active"
        assert obj.health_status == "BLUE"
        assert obj.review_cadence == "Monthly"
        assert obj.environment == "Production"
        assert obj.data_classification == "Internal"
        assert obj.last_review_date == now.date()
        assert [(h.action, h.note) for h in obj.history] == [("Created", "Object added to inventory")]

    def test_compliance_is_derived(self, snapshot_with_object: Snapshot) -> None:
        assert snapshot_with_object.object_by_id("obj-mfa").compliance_percent == 90.0

    def test_compliance_input_ignored(self, control_data: dict[str, Any], now: datetime) -> None:
        snap = add_object(Snapshot(), {**control_data, "compliance_percent": 12}, now)
        assert snap.objects[0].compliance_percent == 90.0

    def test_non_control_clears_control_fields(self, now: datetime) -> None:
        snap = add_object(
            Snapshot(),
            {
                "list_name": "Access review",
                "type": "Procedure",
                "owner": "GRC",
                "audience": "Managers",
                "control_classification": "Formal",
                "nist_families": ["AC"],
                "control_type": "Detective",
            },
            now,
        )
        obj = snap.objects[0]
        assert obj.control_classification is None
        assert obj.nist_families == ()
        assert obj.control_type == ""

    def test_caller_snapshot_untouched(self, control_data: dict[str, Any], now: datetime) -> None:
        original = Snapshot()
        add_object(original, control_data, now)
        assert original.objects == ()

    def test_duplicate_id(self, snapshot_with_object: Snapshot, control_data: dict[str, Any]) -> None:
        with pytest.raises(FieldValidationError) as exc:
            add_object(snapshot_with_object, control_data)
        assert "id" in exc.value.errors


class TestObjectValidation:
    """All failing rules are reported together, before any state is built."""

    def test_required_fields(self, now: datetime) -> None:
        with pytest.raises(FieldValidationError) as exc:
            add_object(Snapshot(), {"list_name": " "}, now)
        assert set(exc.value.errors) == {"list_name", "owner", "type"}

    def test_red_needs_rationale(self, control_data: dict[str, Any], now: datetime) -> None:
        with pytest.raises(FieldValidationError) as exc:
            add_object(Snapshot(), {**control_data, "health_status": "RED"}, now)
        assert set(exc.value.errors) == {"health_rationale"}

    def test_numerator_above_denominator(self, control_data: dict[str, Any], now: datetime) -> None:
        with pytest.raises(FieldValidationError) as exc:
            add_object(Snapshot(), {**control_data, "kpi_numerator": 11}, now)
        assert "kpi_numerator" in exc.value.errors

    def test_negative_kpi(self, control_data: dict[str, Any], now: datetime) -> None:
        with pytest.raises(FieldValidationError) as exc:
            add_object(Snapshot(), {**control_data, "kpi_numerator": -1}, now)
        assert "kpi_numerator" in exc.value.errors

    def test_formal_control_rules(self, control_data: dict[str, Any], now: datetime) -> None:
        with pytest.raises(FieldValidationError) as exc:
            add_object(Snapshot(), {**control_data, "control_classification": "Formal"}, now)
        assert set(exc.value.errors) == {"nist_families", "control_type"}

    def test_process_and_procedure_rules(self, now: datetime) -> None:
        with pytest.raises(FieldValidationError) as exc:
            add_object(Snapshot(), {"list_name": "P", "owner": "O", "type": "Process"}, now)
        assert set(exc.value.errors) == {"outcome"}
        with pytest.raises(FieldValidationError) as exc:
            add_object(Snapshot(), {"list_name": "P", "owner": "O", "type": "Procedure"}, now)
        assert set(exc.value.errors) == {"audience"}

    def test_unknown_type(self, control_data: dict[str, Any], now: datetime) -> None:
        with pytest.raises(FieldValidationError) as exc:
            add_object(Snapshot(), {**control_data, "type": "Policy"}, now)
        assert "type" in exc.value.errors


class TestUpdateObject:
    """Each update appends history describing what changed."""

    def test_health_change(self, snapshot_with_object: Snapshot, now: datetime) -> None:
        snap = update_object(snapshot_with_object, "obj-mfa", {"health_status": "AMBER"}, now)
        last = snap.object_by_id("obj-mfa").history[-1]
        assert last.action == "Health → AMBER"
        assert last.note == "Changed from GREEN to AMBER"

    def test_several_changes(self, snapshot_with_object: Snapshot, now: datetime) -> None:
        snap = update_object(
            snapshot_with_object,
            "obj-mfa",
            {
                "status": "Inactive",
                "control_classification": "Formal",
                "nist_families": ["IA"],
                "control_type": "Preventive",
                "owner": "Lee Park",
            },
            now,
        )
        assert _actions(snap)[1:] == ["Status → Inactive", "Controls → Formal", "Owner changed"]
        assert snap.object_by_id("obj-mfa").history[-1].note == "Dana Reyes → Lee Park"

    def test_operator_from_unassigned(self, snapshot_with_object: Snapshot, now: datetime) -> None:
        snap = update_object(snapshot_with_object, "obj-mfa", {"operator": ""}, now)
        snap = update_object(snap, "obj-mfa", {"operator": "SecOps"}, now)
        assert snap.object_by_id("obj-mfa").history[-1].note == "Unassigned → SecOps"

    def test_generic_update(self, snapshot_with_object: Snapshot, now: datetime) -> None:
        snap = update_object(snapshot_with_object, "obj-mfa", {"jira_l1": "SEC-12"}, now)
        assert _actions(snap) == ["Created", "Updated"]

    def test_cleared_classification_not_logged(
        self, control_data: dict[str, Any], now: datetime
    ) -> None:
        process = {**control_data, "type": "Process", "outcome": "Access reviewed"}
        snap = add_object(Snapshot(), process, now)
        snap = update_object(snap, "obj-mfa", {"control_classification": "Formal"}, now)
        obj = snap.object_by_id("obj-mfa")
        assert obj.control_classification is None
        assert _actions(snap) == ["Created", "Updated"]

    def test_unchanged_value_is_generic(self, snapshot_with_object: Snapshot, now: datetime) -> None:
        snap = update_object(snapshot_with_object, "obj-mfa", {"health_status": "GREEN"}, now)
        assert _actions(snap)[-1] == "Updated"

    def test_kpi_recomputed(self, snapshot_with_object: Snapshot, now: datetime) -> None:
        snap = update_object(
            snapshot_with_object, "obj-mfa", {"kpi_numerator": 1, "kpi_denominator": 3}, now
        )
        assert snap.object_by_id("obj-mfa").compliance_percent == 33.3

    def test_history_cannot_be_overwritten(self, snapshot_with_object: Snapshot, now: datetime) -> None:
        snap = update_object(snapshot_with_object, "obj-mfa", {"history": [], "id": "other"}, now)
        obj = snap.object_by_id("obj-mfa")
        assert [h.action for h in obj.history] == ["Created", "Updated"]

    def test_rejected_update_changes_nothing(self, snapshot_with_object: Snapshot, now: datetime) -> None:
        with pytest.raises(FieldValidationError):
            update_object(snapshot_with_object, "obj-mfa", {"health_status": "RED"}, now)
        assert snapshot_with_object.object_by_id("obj-mfa").health_status == "GREEN"

    def test_unknown_object(self, snapshot_with_object: Snapshot) -> None:
        with pytest.raises(UnknownEntityError):
            update_object(snapshot_with_object, "nope", {"owner": "x"})


class TestDeleteObject:
    """Deletion is a hard removal."""

    def test_removed(self, snapshot_with_object: Snapshot) -> None:
        assert delete_object(snapshot_with_object, "obj-mfa").objects == ()

    def test_unknown(self, snapshot_with_object: Snapshot) -> None:
        with pytest.raises(UnknownEntityError):
            delete_object(snapshot_with_object, "nope")


class TestImportObjects:
    """Import upserts plain records by list_name."""

    def test_upsert(self, snapshot_with_object: Snapshot, now: datetime) -> None:
        snap = import_objects(
            snapshot_with_object,
            [
                {"list_name": "MFA Enforcement", "health_status": "AMBER"},
                {"list_name": "Backup restore test", "type": "Process", "owner": "Infra"},
            ],
            now,
        )
        assert [o.list_name for o in snap.objects] == ["MFA Enforcement", "Backup restore test"]
        mfa = snap.objects[0]
        assert mfa.id == "obj-mfa"
        assert mfa.health_status == "AMBER"
        assert mfa.owner == "Dana Reyes"
        assert snap.objects[1].history[0].action == "Created"

    def test_bad_shape(self, now: datetime) -> None:
        with pytest.raises(FieldValidationError):
            import_objects(Snapshot(), [{"list_name": "X", "criticality": "Extreme"}], now)


class TestRemediationItems:
    """Remediation items carry their own history entries on the object."""

    def test_add(self, snapshot_with_object: Snapshot, now: datetime) -> None:
        snap = add_remediation_item(snapshot_with_object, "obj-mfa", "Enforce on VPN", "RED", now=now)
        obj = snap.object_by_id("obj-mfa")
        assert obj.remediation_items[0].status == "Open"
        assert obj.history[-1].action == "Remediation added"
        assert obj.history[-1].note == '"Enforce on VPN" (RED)'

    def test_resolve_stamps_once(self, snapshot_with_object: Snapshot, now: datetime) -> None:
        snap = add_remediation_item(snapshot_with_object, "obj-mfa", "Enforce on VPN", now=now)
        item_id = snap.object_by_id("obj-mfa").remediation_items[0].id
        snap = update_remediation_item(snap, "obj-mfa", item_id, {"status": "Resolved"}, now)
        later = now + timedelta(days=1)
        snap = update_remediation_item(snap, "obj-mfa", item_id, {"status": "Resolved"}, later)
        obj = snap.object_by_id("obj-mfa")
        assert obj.remediation_items[0].resolved_at == now
        assert obj.history[-1].action == "Remediation resolved"
        assert obj.history[-1].note == "Item status → Resolved"

    def test_invalid_status(self, snapshot_with_object: Snapshot, now: datetime) -> None:
        snap = add_remediation_item(snapshot_with_object, "obj-mfa", "Enforce on VPN", now=now)
        item_id = snap.object_by_id("obj-mfa").remediation_items[0].id
        with pytest.raises(FieldValidationError):
            update_remediation_item(snap, "obj-mfa", item_id, {"status": "Done"}, now)

    def test_unknown_item(self, snapshot_with_object: Snapshot) -> None:
        with pytest.raises(UnknownEntityError):
            update_remediation_item(snapshot_with_object, "obj-mfa", "nope", {"status": "Resolved"})

    def test_remove(self, snapshot_with_object: Snapshot, now: datetime) -> None:
        snap = add_remediation_item(snapshot_with_object, "obj-mfa", "Enforce on VPN", now=now)
        item_id = snap.object_by_id("obj-mfa").remediation_items[0].id
        snap = remove_remediation_item(snap, "obj-mfa", item_id, now)
        obj = snap.object_by_id("obj-mfa")
        assert obj.remediation_items == ()
        assert obj.history[-1].note == '"Enforce on VPN" removed'

    def test_remove_unknown_item(self, snapshot_with_object: Snapshot, now: datetime) -> None:
        with pytest.raises(UnknownEntityError):
            remove_remediation_item(snapshot_with_object, "obj-mfa", "nope", now)
        assert _actions(snapshot_with_object) == ["Created"]

    def test_blank_title(self, snapshot_with_object: Snapshot) -> None:
        with pytest.raises(FieldValidationError):
            add_remediation_item(snapshot_with_object, "obj-mfa", "")
