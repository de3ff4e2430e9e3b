"""Tracked object inventory: add, update, delete, import, remediation items.

Every operation takes a Snapshot and returns a new Snapshot; the caller's
snapshot is never modified. Validation runs before any new state is built.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from onelist.schemas.snapshot import Snapshot
from onelist.schemas.tracked_object import RemediationItem, TrackedObject
from onelist.schemas.types import REMEDIATION_STATUSES
from onelist.services.compliance import utc_now
from onelist.services.errors import (
    FieldValidationError,
    UnknownEntityError,
    build_model,
)
from onelist.services.history import append_history, history_entry, seed_history

logger = logging.getLogger(__name__)

# Keys callers may never set directly on an object.
PROTECTED_OBJECT_FIELDS: frozenset[str] = frozenset({
    "id",
    "history",
    "compliance_percent",
    "created_at",
    "updated_at",
    "remediation_items",
})

_CONTROL_FIELD_BLANKS: dict[str, Any] = {
    "control_classification": None,
    "control_objective": "",
    "control_type": "",
    "implementation_type": "",
    "execution_frequency": "",
    "nist_families": (),
}


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def clear_control_fields(data: dict[str, Any]) -> dict[str, Any]:
    """Blank control-only values unless the record is a Control."""
    if data.get("type") == "Control":
        return data
    return {**data, **_CONTROL_FIELD_BLANKS}


def validate_object(obj: TrackedObject) -> dict[str, str]:
    """Return field -> message for every business rule the object breaks."""
    errors: dict[str, str] = {}
    if _blank(obj.list_name):
        errors["list_name"] = "Name is required"
    if _blank(obj.owner):
        errors["owner"] = "Owner is required"
    if obj.type is None:
        errors["type"] = "Type is required (Control, Process or Procedure)"
    if obj.health_status == "RED" and _blank(obj.health_rationale):
        errors["health_rationale"] = "Rationale is required when health is RED"
    if obj.kpi_denominator > 0 and obj.kpi_numerator > obj.kpi_denominator:
        errors["kpi_numerator"] = "Numerator cannot exceed denominator"
    if obj.type == "Control" and obj.control_classification == "Formal":
        if not obj.nist_families:
            errors["nist_families"] = "At least one NIST family is required for Formal controls"
        if _blank(obj.control_type):
            errors["control_type"] = "Control function is required for Formal controls"
    if obj.type == "Process" and _blank(obj.outcome):
        errors["outcome"] = "Outcome is required for processes"
    if obj.type == "Procedure" and _blank(obj.audience):
        errors["audience"] = "Audience is required for procedures"
    return errors


def _require_object(snapshot: Snapshot, object_id: str) -> TrackedObject:
    obj = snapshot.object_by_id(object_id)
    if obj is None:
        raise UnknownEntityError(f"object {object_id} not found")
    return obj


def new_object(data: Mapping[str, Any], now: datetime | None = None) -> TrackedObject:
    """Build a new object from data over inventory defaults, without business validation."""
    now = now or utc_now()
    fields = {k: v for k, v in data.items() if k not in PROTECTED_OBJECT_FIELDS - {"id"}}
    fields.setdefault("last_review_date", now.date())
    fields = clear_control_fields(fields)
    fields["created_at"] = now
    fields["updated_at"] = now
    fields["history"] = seed_history("Created", "Object added to inventory", now)
    return build_model(TrackedObject, fields)


def add_object(snapshot: Snapshot, data: Mapping[str, Any], now: datetime | None = None) -> Snapshot:
    """Add a tracked object. Raises FieldValidationError if any rule fails."""
    obj = new_object(data, now)
    errors = validate_object(obj)
    if errors:
        logger.info("Rejected new object %r: %s", obj.list_name, sorted(errors))
        raise FieldValidationError(errors)
    if snapshot.object_by_id(obj.id) is not None:
        raise FieldValidationError({"id": f"object {obj.id} already exists"})
    logger.info("Added object %s (%s)", obj.id, obj.list_name)
    return snapshot.model_copy(update={"objects": (*snapshot.objects, obj)})


def _change_entries(old: TrackedObject, updated: TrackedObject, now: datetime) -> list:
    """History entries describing tracked-field transitions; 'Updated' if none."""
    entries = []
    for key, action in (
        ("health_status", "Health"),
        ("status", "Status"),
        ("control_classification", "Controls"),
    ):
        new = getattr(updated, key)
        old_value = getattr(old, key)
        if new and new != old_value:
            entries.append(
                history_entry(f"{action} → {new}", f"Changed from {old_value} to {new}", now)
            )
    for key, action in (("owner", "Owner changed"), ("operator", "Operator changed")):
        new = getattr(updated, key)
        old_value = getattr(old, key)
        if new and new != old_value:
            entries.append(history_entry(action, f"{old_value or 'Unassigned'} → {new}", now))
    if not entries:
        entries.append(history_entry("Updated", "Object details modified", now))
    return entries


def update_object(
    snapshot: Snapshot,
    object_id: str,
    changes: Mapping[str, Any],
    now: datetime | None = None,
) -> Snapshot:
    """Apply field changes to an object and append history describing them.

    compliance_percent is recomputed from the KPI pair; history, ids and
    timestamps in changes are ignored.
    """
    now = now or utc_now()
    old = _require_object(snapshot, object_id)
    changes = {k: v for k, v in changes.items() if k not in PROTECTED_OBJECT_FIELDS}

    merged = clear_control_fields({**old.model_dump(), **changes, "updated_at": now})
    updated = build_model(TrackedObject, merged)
    errors = validate_object(updated)
    if errors:
        logger.info("Rejected update to object %s: %s", object_id, sorted(errors))
        raise FieldValidationError(errors)

    history = append_history(old.history, *_change_entries(old, updated, now))
    updated = updated.model_copy(update={"history": history})
    logger.info("Updated object %s", object_id)
    return snapshot.replace_object(updated)


def delete_object(snapshot: Snapshot, object_id: str) -> Snapshot:
    """Hard-delete an object. No tombstone or ledger entry survives."""
    _require_object(snapshot, object_id)
    logger.info("Deleted object %s", object_id)
    return snapshot.model_copy(
        update={"objects": tuple(o for o in snapshot.objects if o.id != object_id)}
    )


def import_objects(
    snapshot: Snapshot,
    records: Iterable[Mapping[str, Any]],
    now: datetime | None = None,
) -> Snapshot:
    """Upsert plain object records by list_name.

    Records whose list_name matches an existing object are merged into it;
    others become new objects. Shape is validated, form rules are not.
    """
    now = now or utc_now()
    imported: list[TrackedObject] = []
    for record in records:
        name = record.get("list_name")
        existing = next(
            (o for o in snapshot.objects if o.list_name and o.list_name == name), None
        )
        if existing is not None:
            fields = {k: v for k, v in record.items() if k not in PROTECTED_OBJECT_FIELDS}
            imported.append(
                build_model(TrackedObject, {**existing.model_dump(), **fields, "updated_at": now})
            )
        else:
            imported.append(new_object(record, now))

    replaced = {o.list_name for o in imported if o.list_name}
    kept = tuple(o for o in snapshot.objects if o.list_name not in replaced)
    logger.info("Imported %d objects (%d kept)", len(imported), len(kept))
    return snapshot.model_copy(update={"objects": (*kept, *imported)})


# ── Remediation items ────────────────────────────────────────────────────


def add_remediation_item(
    snapshot: Snapshot,
    object_id: str,
    title: str,
    severity: str = "AMBER",
    note: str = "",
    now: datetime | None = None,
) -> Snapshot:
    """Attach a new open remediation item and log it in the object's history."""
    now = now or utc_now()
    obj = _require_object(snapshot, object_id)
    item = build_model(
        RemediationItem,
        {"title": title, "severity": severity or "AMBER", "note": note or "", "created_at": now},
    )
    updated = obj.model_copy(
        update={
            "remediation_items": (*obj.remediation_items, item),
            "history": append_history(
                obj.history,
                history_entry("Remediation added", f'"{item.title}" ({item.severity})', now),
            ),
            "updated_at": now,
        }
    )
    return snapshot.replace_object(updated)


def update_remediation_item(
    snapshot: Snapshot,
    object_id: str,
    item_id: str,
    changes: Mapping[str, Any],
    now: datetime | None = None,
) -> Snapshot:
    """Update a remediation item; first move to Resolved stamps resolved_at."""
    now = now or utc_now()
    obj = _require_object(snapshot, object_id)
    item = next((i for i in obj.remediation_items if i.id == item_id), None)
    if item is None:
        raise UnknownEntityError(f"remediation item {item_id} not found on object {object_id}")

    status = changes.get("status")
    if status is not None and status not in REMEDIATION_STATUSES:
        raise FieldValidationError({"status": f"must be one of {', '.join(REMEDIATION_STATUSES)}"})

    fields = {k: v for k, v in changes.items() if k not in {"id", "created_at", "resolved_at"}}
    updated_item = build_model(RemediationItem, {**item.model_dump(), **fields})
    if status == "Resolved" and item.resolved_at is None:
        updated_item = updated_item.model_copy(update={"resolved_at": now})

    history = obj.history
    if status:
        history = append_history(
            history,
            history_entry(f"Remediation {status.lower()}", f"Item status → {status}", now),
        )
    updated = obj.model_copy(
        update={
            "remediation_items": tuple(
                updated_item if i.id == item_id else i for i in obj.remediation_items
            ),
            "history": history,
            "updated_at": now,
        }
    )
    return snapshot.replace_object(updated)


def remove_remediation_item(
    snapshot: Snapshot,
    object_id: str,
    item_id: str,
    now: datetime | None = None,
) -> Snapshot:
    """Remove a remediation item; the removal itself is recorded in history."""
    now = now or utc_now()
    obj = _require_object(snapshot, object_id)
    removed = next((i for i in obj.remediation_items if i.id == item_id), None)
    if removed is None:
        raise UnknownEntityError(f"remediation item {item_id} not found on object {object_id}")
    updated = obj.model_copy(
        update={
            "remediation_items": tuple(i for i in obj.remediation_items if i.id != item_id),
            "history": append_history(
                obj.history, history_entry("Remediation removed", f'"{removed.title}" removed', now)
            ),
            "updated_at": now,
        }
    )
    return snapshot.replace_object(updated)
