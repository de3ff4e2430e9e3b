"""Upgrade older persisted snapshot shapes to the current one.

Works on plain dicts, before pydantic validation. Every step only fills in
what is missing, so migrating an already-migrated snapshot changes nothing.
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Mapping
from typing import Any

from onelist.schemas.snapshot import SAFEGUARD_FRAMEWORKS, SNAPSHOT_VERSION
from onelist.services.maturity.mlg_constants import ANSWER_POINTS, CHECKPOINT_IDS

logger = logging.getLogger(__name__)

# Top-level collections and their empty values.
COLLECTION_DEFAULTS: dict[str, Any] = {
    "objects": [],
    "gaps": [],
    "mlg_assessments": {},
    "attestations": {},
    "framework_overrides": {},
    "compliance_snapshots": [],
}

# Legacy gap criticality was never recorded; infer it from health.
LEGACY_CRITICALITY_BY_HEALTH: dict[str, str] = {"RED": "High", "AMBER": "Medium"}
LEGACY_CRITICALITY_DEFAULT = "Low"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def snake_key(key: str) -> str:
    """'kpiNumerator' -> 'kpi_numerator'; snake_case keys pass through."""
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _snake_keys(record: Mapping[str, Any]) -> dict[str, Any]:
    return {snake_key(k): v for k, v in record.items()}


def _migrate_history(entries: Any, fallback_timestamp: Any) -> list[dict[str, Any]]:
    """Legacy gap history used 'status' as the entry label."""
    migrated = []
    for entry in entries or []:
        if not isinstance(entry, Mapping):
            continue
        entry = _snake_keys(entry)
        if "action" not in entry:
            entry["action"] = entry.pop("status", "Updated")
        if not entry.get("timestamp") and fallback_timestamp:
            entry["timestamp"] = fallback_timestamp
        migrated.append(entry)
    return migrated


def _migrate_object(raw: Mapping[str, Any]) -> dict[str, Any]:
    obj = _snake_keys(raw)
    obj.setdefault("remediation_items", [])
    obj["remediation_items"] = [
        _snake_keys(i) for i in obj["remediation_items"] if isinstance(i, Mapping)
    ]
    obj["history"] = _migrate_history(obj.get("history"), obj.get("created_at"))
    return obj


def _migrate_gap(raw: Mapping[str, Any], objects_by_id: Mapping[str, dict]) -> dict[str, Any]:
    gap = _snake_keys(raw)
    if isinstance(gap.get("source_safeguard"), Mapping):
        gap["source_safeguard"] = _snake_keys(gap["source_safeguard"])

    if "product_family" not in gap:
        # Pre-pipeline gaps hung off one or more objects.
        ids = gap.pop("object_ids", None) or []
        if not ids and gap.get("object_id"):
            ids = [gap["object_id"]]
        linked = objects_by_id.get(ids[0]) if ids else None
        families = (linked or {}).get("product_families") or []
        gap["product_family"] = families[0] if families else ""
        gap["target_type"] = (linked or {}).get("type") or "Control"
        gap["owner"] = (linked or {}).get("owner") or gap.get("owner", "")
        gap["criticality"] = LEGACY_CRITICALITY_BY_HEALTH.get(
            gap.get("health_status", "RED"), LEGACY_CRITICALITY_DEFAULT
        )
        if linked is not None:
            gap.setdefault("linked_object_id", linked.get("id"))
    gap.pop("object_ids", None)
    gap.pop("object_id", None)

    if "triaged" not in gap:
        # Gaps from before the triage queue were already being worked.
        gap["identifier"] = gap.get("owner") or "System"
        gap["triaged"] = True

    gap["history"] = _migrate_history(gap.get("history"), gap.get("created_at"))
    return gap


def _migrate_assessments(raw: Any) -> dict[str, dict[str, str]]:
    """Keep only known checkpoints with valid answers."""
    assessments: dict[str, dict[str, str]] = {}
    for object_id, answers in (raw or {}).items():
        if not isinstance(answers, Mapping):
            continue
        kept = {
            cp: a for cp, a in answers.items() if cp in CHECKPOINT_IDS and a in ANSWER_POINTS
        }
        dropped = len(answers) - len(kept)
        if dropped:
            logger.warning("Dropped %d invalid MLG answers for object %s", dropped, object_id)
        assessments[object_id] = kept
    return assessments


def migrate_snapshot(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Return a migrated deep copy of raw; raw itself is left untouched.

    Raises ValueError if raw is not a snapshot-shaped mapping or a top-level
    collection has the wrong kind of value.
    """
    if not isinstance(raw, Mapping):
        raise ValueError(f"snapshot must be a mapping, got {type(raw).__name__}")
    state = _snake_keys(copy.deepcopy(dict(raw)))

    for key, empty in COLLECTION_DEFAULTS.items():
        if not state.get(key):
            state[key] = copy.deepcopy(empty)
        elif not isinstance(state[key], type(empty)):
            raise ValueError(
                f"snapshot {key} must be a {type(empty).__name__}, got {type(state[key]).__name__}"
            )
    if not isinstance(state.get("safeguard_assessments") or {}, Mapping):
        raise ValueError("snapshot safeguard_assessments must be a mapping")
    safeguards = dict(state.get("safeguard_assessments") or {})
    for framework in SAFEGUARD_FRAMEWORKS:
        safeguards.setdefault(framework, {})
    state["safeguard_assessments"] = safeguards

    objects = [_migrate_object(o) for o in state["objects"] if isinstance(o, Mapping)]
    objects_by_id = {o.get("id"): o for o in objects}
    state["objects"] = objects
    state["gaps"] = [_migrate_gap(g, objects_by_id) for g in state["gaps"] if isinstance(g, Mapping)]
    state["mlg_assessments"] = _migrate_assessments(state["mlg_assessments"])

    from_version = state.get("version")
    state["version"] = SNAPSHOT_VERSION
    if from_version != SNAPSHOT_VERSION:
        logger.info("Migrated snapshot from version %s to %s", from_version, SNAPSHOT_VERSION)
    return state
