"""Pipeline lifecycle for gaps.

States, in order:

    Untriaged -> Triaged+Open -> Triaged+In Progress -> Closed

Closed is terminal for the forward path. reopen_gap is the one explicitly
named reverse transition; there is no other way to move a gap backward.
Promotion closes the gap and creates a new tracked object, cross-referencing
both histories. Every transition is a pure function of the snapshot: input
is validated first and the caller's snapshot is never changed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from onelist.schemas.gap import Gap, SourceSafeguard
from onelist.schemas.snapshot import Snapshot
from onelist.schemas.tracked_object import TrackedObject
from onelist.schemas.types import GAP_STATUSES, OBJECT_TYPES
from onelist.services.compliance import utc_now
from onelist.services.errors import (
    FieldValidationError,
    InvalidTransitionError,
    UnknownEntityError,
    build_model,
)
from onelist.services.history import append_history, history_entry, seed_history
from onelist.services.inventory import clear_control_fields, validate_object

logger = logging.getLogger(__name__)

# Type-specific and descriptive fields set at triage or by enrichment.
DETAIL_FIELDS: frozenset[str] = frozenset({
    "product_family",
    "operator",
    "description",
    "control_classification",
    "nist_families",
    "control_objective",
    "control_type",
    "implementation_type",
    "execution_frequency",
    "outcome",
    "systems_tools",
    "audience",
    "scope",
    "kpi_numerator",
    "kpi_denominator",
    "remediation_note",
    "expiry_date",
    "jira_l1",
    "jira_l2",
})

# Enrichment may also propose the triage classification.
ENRICH_FIELDS: frozenset[str] = DETAIL_FIELDS | {"target_type", "criticality"}

# Fields a generic update may edit on an active gap.
EDITABLE_FIELDS: frozenset[str] = DETAIL_FIELDS | {
    "identifier",
    "title",
    "target_type",
    "owner",
    "criticality",
    "health_status",
    "linked_object_id",
}

# Fields only lifecycle transitions may change.
LIFECYCLE_FIELDS: frozenset[str] = frozenset({
    "status",
    "triaged",
    "history",
    "promoted_to_object_id",
})

# Bookkeeping keys dropped silently from caller input.
_IGNORED_FIELDS: frozenset[str] = frozenset({
    "id",
    "compliance_percent",
    "created_at",
    "updated_at",
    "source_safeguard",
})

_STATUS_ORDER: dict[str, int] = {status: i for i, status in enumerate(GAP_STATUSES)}


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _require_gap(snapshot: Snapshot, gap_id: str) -> Gap:
    gap = snapshot.gap_by_id(gap_id)
    if gap is None:
        raise UnknownEntityError(f"gap {gap_id} not found")
    return gap


def _reject(gap_id: str, reason: str) -> InvalidTransitionError:
    logger.info("Rejected transition on gap %s: %s", gap_id, reason)
    return InvalidTransitionError(reason)


def _check_fields(data: Mapping[str, Any], allowed: frozenset[str]) -> dict[str, Any]:
    """Drop bookkeeping keys; reject anything outside allowed."""
    fields = {k: v for k, v in data.items() if k not in _IGNORED_FIELDS}
    unknown = sorted(k for k in fields if k not in allowed)
    if unknown:
        raise FieldValidationError({k: "Field cannot be set here" for k in unknown})
    return fields


def validate_gap(snapshot: Snapshot, gap: Gap) -> dict[str, str]:
    """Return field -> message for every rule the gap breaks."""
    errors: dict[str, str] = {}
    if _blank(gap.title):
        errors["title"] = "Title is required"
    if gap.kpi_denominator > 0 and gap.kpi_numerator > gap.kpi_denominator:
        errors["kpi_numerator"] = "Numerator cannot exceed denominator"
    if gap.triaged:
        if gap.target_type is None:
            errors["target_type"] = "Target type is required once triaged"
        if _blank(gap.owner):
            errors["owner"] = "Owner is required once triaged"
    if gap.linked_object_id and snapshot.object_by_id(gap.linked_object_id) is None:
        errors["linked_object_id"] = f"object {gap.linked_object_id} not found"
    return errors


def _checked(snapshot: Snapshot, gap: Gap) -> Gap:
    errors = validate_gap(snapshot, gap)
    if errors:
        logger.info("Rejected gap %s: %s", gap.id, sorted(errors))
        raise FieldValidationError(errors)
    return gap


def log_gap(snapshot: Snapshot, data: Mapping[str, Any], now: datetime | None = None) -> Snapshot:
    """Log a new untriaged gap in status Open."""
    now = now or utc_now()
    fields = _check_fields(data, EDITABLE_FIELDS)
    gap = build_model(
        Gap,
        {
            **fields,
            "triaged": False,
            "status": "Open",
            "history": seed_history("Created", "Pipeline item created", now),
            "created_at": now,
            "updated_at": now,
        },
    )
    _checked(snapshot, gap)
    logger.info("Logged gap %s (%s)", gap.id, gap.title)
    return snapshot.model_copy(update={"gaps": (*snapshot.gaps, gap)})


def create_gap_from_safeguard(
    snapshot: Snapshot,
    framework: str,
    safeguard_id: str,
    safeguard_name: str,
    now: datetime | None = None,
) -> Snapshot:
    """Log an untriaged Control gap raised from a framework safeguard assessment."""
    now = now or utc_now()
    if _blank(framework) or _blank(safeguard_id):
        raise FieldValidationError({"safeguard_id": "Framework and safeguard id are required"})
    gap = Gap(
        identifier="System",
        target_type="Control",
        title=f"[{framework.upper()}] {safeguard_name}",
        description=f"Gap identified from safeguard assessment: {safeguard_id} {safeguard_name}".rstrip(),
        source_safeguard=SourceSafeguard(
            framework=framework, safeguard_id=safeguard_id, name=safeguard_name
        ),
        history=seed_history(
            "Created", f"Gap created from {framework} safeguard: {safeguard_id}", now
        ),
        created_at=now,
        updated_at=now,
    )
    logger.info("Logged gap %s from %s safeguard %s", gap.id, framework, safeguard_id)
    return snapshot.model_copy(update={"gaps": (*snapshot.gaps, gap)})


def triage_gap(
    snapshot: Snapshot,
    gap_id: str,
    target_type: str | None,
    owner: str | None,
    criticality: str | None,
    details: Mapping[str, Any] | None = None,
    now: datetime | None = None,
) -> Snapshot:
    """Assign type, owner and criticality and mark the gap triaged.

    Raises FieldValidationError when a required value is missing and
    InvalidTransitionError when the gap is already triaged or closed.
    Status stays where it is.
    """
    now = now or utc_now()
    gap = _require_gap(snapshot, gap_id)
    if gap.triaged:
        raise _reject(gap_id, "gap is already triaged")
    if gap.status == "Closed":
        raise _reject(gap_id, "closed gaps cannot be triaged")

    errors: dict[str, str] = {}
    if _blank(target_type) or target_type not in OBJECT_TYPES:
        errors["target_type"] = "Target type is required (Control, Process or Procedure)"
    if _blank(owner):
        errors["owner"] = "Owner is required"
    if _blank(criticality):
        errors["criticality"] = "Criticality is required"
    if errors:
        logger.info("Rejected triage of gap %s: %s", gap_id, sorted(errors))
        raise FieldValidationError(errors)

    fields = _check_fields(details or {}, DETAIL_FIELDS)
    triaged = build_model(
        Gap,
        {
            **gap.model_dump(),
            **fields,
            "target_type": target_type,
            "owner": owner,
            "criticality": criticality,
            "triaged": True,
            "updated_at": now,
        },
    )
    _checked(snapshot, triaged)
    triaged = triaged.model_copy(
        update={
            "history": append_history(
                gap.history,
                history_entry("Triaged", f"Triaged as {target_type}, assigned to {owner}", now),
            )
        }
    )
    logger.info("Triaged gap %s as %s (owner %s)", gap_id, target_type, owner)
    return snapshot.replace_gap(triaged)


def enrich_gap(
    snapshot: Snapshot,
    gap_id: str,
    details: Mapping[str, Any],
    identifier: str | None = None,
    now: datetime | None = None,
) -> Snapshot:
    """Merge detail fields into an active gap without touching triage or status."""
    now = now or utc_now()
    gap = _require_gap(snapshot, gap_id)
    if gap.status == "Closed":
        raise _reject(gap_id, "closed gaps cannot be enriched")
    fields = _check_fields(details, ENRICH_FIELDS)
    enriched = _checked(
        snapshot, build_model(Gap, {**gap.model_dump(), **fields, "updated_at": now})
    )
    enriched = enriched.model_copy(
        update={
            "history": append_history(
                gap.history,
                history_entry(
                    "Enriched",
                    f"Classification detail added by {identifier or 'unknown'}",
                    now,
                ),
            )
        }
    )
    logger.info("Enriched gap %s (%d fields)", gap_id, len(fields))
    return snapshot.replace_gap(enriched)


def update_gap(
    snapshot: Snapshot,
    gap_id: str,
    changes: Mapping[str, Any],
    now: datetime | None = None,
) -> Snapshot:
    """Edit fields of an active gap.

    Lifecycle fields (status, triaged, history, promotion link) can only move
    through their own transitions; naming them here is an invalid transition.
    """
    now = now or utc_now()
    gap = _require_gap(snapshot, gap_id)
    blocked = sorted(k for k in changes if k in LIFECYCLE_FIELDS)
    if blocked:
        raise _reject(gap_id, f"{', '.join(blocked)} cannot be changed by update")
    if gap.status == "Closed":
        raise _reject(gap_id, "closed gaps cannot be edited")

    fields = _check_fields(changes, EDITABLE_FIELDS)
    updated = _checked(
        snapshot, build_model(Gap, {**gap.model_dump(), **fields, "updated_at": now})
    )
    if updated.health_status != gap.health_status:
        entry = history_entry(
            f"Health → {updated.health_status}",
            f"Health status changed to {updated.health_status}",
            now,
        )
    else:
        entry = history_entry("Updated", "Pipeline item details modified", now)
    updated = updated.model_copy(update={"history": append_history(gap.history, entry)})
    logger.info("Updated gap %s", gap_id)
    return snapshot.replace_gap(updated)


def change_gap_status(
    snapshot: Snapshot,
    gap_id: str,
    new_status: str,
    note: str | None = None,
    kpi_numerator: int | None = None,
    kpi_denominator: int | None = None,
    now: datetime | None = None,
) -> Snapshot:
    """Move a triaged gap forward: Open -> In Progress -> Closed.

    A supplied note becomes the gap's remediation note. Without one the
    history entry reads "Status changed to <status>".
    """
    now = now or utc_now()
    gap = _require_gap(snapshot, gap_id)
    if new_status not in _STATUS_ORDER:
        raise FieldValidationError({"status": f"must be one of {', '.join(GAP_STATUSES)}"})
    if not gap.triaged:
        raise _reject(gap_id, "gap must be triaged before its status can change")
    if _STATUS_ORDER[new_status] <= _STATUS_ORDER[gap.status]:
        raise _reject(gap_id, f"cannot move from {gap.status} to {new_status}")

    update: dict[str, Any] = {"status": new_status, "updated_at": now}
    if kpi_numerator is not None:
        update["kpi_numerator"] = kpi_numerator
    if kpi_denominator is not None:
        update["kpi_denominator"] = kpi_denominator
    if note:
        update["remediation_note"] = note
    moved = _checked(snapshot, build_model(Gap, {**gap.model_dump(), **update}))
    moved = moved.model_copy(
        update={
            "history": append_history(
                gap.history,
                history_entry(new_status, note or f"Status changed to {new_status}", now),
            )
        }
    )
    logger.info("Gap %s moved %s -> %s", gap_id, gap.status, new_status)
    return snapshot.replace_gap(moved)


def reopen_gap(
    snapshot: Snapshot,
    gap_id: str,
    note: str | None = None,
    now: datetime | None = None,
) -> Snapshot:
    """Return a Closed gap to Open. Promoted gaps stay closed."""
    now = now or utc_now()
    gap = _require_gap(snapshot, gap_id)
    if gap.status != "Closed":
        raise _reject(gap_id, "only closed gaps can be reopened")
    if gap.promoted_to_object_id:
        raise _reject(gap_id, "promoted gaps cannot be reopened")
    reopened = gap.model_copy(
        update={
            "status": "Open",
            "updated_at": now,
            "history": append_history(
                gap.history, history_entry("Reopened", note or "Status changed to Open", now)
            ),
        }
    )
    logger.info("Reopened gap %s", gap_id)
    return snapshot.replace_gap(reopened)


def object_fields_from_gap(gap: Gap, now: datetime) -> dict[str, Any]:
    """Pre-fill a tracked object from a gap's fields."""
    fields = {
        "list_name": gap.title,
        "product_families": (gap.product_family,) if gap.product_family else (),
        "type": gap.target_type,
        "criticality": gap.criticality,
        "identifying_person": gap.identifier,
        "owner": gap.owner,
        "operator": gap.operator,
        "control_classification": gap.control_classification,
        "nist_families": gap.nist_families,
        "control_objective": gap.control_objective,
        "control_type": gap.control_type,
        "implementation_type": gap.implementation_type,
        "execution_frequency": gap.execution_frequency,
        "outcome": gap.outcome,
        "audience": gap.audience,
        "description": gap.description,
        "kpi_numerator": gap.kpi_numerator,
        "kpi_denominator": gap.kpi_denominator,
        "health_status": gap.health_status,
        "health_rationale": gap.remediation_note,
        "jira_l1": gap.jira_l1,
        "jira_l2": gap.jira_l2,
        "source_gap_id": gap.id,
        "last_review_date": now.date(),
        "created_at": now,
        "updated_at": now,
    }
    return clear_control_fields(fields)


def promote_gap(snapshot: Snapshot, gap_id: str, now: datetime | None = None) -> Snapshot:
    """Close a triaged gap and create a tracked object from it.

    Both histories reference the other entity by name. Closed or untriaged
    gaps are rejected, and so is a gap whose pre-filled object would break
    an object rule; nothing is created or closed in either case. A RED gap
    without a remediation note gives its object a promotion rationale.
    """
    now = now or utc_now()
    gap = _require_gap(snapshot, gap_id)
    if gap.status == "Closed":
        raise _reject(gap_id, "closed gaps cannot be promoted")
    if not gap.triaged:
        raise _reject(gap_id, "gap must be triaged before promotion")

    fields = object_fields_from_gap(gap, now)
    if fields["health_status"] == "RED" and not (fields["health_rationale"] or "").strip():
        fields["health_rationale"] = f'Open gap at promotion from pipeline item "{gap.title}"'
    obj = build_model(
        TrackedObject,
        {
            **fields,
            "history": seed_history("Promoted", f'Promoted from pipeline item "{gap.title}"', now),
        },
    )
    errors = validate_object(obj)
    if errors:
        logger.info("Rejected promotion of gap %s: %s", gap_id, sorted(errors))
        raise FieldValidationError(errors)

    closed = gap.model_copy(
        update={
            "status": "Closed",
            "promoted_to_object_id": obj.id,
            "updated_at": now,
            "history": append_history(
                gap.history, history_entry("Closed", f'Promoted to object "{obj.list_name}"', now)
            ),
        }
    )
    logger.info("Promoted gap %s to object %s", gap_id, obj.id)
    promoted = snapshot.replace_gap(closed)
    return promoted.model_copy(update={"objects": (*promoted.objects, obj)})


def delete_gap(snapshot: Snapshot, gap_id: str) -> Snapshot:
    """Hard-delete a gap in any state. No ledger entry survives."""
    _require_gap(snapshot, gap_id)
    logger.info("Deleted gap %s", gap_id)
    return snapshot.model_copy(update={"gaps": tuple(g for g in snapshot.gaps if g.id != gap_id)})
