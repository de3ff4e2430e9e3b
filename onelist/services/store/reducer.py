"""Pure snapshot reducer: (snapshot, command) -> new snapshot.

Handlers are registered per command class. The reducer never persists;
saving is the caller's job once it has the new snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from onelist.schemas.snapshot import Snapshot
from onelist.services import inventory
from onelist.services.compliance import utc_now
from onelist.services.maturity.assessments import set_mlg_assessment
from onelist.services.pipeline import gap_lifecycle
from onelist.services.store import commands as c
from onelist.services.store.persistence import import_snapshot
from onelist.services.suggestions import apply_suggestion

logger = logging.getLogger(__name__)

Handler = Callable[[Snapshot, Any, datetime], Snapshot]


def _restore(snapshot: Snapshot, cmd: c.RestoreSnapshot, now: datetime) -> Snapshot:
    logger.info("Restoring snapshot from raw data")
    return import_snapshot(cmd.raw)


def _reset(snapshot: Snapshot, cmd: c.ResetSnapshot, now: datetime) -> Snapshot:
    logger.info("Resetting snapshot")
    return Snapshot()


COMMAND_HANDLERS: dict[type, Handler] = {
    c.AddObject: lambda s, cmd, now: inventory.add_object(s, cmd.data, now),
    c.UpdateObject: lambda s, cmd, now: inventory.update_object(s, cmd.object_id, cmd.changes, now),
    c.DeleteObject: lambda s, cmd, now: inventory.delete_object(s, cmd.object_id),
    c.ImportObjects: lambda s, cmd, now: inventory.import_objects(s, cmd.records, now),
    c.AddRemediationItem: lambda s, cmd, now: inventory.add_remediation_item(
        s, cmd.object_id, cmd.title, cmd.severity, cmd.note, now
    ),
    c.UpdateRemediationItem: lambda s, cmd, now: inventory.update_remediation_item(
        s, cmd.object_id, cmd.item_id, cmd.changes, now
    ),
    c.RemoveRemediationItem: lambda s, cmd, now: inventory.remove_remediation_item(
        s, cmd.object_id, cmd.item_id, now
    ),
    c.SetMlgAssessment: lambda s, cmd, now: set_mlg_assessment(
        s, cmd.object_id, cmd.answers, merge=cmd.merge
    ),
    c.LogGap: lambda s, cmd, now: gap_lifecycle.log_gap(s, cmd.data, now),
    c.CreateGapFromSafeguard: lambda s, cmd, now: gap_lifecycle.create_gap_from_safeguard(
        s, cmd.framework, cmd.safeguard_id, cmd.safeguard_name, now
    ),
    c.TriageGap: lambda s, cmd, now: gap_lifecycle.triage_gap(
        s, cmd.gap_id, cmd.target_type, cmd.owner, cmd.criticality, cmd.details, now
    ),
    c.EnrichGap: lambda s, cmd, now: gap_lifecycle.enrich_gap(
        s, cmd.gap_id, cmd.details, cmd.identifier, now
    ),
    c.UpdateGap: lambda s, cmd, now: gap_lifecycle.update_gap(s, cmd.gap_id, cmd.changes, now),
    c.ChangeGapStatus: lambda s, cmd, now: gap_lifecycle.change_gap_status(
        s, cmd.gap_id, cmd.status, cmd.note, cmd.kpi_numerator, cmd.kpi_denominator, now
    ),
    c.ReopenGap: lambda s, cmd, now: gap_lifecycle.reopen_gap(s, cmd.gap_id, cmd.note, now),
    c.PromoteGap: lambda s, cmd, now: gap_lifecycle.promote_gap(s, cmd.gap_id, now),
    c.DeleteGap: lambda s, cmd, now: gap_lifecycle.delete_gap(s, cmd.gap_id),
    c.ApplySuggestion: lambda s, cmd, now: apply_suggestion(s, cmd.suggestion, now),
    c.RestoreSnapshot: _restore,
    c.ResetSnapshot: _reset,
}


def apply_command(snapshot: Snapshot, command: c.Command, now: datetime | None = None) -> Snapshot:
    """Apply one command and return the resulting snapshot.

    Validation and invalid-transition errors propagate unchanged; the input
    snapshot is never modified either way.
    """
    handler = COMMAND_HANDLERS.get(type(command))
    if handler is None:
        raise ValueError(f"Unknown command: {type(command).__name__}")
    return handler(snapshot, command, now or utc_now())
