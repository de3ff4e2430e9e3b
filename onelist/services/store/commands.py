"""Commands accepted by the snapshot reducer.

One frozen dataclass per transition. Commands carry plain values only; the
reducer resolves them against the current snapshot.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from onelist.schemas.suggestion import Suggestion

# ── Inventory ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AddObject:
    data: Mapping[str, Any]


@dataclass(frozen=True)
class UpdateObject:
    object_id: str
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class DeleteObject:
    object_id: str


@dataclass(frozen=True)
class ImportObjects:
    records: tuple[Mapping[str, Any], ...]


@dataclass(frozen=True)
class AddRemediationItem:
    object_id: str
    title: str
    severity: str = "AMBER"
    note: str = ""


@dataclass(frozen=True)
class UpdateRemediationItem:
    object_id: str
    item_id: str
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class RemoveRemediationItem:
    object_id: str
    item_id: str


@dataclass(frozen=True)
class SetMlgAssessment:
    object_id: str
    answers: Mapping[str, str]
    merge: bool = False


# ── Pipeline ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class LogGap:
    data: Mapping[str, Any]


@dataclass(frozen=True)
class CreateGapFromSafeguard:
    framework: str
    safeguard_id: str
    safeguard_name: str


@dataclass(frozen=True)
class TriageGap:
    gap_id: str
    target_type: str | None
    owner: str | None
    criticality: str | None
    details: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EnrichGap:
    gap_id: str
    details: Mapping[str, Any]
    identifier: str | None = None


@dataclass(frozen=True)
class UpdateGap:
    gap_id: str
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class ChangeGapStatus:
    gap_id: str
    status: str
    note: str | None = None
    kpi_numerator: int | None = None
    kpi_denominator: int | None = None


@dataclass(frozen=True)
class ReopenGap:
    gap_id: str
    note: str | None = None


@dataclass(frozen=True)
class PromoteGap:
    gap_id: str


@dataclass(frozen=True)
class DeleteGap:
    gap_id: str


# ── Snapshot-level ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class ApplySuggestion:
    suggestion: Suggestion


@dataclass(frozen=True)
class RestoreSnapshot:
    """Replace the whole state with a raw (possibly legacy) snapshot dict."""

    raw: Mapping[str, Any]


@dataclass(frozen=True)
class ResetSnapshot:
    """Discard all state and start from a blank snapshot."""


Command = Union[
    AddObject,
    UpdateObject,
    DeleteObject,
    ImportObjects,
    AddRemediationItem,
    UpdateRemediationItem,
    RemoveRemediationItem,
    SetMlgAssessment,
    LogGap,
    CreateGapFromSafeguard,
    TriageGap,
    EnrichGap,
    UpdateGap,
    ChangeGapStatus,
    ReopenGap,
    PromoteGap,
    DeleteGap,
    ApplySuggestion,
    RestoreSnapshot,
    ResetSnapshot,
]
