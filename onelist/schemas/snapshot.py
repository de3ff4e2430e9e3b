"""Persisted snapshot schema: the whole engine state as one versioned structure."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from onelist.schemas.gap import Gap
from onelist.schemas.tracked_object import TrackedObject
from onelist.schemas.types import Answer

SNAPSHOT_VERSION: int = 2

SAFEGUARD_FRAMEWORKS: tuple[str, ...] = ("cis-v8", "nist-csf", "glba", "nydfs")


def _empty_safeguard_assessments() -> dict[str, dict[str, Any]]:
    return {fw: {} for fw in SAFEGUARD_FRAMEWORKS}


class Snapshot(BaseModel):
    """Immutable engine state. Transitions return a new Snapshot via model_copy.

    attestations, framework_overrides, safeguard_assessments and
    compliance_snapshots are carried opaquely for other tools.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    version: int = SNAPSHOT_VERSION
    objects: tuple[TrackedObject, ...] = ()
    gaps: tuple[Gap, ...] = ()
    mlg_assessments: dict[str, dict[str, Answer]] = Field(default_factory=dict)
    attestations: dict[str, list[str]] = Field(default_factory=dict)
    framework_overrides: dict[str, dict[str, Any]] = Field(default_factory=dict)
    safeguard_assessments: dict[str, dict[str, Any]] = Field(
        default_factory=_empty_safeguard_assessments
    )
    compliance_snapshots: list[dict[str, Any]] = Field(default_factory=list)

    def object_by_id(self, object_id: str) -> TrackedObject | None:
        return next((o for o in self.objects if o.id == object_id), None)

    def gap_by_id(self, gap_id: str) -> Gap | None:
        return next((g for g in self.gaps if g.id == gap_id), None)

    def replace_object(self, obj: TrackedObject) -> Snapshot:
        """Return a new snapshot with the object of the same id swapped for obj."""
        return self.model_copy(
            update={"objects": tuple(obj if o.id == obj.id else o for o in self.objects)}
        )

    def replace_gap(self, gap: Gap) -> Snapshot:
        """Return a new snapshot with the gap of the same id swapped for gap."""
        return self.model_copy(
            update={"gaps": tuple(gap if g.id == gap.id else g for g in self.gaps)}
        )
