"""Pydantic schemas for tracked objects, gaps, snapshots and AI suggestions."""

from onelist.schemas.gap import Gap, SourceSafeguard
from onelist.schemas.history import HistoryEntry
from onelist.schemas.snapshot import SNAPSHOT_VERSION, Snapshot
from onelist.schemas.suggestion import (
    ChecklistAnswerSuggestion,
    ClassificationSuggestion,
    GapEnrichmentSuggestion,
    Suggestion,
)
from onelist.schemas.tracked_object import RemediationItem, TrackedObject

__all__ = [
    "ChecklistAnswerSuggestion",
    "ClassificationSuggestion",
    "Gap",
    "GapEnrichmentSuggestion",
    "HistoryEntry",
    "RemediationItem",
    "SNAPSHOT_VERSION",
    "Snapshot",
    "SourceSafeguard",
    "Suggestion",
    "TrackedObject",
]
