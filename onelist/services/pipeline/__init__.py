"""Gap pipeline: logging, triage, enrichment, status changes and promotion."""

from onelist.services.pipeline.gap_lifecycle import (
    change_gap_status,
    create_gap_from_safeguard,
    delete_gap,
    enrich_gap,
    log_gap,
    promote_gap,
    reopen_gap,
    triage_gap,
    update_gap,
)

__all__ = [
    "change_gap_status",
    "create_gap_from_safeguard",
    "delete_gap",
    "enrich_gap",
    "log_gap",
    "promote_gap",
    "reopen_gap",
    "triage_gap",
    "update_gap",
]
