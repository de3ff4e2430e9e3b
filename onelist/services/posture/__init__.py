"""Posture scoring engine: constants, signal extractors, scorer and profile loader."""

from onelist.services.posture.posture_engine import (
    PostureResult,
    associated_items_for,
    compute_inventory_posture,
    compute_posture,
    select_tier,
)
from onelist.services.posture.profile_loader import (
    ScoringProfileError,
    load_scoring_profile,
    resolve_scoring_config,
)
from onelist.services.posture.scoring_constants import from_profile
from onelist.services.posture.signals import (
    coverage_signal,
    freshness_signal,
    gap_signal,
    health_signal,
    maturity_signal,
)

__all__ = [
    "PostureResult",
    "ScoringProfileError",
    "associated_items_for",
    "compute_inventory_posture",
    "compute_posture",
    "coverage_signal",
    "freshness_signal",
    "from_profile",
    "gap_signal",
    "health_signal",
    "load_scoring_profile",
    "maturity_signal",
    "resolve_scoring_config",
    "select_tier",
]
