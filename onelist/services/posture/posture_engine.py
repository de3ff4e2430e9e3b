"""Posture scorer: five weighted signals -> 0..100 score and tier.

score = sum(round1(signal_i * weight_i)), minus the informal-control
adjustment, clamped to 0..100 and rounded. BLUE health always yields tier New;
otherwise thresholds depend on criticality.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any

from onelist.services.compliance import round_half_up
from onelist.services.posture.scoring_constants import (
    INFORMAL_CONTROL_PENALTY_RATE,
    POSTURE_LEVELS,
    POSTURE_WEIGHTS,
    SCORE_MAX,
    SCORE_MIN,
    SIGNAL_LABELS,
    thresholds_for,
)
from onelist.services.posture.signals import (
    coverage_signal,
    freshness_signal,
    gap_signal,
    health_signal,
    is_open,
    maturity_signal,
)

if TYPE_CHECKING:
    from onelist.schemas.snapshot import Snapshot
    from onelist.schemas.tracked_object import TrackedObject

logger = logging.getLogger(__name__)


@dataclass
class PostureResult:
    """Posture tier plus the numbers needed to reconstruct it."""

    tier: str
    label: str
    order: int
    score: int
    breakdown: dict[str, Any] = field(default_factory=dict)
    thresholds: dict[str, int] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "tier": self.tier,
            "label": self.label,
            "order": self.order,
            "score": self.score,
            "breakdown": self.breakdown,
            "thresholds": self.thresholds,
        }


def _level(tier: str, score: int, breakdown: dict, thresholds: dict | None) -> PostureResult:
    label, order = POSTURE_LEVELS[tier]
    return PostureResult(
        tier=tier,
        label=label,
        order=order,
        score=score,
        breakdown=breakdown,
        thresholds=thresholds,
    )


def select_tier(
    score: int,
    health_status: str | None,
    criticality: str | None,
    _cfg: dict | None = None,
) -> tuple[str, dict[str, int] | None]:
    """Return (tier id, thresholds used). BLUE bypasses thresholds entirely."""
    if health_status == "BLUE":
        return "NEW", None
    thresholds = thresholds_for(criticality, _cfg)
    if score >= thresholds["healthy"]:
        return "HEALTHY", thresholds
    if score >= thresholds["at_risk"]:
        return "AT_RISK", thresholds
    return "CRITICAL", thresholds


def compute_posture(
    obj: TrackedObject | Any,
    associated_gaps: Iterable[Any] | None = None,
    mlg_assessment: Mapping[str, str] | None = None,
    as_of: date | None = None,
    _cfg: dict | None = None,
) -> PostureResult:
    """Compute posture for one tracked object.

    Args:
        obj: Tracked object (or any object exposing the same attributes).
        associated_gaps: Remediation items / gaps tied to the object. Closed and
            Resolved items are ignored.
        mlg_assessment: Explicit MLG answers for the object, if any.
        as_of: Reference date for freshness (default: today).
        _cfg: Engine constants from from_profile(); None = built-in constants.

    Returns:
        PostureResult with tier, integer score and per-signal breakdown.
    """
    as_of = as_of or date.today()
    cfg = _cfg or {}
    weights = cfg.get("posture_weights", POSTURE_WEIGHTS)
    penalty_rate = cfg.get("informal_control_penalty_rate", INFORMAL_CONTROL_PENALTY_RATE)

    health = getattr(obj, "health_status", None) or "GREEN"
    obj_type = getattr(obj, "type", None) or "Control"
    criticality = getattr(obj, "criticality", None) or "Medium"
    open_items = [item for item in (associated_gaps or []) if is_open(item)]

    signals = {
        "health": health_signal(health, _cfg),
        "coverage": coverage_signal(obj),
        "freshness": freshness_signal(getattr(obj, "last_review_date", None), as_of, _cfg),
        "gaps": gap_signal(open_items, _cfg),
        "maturity": maturity_signal(mlg_assessment, obj, _cfg),
    }

    raw = 0.0
    breakdown: dict[str, Any] = {}
    for key, weight in weights.items():
        value = int(round_half_up(signals[key]))
        weighted = round_half_up(value * weight, 1)
        breakdown[key] = {
            "value": value,
            "weighted": weighted,
            "max": int(round_half_up(weight * 100)),
            "label": SIGNAL_LABELS.get(key, key.title()),
        }
        raw += weighted

    if obj_type == "Control" and getattr(obj, "control_classification", None) == "Informal":
        penalty = int(round_half_up(raw * penalty_rate))
        raw -= penalty
        breakdown["classification_adjustment"] = -penalty
    else:
        breakdown["classification_adjustment"] = 0

    score = int(max(SCORE_MIN, min(SCORE_MAX, round_half_up(raw))))
    tier, thresholds = select_tier(score, health, criticality, _cfg)
    return _level(tier, score, breakdown, thresholds)


def associated_items_for(snapshot: Snapshot, object_id: str) -> list[Any]:
    """Open remediation items on the object plus open gaps logged against it."""
    obj = snapshot.object_by_id(object_id)
    items: list[Any] = []
    if obj is not None:
        items.extend(item for item in obj.remediation_items if is_open(item))
    items.extend(
        gap for gap in snapshot.gaps if gap.linked_object_id == object_id and is_open(gap)
    )
    return items


def compute_inventory_posture(
    snapshot: Snapshot,
    as_of: date | None = None,
    _cfg: dict | None = None,
) -> dict[str, PostureResult]:
    """Score every tracked object in the snapshot, keyed by object id."""
    results: dict[str, PostureResult] = {}
    for obj in snapshot.objects:
        results[obj.id] = compute_posture(
            obj,
            associated_gaps=associated_items_for(snapshot, obj.id),
            mlg_assessment=snapshot.mlg_assessments.get(obj.id),
            as_of=as_of,
            _cfg=_cfg,
        )
    logger.debug("Scored %d objects", len(results))
    return results
