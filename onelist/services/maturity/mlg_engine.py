"""MLG maturity diagnostic engine.

Scores the four-phase checklist for one tracked object. Phase-1 defaults are
derived from the object's own attributes and layered under the explicitly
recorded answers; explicit answers always win per checkpoint.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from onelist.services.maturity.mlg_constants import (
    ANSWER_POINTS,
    GATEKEEPER_IDS,
    GATEKEEPER_PASSING_ANSWERS,
    MATURITY_TIERS,
    MLG_PHASES,
)

if TYPE_CHECKING:
    from onelist.schemas.tracked_object import TrackedObject


@dataclass(frozen=True)
class MaturityTier:
    """Maturity label plus the RAG/BLUE colour tier it maps to."""

    label: str
    tier: str


@dataclass
class MaturityResult:
    """Full diagnostic for one object."""

    score: float
    tier: MaturityTier
    phase_scores: dict[str, float] = field(default_factory=dict)
    foundation_passed: bool = False
    locked_phases: list[str] = field(default_factory=list)
    answers: dict[str, str] = field(default_factory=dict)
    auto_derived: list[str] = field(default_factory=list)


def get_maturity_tier(score: float) -> MaturityTier:
    """Map a 0..20 score to its tier: >=16 Mature, >=11 Adequate, >=6 Developing, else Deficient."""
    for lower, label, tier in MATURITY_TIERS:
        if score >= lower:
            return MaturityTier(label=label, tier=tier)
    _, label, tier = MATURITY_TIERS[-1]
    return MaturityTier(label=label, tier=tier)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def derive_answers(obj: TrackedObject | Any | None) -> dict[str, str]:
    """Return Phase-1 answers implied by the object's attributes.

    review_cadence set -> cadence=yes; owner non-blank -> ownership=yes;
    description non-blank -> scope=yes.
    """
    if obj is None:
        return {}
    derived: dict[str, str] = {}
    if getattr(obj, "review_cadence", None):
        derived["cadence"] = "yes"
    if not _is_blank(getattr(obj, "owner", None)):
        derived["ownership"] = "yes"
    if not _is_blank(getattr(obj, "description", None)):
        derived["scope"] = "yes"
    return derived


def merge_answers(
    auto_derived: Mapping[str, str],
    explicit: Mapping[str, str] | None,
) -> dict[str, str]:
    """Layer explicit answers over auto-derived defaults (explicit wins)."""
    return {**auto_derived, **(explicit or {})}


def foundation_passed(answers: Mapping[str, str]) -> bool:
    """True iff every Phase-1 gatekeeper resolves to yes or weak."""
    return all(answers.get(cp_id) in GATEKEEPER_PASSING_ANSWERS for cp_id in GATEKEEPER_IDS)


def score_answers(answers: Mapping[str, str]) -> dict[str, float]:
    """Return per-phase points; unanswered and unknown answers count 0."""
    phase_scores: dict[str, float] = {}
    for phase in MLG_PHASES:
        phase_scores[phase.id] = sum(
            ANSWER_POINTS.get(answers.get(cp.id, "no"), 0.0) for cp in phase.checkpoints
        )
    return phase_scores


def compute_mlg_score(
    assessment: Mapping[str, str] | None,
    obj: TrackedObject | Any | None = None,
) -> MaturityResult:
    """Compute the MLG diagnostic for an object's assessment.

    A missing assessment is scored as all-"no" apart from the auto-derived
    Phase-1 defaults. Gating never blocks scoring; locked_phases is advisory.
    """
    auto = derive_answers(obj)
    explicit = dict(assessment) if isinstance(assessment, Mapping) else {}
    answers = merge_answers(auto, explicit)

    phase_scores = score_answers(answers)
    total = sum(phase_scores.values())
    passed = foundation_passed(answers)
    locked = [] if passed else [phase.id for phase in MLG_PHASES[1:]]

    return MaturityResult(
        score=total,
        tier=get_maturity_tier(total),
        phase_scores=phase_scores,
        foundation_passed=passed,
        locked_phases=locked,
        answers=answers,
        auto_derived=sorted(k for k in auto if k not in explicit),
    )
