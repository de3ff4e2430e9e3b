"""Posture scoring constants and bucket helpers.

Centralized configuration for the Posture Scoring Engine. No magic numbers
inside the signal extractors or the scorer; all values are defined here.
"""

from __future__ import annotations

# ── Signal weights (sum to 1.0) ─────────────────────────────────────────

POSTURE_WEIGHTS: dict[str, float] = {
    "health": 0.25,
    "coverage": 0.25,
    "freshness": 0.15,
    "gaps": 0.20,
    "maturity": 0.15,
}

SIGNAL_LABELS: dict[str, str] = {
    "health": "Health",
    "coverage": "Coverage",
    "freshness": "Freshness",
    "gaps": "Gaps",
    "maturity": "Maturity",
}

# ── Health signal ───────────────────────────────────────────────────────

# BLUE = not yet assessed; scores 0 here and forces tier New in the scorer.
HEALTH_SIGNAL_VALUES: dict[str, int] = {
    "GREEN": 100,
    "AMBER": 50,
    "RED": 10,
    "BLUE": 0,
}
HEALTH_SIGNAL_UNKNOWN: int = 50

# ── Freshness signal (days since last review) ───────────────────────────

# Inclusive upper bounds, ascending; first match wins.
FRESHNESS_BUCKETS: tuple[tuple[int, int], ...] = (
    (30, 100),   # weekly / bi-weekly cadence
    (60, 85),    # monthly
    (90, 70),    # quarterly
    (120, 55),   # quarterly + buffer
    (180, 35),   # semi-annual
)
FRESHNESS_OVERDUE: int = 10
FRESHNESS_MISSING: int = 50

# ── Gap signal (diminishing penalty per severity class) ─────────────────

# n-th open item of a class contributes base / n.
GAP_BASE_PENALTIES: dict[str, int] = {
    "RED": 30,
    "AMBER": 20,
}
GAP_OTHER_PENALTY: int = 10

# Item statuses that no longer count as open
CLOSED_ITEM_STATUSES: frozenset[str] = frozenset({"Closed", "Resolved"})

# ── Maturity signal ─────────────────────────────────────────────────────

MATURITY_NEUTRAL: int = 50
MATURITY_MAX_SCORE: int = 20

# ── Adjustments and clamps ──────────────────────────────────────────────

INFORMAL_CONTROL_PENALTY_RATE: float = 0.05
SCORE_MIN: int = 0
SCORE_MAX: int = 100

# ── Tier thresholds (inclusive lower bounds) ────────────────────────────

HIGH_CRITICALITY_LEVELS: frozenset[str] = frozenset({"High", "Critical"})

THRESHOLDS_HIGH_CRITICALITY: dict[str, int] = {"healthy": 75, "at_risk": 45}
THRESHOLDS_STANDARD: dict[str, int] = {"healthy": 65, "at_risk": 35}

# id -> (label, sort order)
POSTURE_LEVELS: dict[str, tuple[str, int]] = {
    "CRITICAL": ("Critical", 0),
    "AT_RISK": ("At Risk", 1),
    "HEALTHY": ("Healthy", 2),
    "NEW": ("New", 3),
}


def freshness_for_days(days: int | None, _cfg: dict | None = None) -> int:
    """Return freshness signal for days since last review.

    - missing date: 50
    - <=30: 100, <=60: 85, <=90: 70, <=120: 55, <=180: 35
    - older: 10

    Future review dates (negative days) fall in the freshest bucket.
    """
    cfg = _cfg or {}
    if days is None:
        return cfg.get("freshness_missing", FRESHNESS_MISSING)
    for upper, value in cfg.get("freshness_buckets", FRESHNESS_BUCKETS):
        if days <= upper:
            return value
    return cfg.get("freshness_overdue", FRESHNESS_OVERDUE)


def thresholds_for(criticality: str | None, _cfg: dict | None = None) -> dict[str, int]:
    """Return tier thresholds; High and Critical objects need higher scores."""
    cfg = _cfg or {}
    if criticality in HIGH_CRITICALITY_LEVELS:
        return dict(cfg.get("thresholds_high_criticality", THRESHOLDS_HIGH_CRITICALITY))
    return dict(cfg.get("thresholds_standard", THRESHOLDS_STANDARD))


def from_profile(profile: dict) -> dict:
    """Build engine-compatible constants from a scoring profile dict.

    Missing sections fall back to the built-in constants; partial health_signal
    and gap_penalties maps are layered over the built-in maps. Returns dict with keys:
    posture_weights, health_signal_values, health_signal_unknown, freshness_buckets,
    freshness_missing, freshness_overdue, gap_base_penalties, gap_other_penalty,
    maturity_neutral, informal_control_penalty_rate, thresholds_high_criticality,
    thresholds_standard.
    """
    health = dict(profile.get("health_signal") or {})
    fresh = profile.get("freshness") or {}
    gaps = dict(profile.get("gap_penalties") or {})
    thresholds = profile.get("thresholds") or {}
    classification = profile.get("classification") or {}
    maturity = profile.get("maturity") or {}

    health_unknown = health.pop("unknown", HEALTH_SIGNAL_UNKNOWN)
    gap_other = gaps.pop("other", GAP_OTHER_PENALTY)
    buckets = fresh.get("buckets")

    return {
        "posture_weights": profile.get("weights") or POSTURE_WEIGHTS,
        "health_signal_values": {**HEALTH_SIGNAL_VALUES, **health},
        "health_signal_unknown": health_unknown,
        "freshness_buckets": (
            tuple((int(u), int(v)) for u, v in buckets) if buckets else FRESHNESS_BUCKETS
        ),
        "freshness_missing": fresh.get("missing", FRESHNESS_MISSING),
        "freshness_overdue": fresh.get("overdue", FRESHNESS_OVERDUE),
        "gap_base_penalties": {**GAP_BASE_PENALTIES, **gaps},
        "gap_other_penalty": gap_other,
        "maturity_neutral": maturity.get("neutral", MATURITY_NEUTRAL),
        "informal_control_penalty_rate": classification.get(
            "informal_control_penalty_rate", INFORMAL_CONTROL_PENALTY_RATE
        ),
        "thresholds_high_criticality": (
            thresholds.get("high_criticality") or THRESHOLDS_HIGH_CRITICALITY
        ),
        "thresholds_standard": thresholds.get("standard") or THRESHOLDS_STANDARD,
    }
