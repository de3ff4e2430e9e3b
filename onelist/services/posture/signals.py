"""Posture signal extractors.

Each extractor turns one raw attribute (or a collection of open items) into
a 0..100 signal. All of them are total: well-typed input never raises.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from onelist.services.compliance import days_since, round_half_up
from onelist.services.maturity.mlg_engine import compute_mlg_score
from onelist.services.posture.scoring_constants import (
    CLOSED_ITEM_STATUSES,
    GAP_BASE_PENALTIES,
    GAP_OTHER_PENALTY,
    HEALTH_SIGNAL_UNKNOWN,
    HEALTH_SIGNAL_VALUES,
    MATURITY_MAX_SCORE,
    MATURITY_NEUTRAL,
    freshness_for_days,
)


def _attr(item: Any, name: str) -> Any:
    """Read name from a model/object or a plain mapping."""
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def health_signal(status: str | None, _cfg: dict | None = None) -> int:
    """GREEN 100, AMBER 50, RED 10, BLUE 0; anything else 50."""
    cfg = _cfg or {}
    values = cfg.get("health_signal_values", HEALTH_SIGNAL_VALUES)
    return values.get(status, cfg.get("health_signal_unknown", HEALTH_SIGNAL_UNKNOWN))


def coverage_signal(obj: Any) -> float:
    """KPI compliance percent, already 0..100."""
    value = _attr(obj, "compliance_percent")
    return value if value is not None else 0


def freshness_signal(
    last_review_date: date | str | None,
    as_of: date,
    _cfg: dict | None = None,
) -> int:
    """Bucket days since last review; a missing date is neutral (50)."""
    return freshness_for_days(days_since(last_review_date, as_of), _cfg)


def item_severity(item: Any) -> str | None:
    """Severity class of an open item: remediation severity or gap health status."""
    return _attr(item, "severity") or _attr(item, "health_status")


def is_open(item: Any) -> bool:
    """True unless the item's status is Closed or Resolved."""
    return _attr(item, "status") not in CLOSED_ITEM_STATUSES


def gap_penalty(open_items: Iterable[Any], _cfg: dict | None = None) -> float:
    """Total diminishing penalty: the n-th item of a severity class adds base / n."""
    cfg = _cfg or {}
    bases = cfg.get("gap_base_penalties", GAP_BASE_PENALTIES)
    other = cfg.get("gap_other_penalty", GAP_OTHER_PENALTY)
    seen: dict[str, int] = {}
    total = 0.0
    for item in open_items:
        severity = item_severity(item)
        klass = severity if severity in bases else "other"
        seen[klass] = seen.get(klass, 0) + 1
        base = bases[klass] if klass in bases else other
        total += base / seen[klass]
    return total


def gap_signal(open_items: Iterable[Any] | None, _cfg: dict | None = None) -> int:
    """100 with no open items; otherwise max(0, 100 - penalty), rounded."""
    items = list(open_items or [])
    if not items:
        return 100
    return int(round_half_up(max(0.0, 100 - gap_penalty(items, _cfg))))


def maturity_signal(
    assessment: Mapping[str, str] | None,
    obj: Any | None,
    _cfg: dict | None = None,
) -> float:
    """MLG score rescaled from 0..20 to 0..100; neutral 50 when nothing to score."""
    if assessment is None and obj is None:
        return (_cfg or {}).get("maturity_neutral", MATURITY_NEUTRAL)
    result = compute_mlg_score(assessment, obj)
    return (result.score / MATURITY_MAX_SCORE) * 100
