"""Scoring profile loader: load posture scoring overrides from YAML.

A profile is a YAML document with optional sections (weights, health_signal,
freshness, gap_penalties, maturity, classification, thresholds). Sections that
are present are validated; missing sections and missing keys within the
health_signal and gap_penalties maps fall back to built-in constants.
"""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from onelist.services.posture.scoring_constants import (
    GAP_BASE_PENALTIES,
    HEALTH_SIGNAL_VALUES,
    POSTURE_WEIGHTS,
    from_profile,
)

logger = logging.getLogger(__name__)

ALLOWED_SECTIONS: frozenset[str] = frozenset({
    "profile_id",
    "version",
    "weights",
    "health_signal",
    "freshness",
    "gap_penalties",
    "maturity",
    "classification",
    "thresholds",
})


class ScoringProfileError(ValueError):
    """Raised when a scoring profile is malformed."""

    pass


def _require_number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ScoringProfileError(f"{where} must be a number (got {value!r})")
    return float(value)


def _validate_weights(weights: Any) -> None:
    if not isinstance(weights, dict):
        raise ScoringProfileError("weights must be a mapping")
    if set(weights) != set(POSTURE_WEIGHTS):
        raise ScoringProfileError(
            f"weights must define exactly {sorted(POSTURE_WEIGHTS)} (got {sorted(weights)})"
        )
    total = sum(_require_number(v, f"weights.{k}") for k, v in weights.items())
    if not math.isclose(total, 1.0, abs_tol=1e-9):
        raise ScoringProfileError(f"weights must sum to 1.0 (got {total})")


def _validate_freshness(fresh: Any) -> None:
    if not isinstance(fresh, dict):
        raise ScoringProfileError("freshness must be a mapping")
    buckets = fresh.get("buckets")
    if buckets is not None:
        if not isinstance(buckets, list) or not buckets:
            raise ScoringProfileError("freshness.buckets must be a non-empty list")
        previous = -math.inf
        for i, bucket in enumerate(buckets):
            if not isinstance(bucket, (list, tuple)) or len(bucket) != 2:
                raise ScoringProfileError(f"freshness.buckets[{i}] must be [max_days, signal]")
            upper = _require_number(bucket[0], f"freshness.buckets[{i}][0]")
            _require_number(bucket[1], f"freshness.buckets[{i}][1]")
            if upper <= previous:
                raise ScoringProfileError("freshness.buckets must be in ascending day order")
            previous = upper
    for key in ("missing", "overdue"):
        if key in fresh:
            _require_number(fresh[key], f"freshness.{key}")


def _validate_thresholds(thresholds: Any) -> None:
    if not isinstance(thresholds, dict):
        raise ScoringProfileError("thresholds must be a mapping")
    for band in ("high_criticality", "standard"):
        values = thresholds.get(band)
        if values is None:
            continue
        if not isinstance(values, dict) or {"healthy", "at_risk"} - set(values):
            raise ScoringProfileError(f"thresholds.{band} needs healthy and at_risk")
        healthy = _require_number(values["healthy"], f"thresholds.{band}.healthy")
        at_risk = _require_number(values["at_risk"], f"thresholds.{band}.at_risk")
        if healthy <= at_risk:
            raise ScoringProfileError(f"thresholds.{band}.healthy must exceed at_risk")


# Keys each numeric section may set; anything else is a typo.
SECTION_KEYS: dict[str, frozenset[str]] = {
    "health_signal": frozenset({*HEALTH_SIGNAL_VALUES, "unknown"}),
    "gap_penalties": frozenset({*GAP_BASE_PENALTIES, "other"}),
    "maturity": frozenset({"neutral"}),
    "classification": frozenset({"informal_control_penalty_rate"}),
}


def _validate_number_map(section: str, values: Any) -> None:
    if not isinstance(values, dict):
        raise ScoringProfileError(f"{section} must be a mapping")
    unknown = set(values) - SECTION_KEYS[section]
    if unknown:
        raise ScoringProfileError(
            f"unknown {section} keys: {sorted(unknown)} (allowed: {sorted(SECTION_KEYS[section])})"
        )
    for key, value in values.items():
        _require_number(value, f"{section}.{key}")


def validate_scoring_profile(profile: dict[str, Any]) -> None:
    """Validate a parsed profile. Raises ScoringProfileError on the first problem."""
    if not isinstance(profile, dict):
        raise ScoringProfileError("scoring profile must be a mapping")
    unknown = set(profile) - ALLOWED_SECTIONS
    if unknown:
        raise ScoringProfileError(f"unknown profile sections: {sorted(unknown)}")
    if "weights" in profile:
        _validate_weights(profile["weights"])
    if "freshness" in profile:
        _validate_freshness(profile["freshness"])
    if "thresholds" in profile:
        _validate_thresholds(profile["thresholds"])
    for section in ("health_signal", "gap_penalties", "maturity", "classification"):
        if section in profile:
            _validate_number_map(section, profile[section])


def load_scoring_profile(path: str | Path) -> dict[str, Any]:
    """Load and validate a YAML scoring profile.

    Raises:
        FileNotFoundError: Profile file does not exist.
        ScoringProfileError: YAML is invalid or fails validation.
    """
    profile_path = Path(path)
    if not profile_path.is_file():
        raise FileNotFoundError(f"scoring profile not found: {profile_path}")
    try:
        with profile_path.open(encoding="utf-8") as fp:
            profile = yaml.safe_load(fp) or {}
    except yaml.YAMLError as e:
        raise ScoringProfileError(f"invalid YAML in {profile_path}: {e}") from e
    validate_scoring_profile(profile)
    logger.info("Loaded scoring profile %s", profile.get("profile_id", profile_path.name))
    return profile


@lru_cache(maxsize=8)
def resolve_scoring_config(path: str | None) -> dict | None:
    """Return engine constants for a profile path; None (built-ins) when path is empty."""
    if not path:
        return None
    return from_profile(load_scoring_profile(path))
