"""KPI derivation and date helpers shared by objects, gaps and the posture engine."""

from __future__ import annotations

import math
from datetime import UTC, date, datetime


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round half away from negative infinity (floor(x + 0.5)), at ndigits decimals.

    Python's round() is banker's rounding; stored scores were produced with
    half-up rounding, so every score path goes through this helper.
    """
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def calc_compliance(numerator: int | None, denominator: int | None) -> float:
    """Return KPI compliance percent with one decimal; 0 when denominator is 0 or missing."""
    if not denominator:
        return 0
    return round_half_up((numerator or 0) / denominator * 1000) / 10


def utc_now() -> datetime:
    """Return timezone-aware current UTC time."""
    return datetime.now(UTC)


def days_since(value: date | datetime | str | None, as_of: date) -> int | None:
    """Return whole days from value to as_of; None when value is missing.

    Future dates give a negative count; callers bucket them with the freshest band.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    if isinstance(value, datetime):
        value = value.date()
    return (as_of - value).days


def is_stale(last_review_date: date | str | None, as_of: date, staleness_days: int = 90) -> bool:
    """Return True if never reviewed or last reviewed more than staleness_days ago."""
    days = days_since(last_review_date, as_of)
    if days is None:
        return True
    return days > staleness_days
