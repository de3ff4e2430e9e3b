"""
Pytest configuration and fixtures.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from typing import Any

import pytest

from onelist.schemas.snapshot import Snapshot
from onelist.services.inventory import add_object
from onelist.services.pipeline.gap_lifecycle import log_gap

AS_OF = date(2026, 3, 1)
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def as_of() -> date:
    """Fixed reference date for freshness calculations."""
    return AS_OF


@pytest.fixture
def now() -> datetime:
    """Fixed transition timestamp."""
    return NOW


@pytest.fixture
def control_data() -> dict[str, Any]:
    """A valid Informal Control reviewed ten days before AS_OF."""
    return {
        "id": "obj-mfa",
        "list_name": "MFA Enforcement",
        "product_families": ["Identity"],
        "type": "Control",
        "criticality": "Medium",
        "owner": "Dana Reyes",
        "operator": "IAM Team",
        "control_classification": "Informal",
        "health_status": "GREEN",
        "kpi_numerator": 9,
        "kpi_denominator": 10,
        "description": "MFA required for all workforce sign-ins",
        "last_review_date": AS_OF - timedelta(days=10),
    }


@pytest.fixture
def snapshot_with_object(control_data: dict[str, Any]) -> Snapshot:
    """Snapshot holding the control from control_data."""
    return add_object(Snapshot(), control_data, NOW)


@pytest.fixture
def snapshot_with_gap(snapshot_with_object: Snapshot) -> Snapshot:
    """Snapshot with one untriaged gap logged against the control."""
    return log_gap(
        snapshot_with_object,
        {
            "title": "Service accounts bypass MFA",
            "identifier": "Sam Ortiz",
            "linked_object_id": "obj-mfa",
        },
        NOW,
    )
