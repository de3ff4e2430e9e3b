"""Gap (pipeline item) schema."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from onelist.schemas.history import HistoryEntry
from onelist.schemas.types import (
    Criticality,
    GapHealthStatus,
    GapStatus,
    OptionalClassification,
    OptionalDate,
    OptionalObjectType,
)
from onelist.services.compliance import calc_compliance, utc_now


class SourceSafeguard(BaseModel):
    """Provenance of a gap raised from a framework safeguard assessment."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    framework: str
    safeguard_id: str
    name: str = ""


class Gap(BaseModel):
    """Intake item tracked from logging through triage to closure or promotion.

    triaged only ever moves False -> True. compliance_percent is derived from
    the KPI pair exactly as on TrackedObject.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    identifier: str = ""
    triaged: bool = False
    product_family: str = ""
    target_type: OptionalObjectType = None
    owner: str = ""
    operator: str = ""
    criticality: Criticality = "Medium"
    title: str = ""
    description: str = ""
    status: GapStatus = "Open"
    health_status: GapHealthStatus = "RED"
    control_classification: OptionalClassification = "Informal"
    nist_families: tuple[str, ...] = ()
    control_objective: str = ""
    control_type: str = ""
    implementation_type: str = ""
    execution_frequency: str = ""
    outcome: str = ""
    systems_tools: str = ""
    audience: str = ""
    scope: str = ""
    kpi_numerator: int = Field(0, ge=0)
    kpi_denominator: int = Field(0, ge=0)
    remediation_note: str = ""
    expiry_date: OptionalDate = None
    jira_l1: str = ""
    jira_l2: str = ""
    source_safeguard: SourceSafeguard | None = None
    linked_object_id: str | None = None
    promoted_to_object_id: str | None = None
    history: tuple[HistoryEntry, ...] = ()
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def compliance_percent(self) -> float:
        return calc_compliance(self.kpi_numerator, self.kpi_denominator)
