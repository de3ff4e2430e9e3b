"""Tracked object (control, process, procedure) and remediation item schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from onelist.schemas.history import HistoryEntry
from onelist.schemas.types import (
    Criticality,
    HealthStatus,
    ObjectStatus,
    OptionalClassification,
    OptionalDate,
    OptionalObjectType,
    RemediationSeverity,
    RemediationStatus,
)
from onelist.services.compliance import calc_compliance, utc_now


def _new_id() -> str:
    return str(uuid.uuid4())


class RemediationItem(BaseModel):
    """Remediation work item attached to a tracked object."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(default_factory=_new_id)
    title: str = Field(..., min_length=1, max_length=512)
    status: RemediationStatus = "Open"
    severity: RemediationSeverity = "AMBER"
    note: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    resolved_at: datetime | None = None


class TrackedObject(BaseModel):
    """A control, process or procedure in the governance inventory.

    compliance_percent is computed from the KPI pair and cannot be set; values
    supplied on input are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(default_factory=_new_id)
    list_name: str = ""
    product_families: tuple[str, ...] = ()
    type: OptionalObjectType = None
    criticality: Criticality = "Medium"
    status: ObjectStatus = "Active"
    identifying_person: str = ""
    owner: str = ""
    operator: str = ""
    control_classification: OptionalClassification = "Informal"
    nist_families: tuple[str, ...] = ()
    control_objective: str = ""
    control_type: str = ""
    implementation_type: str = ""
    execution_frequency: str = ""
    outcome: str = ""
    audience: str = ""
    kpi_numerator: int = Field(0, ge=0)
    kpi_denominator: int = Field(0, ge=0)
    review_cadence: str = "Monthly"
    health_status: HealthStatus = "BLUE"
    health_rationale: str = ""
    description: str = ""
    last_review_date: OptionalDate = None
    next_review_date: OptionalDate = None
    jira_l1: str = ""
    jira_l2: str = ""
    environment: str = "Production"
    data_classification: str = "Internal"
    business_unit: str = ""
    remediation_items: tuple[RemediationItem, ...] = ()
    source_gap_id: str | None = None
    history: tuple[HistoryEntry, ...] = ()
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def compliance_percent(self) -> float:
        return calc_compliance(self.kpi_numerator, self.kpi_denominator)
