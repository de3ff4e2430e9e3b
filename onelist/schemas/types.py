"""Closed vocabularies shared by object, gap and suggestion schemas."""

from __future__ import annotations

from datetime import date
from typing import Annotated, Literal

from pydantic import BeforeValidator

ObjectType = Literal["Control", "Process", "Procedure"]
Criticality = Literal["Low", "Medium", "High", "Critical"]
HealthStatus = Literal["RED", "AMBER", "GREEN", "BLUE"]
GapHealthStatus = Literal["RED", "AMBER", "GREEN"]
ControlClassification = Literal["Formal", "Informal"]
ObjectStatus = Literal["Active", "Inactive", "Deprecated"]
GapStatus = Literal["Open", "In Progress", "Closed"]
RemediationStatus = Literal["Open", "In Progress", "Resolved"]
RemediationSeverity = Literal["RED", "AMBER"]
Answer = Literal["yes", "weak", "no"]

OBJECT_TYPES: tuple[str, ...] = ("Control", "Process", "Procedure")
CRITICALITY_LEVELS: tuple[str, ...] = ("Low", "Medium", "High", "Critical")
GAP_STATUSES: tuple[str, ...] = ("Open", "In Progress", "Closed")
REMEDIATION_STATUSES: tuple[str, ...] = ("Open", "In Progress", "Resolved")


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


OptionalDate = Annotated[date | None, BeforeValidator(_blank_to_none)]
OptionalObjectType = Annotated[ObjectType | None, BeforeValidator(_blank_to_none)]
OptionalClassification = Annotated[ControlClassification | None, BeforeValidator(_blank_to_none)]
