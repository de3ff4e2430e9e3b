"""Strict AI suggestion payloads.

Suggestions arrive asynchronously from an external assistant. Only payloads
that validate against one of these models are ever applied, and they are applied
through the ordinary update/enrich transitions.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from onelist.schemas.types import Answer, ControlClassification, Criticality, ObjectType
from onelist.services.maturity.mlg_constants import CHECKPOINT_IDS


class ClassificationSuggestion(BaseModel):
    """Suggested Formal/Informal classification for a control."""

    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    kind: Literal["classification"] = "classification"
    object_id: str = Field(..., min_length=1)
    control_classification: ControlClassification
    confidence: int = Field(..., ge=0, le=100)
    rationale: str = Field("", max_length=4000)


class ChecklistAnswerSuggestion(BaseModel):
    """Suggested MLG checkpoint answers for one object."""

    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    kind: Literal["checklist_answers"] = "checklist_answers"
    object_id: str = Field(..., min_length=1)
    answers: dict[str, Answer] = Field(..., min_length=1)
    confidence: int = Field(..., ge=0, le=100)
    rationale: str = Field("", max_length=4000)

    @field_validator("answers")
    @classmethod
    def known_checkpoints(cls, value: dict[str, Answer]) -> dict[str, Answer]:
        unknown = sorted(set(value) - CHECKPOINT_IDS)
        if unknown:
            raise ValueError(f"unknown checkpoint ids: {', '.join(unknown)}")
        return value


class GapEnrichmentDetails(BaseModel):
    """Detail fields an assistant may propose for a gap; None means no proposal."""

    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    target_type: ObjectType | None = None
    criticality: Criticality | None = None
    control_classification: ControlClassification | None = None
    control_objective: str | None = None
    control_type: str | None = None
    implementation_type: str | None = None
    execution_frequency: str | None = None
    outcome: str | None = None
    audience: str | None = None
    scope: str | None = None
    systems_tools: str | None = None
    description: str | None = None


class GapEnrichmentSuggestion(BaseModel):
    """Suggested classification detail for a gap in the pipeline."""

    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    kind: Literal["gap_enrichment"] = "gap_enrichment"
    gap_id: str = Field(..., min_length=1)
    details: GapEnrichmentDetails
    confidence: int = Field(..., ge=0, le=100)
    rationale: str = Field("", max_length=4000)


Suggestion = Annotated[
    Union[ClassificationSuggestion, ChecklistAnswerSuggestion, GapEnrichmentSuggestion],
    Field(discriminator="kind"),
]

SUGGESTION_ADAPTER: TypeAdapter[Suggestion] = TypeAdapter(Suggestion)
