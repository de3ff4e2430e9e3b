"""Apply validated AI suggestions through the normal transitions.

Raw payloads are parsed into the strict suggestion union first; nothing
untyped reaches an entity. Applying a suggestion is an ordinary, explicit
transition and leaves the same history a manual edit would.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from onelist.schemas.snapshot import Snapshot
from onelist.schemas.suggestion import (
    SUGGESTION_ADAPTER,
    ChecklistAnswerSuggestion,
    ClassificationSuggestion,
    GapEnrichmentSuggestion,
    Suggestion,
)
from onelist.services.errors import (
    InvalidTransitionError,
    UnknownEntityError,
    field_errors_from_pydantic,
)
from onelist.services.inventory import update_object
from onelist.services.maturity.assessments import set_mlg_assessment
from onelist.services.pipeline.gap_lifecycle import enrich_gap

logger = logging.getLogger(__name__)

SUGGESTION_IDENTIFIER = "AI suggestion"


def parse_suggestion(payload: Mapping[str, Any]) -> Suggestion:
    """Validate a raw payload into one suggestion kind; FieldValidationError if it does not fit."""
    try:
        return SUGGESTION_ADAPTER.validate_python(dict(payload))
    except ValidationError as e:
        raise field_errors_from_pydantic(e) from e


def apply_suggestion(
    snapshot: Snapshot,
    suggestion: Suggestion,
    now: datetime | None = None,
) -> Snapshot:
    """Route a suggestion to update_object, set_mlg_assessment or enrich_gap."""
    if isinstance(suggestion, ClassificationSuggestion):
        obj = snapshot.object_by_id(suggestion.object_id)
        if obj is None:
            raise UnknownEntityError(f"object {suggestion.object_id} not found")
        if obj.type != "Control":
            raise InvalidTransitionError("classification applies to Controls only")
        logger.info(
            "Applying classification suggestion to %s (confidence %d)",
            obj.id,
            suggestion.confidence,
        )
        return update_object(
            snapshot,
            obj.id,
            {"control_classification": suggestion.control_classification},
            now=now,
        )

    if isinstance(suggestion, ChecklistAnswerSuggestion):
        logger.info(
            "Applying %d suggested MLG answers to %s",
            len(suggestion.answers),
            suggestion.object_id,
        )
        return set_mlg_assessment(snapshot, suggestion.object_id, suggestion.answers, merge=True)

    if isinstance(suggestion, GapEnrichmentSuggestion):
        logger.info("Applying enrichment suggestion to gap %s", suggestion.gap_id)
        return enrich_gap(
            snapshot,
            suggestion.gap_id,
            suggestion.details.model_dump(exclude_none=True),
            identifier=SUGGESTION_IDENTIFIER,
            now=now,
        )

    raise TypeError(f"unsupported suggestion: {type(suggestion).__name__}")
