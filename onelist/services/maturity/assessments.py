"""Recording explicit MLG answers on a snapshot."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from onelist.schemas.snapshot import Snapshot
from onelist.services.errors import FieldValidationError, UnknownEntityError
from onelist.services.maturity.mlg_constants import ANSWER_POINTS, CHECKPOINT_IDS

logger = logging.getLogger(__name__)


def validate_answers(answers: Mapping[str, str]) -> dict[str, str]:
    """Return checkpoint -> message for unknown checkpoints or answers."""
    errors: dict[str, str] = {}
    for cp_id, answer in answers.items():
        if cp_id not in CHECKPOINT_IDS:
            errors[cp_id] = "Unknown checkpoint"
        elif answer not in ANSWER_POINTS:
            errors[cp_id] = "Answer must be yes, weak or no"
    return errors


def set_mlg_assessment(
    snapshot: Snapshot,
    object_id: str,
    answers: Mapping[str, str],
    merge: bool = False,
) -> Snapshot:
    """Store explicit answers for an object.

    merge=False replaces the object's answer set; merge=True layers answers
    over the existing set. Recording is never blocked by phase gating.
    """
    if snapshot.object_by_id(object_id) is None:
        raise UnknownEntityError(f"object {object_id} not found")
    errors = validate_answers(answers)
    if errors:
        raise FieldValidationError(errors)

    base = dict(snapshot.mlg_assessments.get(object_id, {})) if merge else {}
    assessments = {**snapshot.mlg_assessments, object_id: {**base, **answers}}
    logger.info("Recorded %d MLG answers for object %s", len(answers), object_id)
    return snapshot.model_copy(update={"mlg_assessments": assessments})
