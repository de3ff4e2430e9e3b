"""Error taxonomy shared by inventory and pipeline transitions.

Field-level problems and workflow problems are kept apart so callers can show
field-specific versus workflow-specific messages.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class FieldValidationError(ValueError):
    """Raised before any mutation when one or more fields are invalid."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        summary = "; ".join(f"{k}: {v}" for k, v in sorted(self.errors.items()))
        super().__init__(summary or "invalid input")


class InvalidTransitionError(ValueError):
    """Raised when a transition is not allowed from the entity's current state."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class UnknownEntityError(InvalidTransitionError):
    """Raised when a transition names an object or gap that is not in the snapshot."""

    pass


def field_errors_from_pydantic(exc: ValidationError) -> FieldValidationError:
    """Convert a pydantic ValidationError into a FieldValidationError keyed by field name."""
    errors: dict[str, str] = {}
    for err in exc.errors():
        loc = err.get("loc") or ("__root__",)
        key = ".".join(str(part) for part in loc)
        errors.setdefault(key, err.get("msg", "invalid value"))
    return FieldValidationError(errors)


def build_model(model_cls: type[ModelT], data: Mapping[str, Any]) -> ModelT:
    """Validate data into model_cls, reporting pydantic problems as FieldValidationError."""
    try:
        return model_cls.model_validate(dict(data))
    except ValidationError as e:
        raise field_errors_from_pydantic(e) from e
