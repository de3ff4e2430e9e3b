"""MLG maturity diagnostic: checklist definition, tiering and scoring."""

from onelist.services.maturity.assessments import set_mlg_assessment, validate_answers
from onelist.services.maturity.mlg_constants import (
    CHECKPOINT_IDS,
    GATEKEEPER_IDS,
    MLG_PHASES,
)
from onelist.services.maturity.mlg_engine import (
    MaturityResult,
    MaturityTier,
    compute_mlg_score,
    derive_answers,
    foundation_passed,
    get_maturity_tier,
    merge_answers,
)

__all__ = [
    "CHECKPOINT_IDS",
    "GATEKEEPER_IDS",
    "MLG_PHASES",
    "MaturityResult",
    "MaturityTier",
    "compute_mlg_score",
    "derive_answers",
    "foundation_passed",
    "get_maturity_tier",
    "merge_answers",
    "set_mlg_assessment",
    "validate_answers",
]
