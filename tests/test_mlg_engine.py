"""Tests for the MLG maturity diagnostic: derivation, gating, tiers, recording."""

from __future__ import annotations

import pytest

from onelist.schemas.snapshot import Snapshot
from onelist.schemas.tracked_object import TrackedObject
from onelist.services.errors import FieldValidationError, UnknownEntityError
from onelist.services.maturity import (
    CHECKPOINT_IDS,
    GATEKEEPER_IDS,
    MLG_PHASES,
    compute_mlg_score,
    derive_answers,
    foundation_passed,
    get_maturity_tier,
    merge_answers,
    set_mlg_assessment,
)


class TestChecklistShape:
    """Four ordered phases, twenty checkpoints, three gatekeepers."""

    def test_phases(self) -> None:
        assert [p.id for p in MLG_PHASES] == ["foundation", "action", "controls", "maturity"]
        assert len(CHECKPOINT_IDS) == 20

    def test_gatekeepers_in_foundation(self) -> None:
        assert set(GATEKEEPER_IDS) == {"cadence", "health_criteria", "ownership"}
        foundation = {cp.id for cp in MLG_PHASES[0].checkpoints}
        assert set(GATEKEEPER_IDS) <= foundation


class TestMaturityTier:
    """Inclusive lower bounds evaluated high to low."""

    @pytest.mark.parametrize(
        ("score", "label", "tier"),
        [
            (20, "Mature", "BLUE"),
            (16, "Mature", "BLUE"),
            (15.5, "Adequate", "GREEN"),
            (11, "Adequate", "GREEN"),
            (10.5, "Developing", "AMBER"),
            (6, "Developing", "AMBER"),
            (5.5, "Deficient", "RED"),
            (0, "Deficient", "RED"),
        ],
    )
    def test_boundaries(self, score: float, label: str, tier: str) -> None:
        result = get_maturity_tier(score)
        assert (result.label, result.tier) == (label, tier)


class TestAutoDerivation:
    """Phase-1 defaults come from the object; explicit answers win."""

    def test_derived_from_attributes(self) -> None:
        obj = TrackedObject(review_cadence="Quarterly", owner="Dana", description="All laptops")
        assert derive_answers(obj) == {"cadence": "yes", "ownership": "yes", "scope": "yes"}

    def test_blank_attributes_derive_nothing(self) -> None:
        obj = TrackedObject(review_cadence="", owner="  ", description="")
        assert derive_answers(obj) == {}

    def test_no_object(self) -> None:
        assert derive_answers(None) == {}

    def test_explicit_overrides_derived(self) -> None:
        merged = merge_answers({"cadence": "yes", "scope": "yes"}, {"cadence": "no"})
        assert merged == {"cadence": "no", "scope": "yes"}

    def test_auto_derived_reported(self) -> None:
        obj = TrackedObject(owner="Dana", description="All laptops")
        result = compute_mlg_score({"ownership": "weak"}, obj)
        assert result.auto_derived == ["cadence", "scope"]
        assert result.answers["ownership"] == "weak"
        assert result.score == 2.5


class TestGating:
    """Phases 2-4 unlock only when all gatekeepers are yes or weak."""

    PASSING = {"cadence": "yes", "health_criteria": "weak", "ownership": "yes"}

    def test_passes(self) -> None:
        assert foundation_passed(self.PASSING) is True

    @pytest.mark.parametrize("gatekeeper", ["cadence", "health_criteria", "ownership"])
    def test_any_no_fails(self, gatekeeper: str) -> None:
        answers = {**self.PASSING, gatekeeper: "no"}
        assert foundation_passed(answers) is False

    def test_unanswered_fails(self) -> None:
        assert foundation_passed({"cadence": "yes", "ownership": "yes"}) is False

    def test_locked_phases(self) -> None:
        result = compute_mlg_score({"cadence": "yes"})
        assert result.foundation_passed is False
        assert result.locked_phases == ["action", "controls", "maturity"]

    def test_locked_phases_still_score(self) -> None:
        result = compute_mlg_score({"monitoring": "yes", "kpis": "weak"})
        assert result.phase_scores["maturity"] == 1.5
        assert result.score == 1.5

    def test_unlocked(self) -> None:
        assert compute_mlg_score(self.PASSING).locked_phases == []


class TestScore:
    """Score sums points across phases and stays within 0..20."""

    def test_all_yes(self) -> None:
        result = compute_mlg_score({cp: "yes" for cp in CHECKPOINT_IDS})
        assert result.score == 20
        assert result.tier.label == "Mature"

    def test_all_weak(self) -> None:
        assert compute_mlg_score({cp: "weak" for cp in CHECKPOINT_IDS}).score == 10

    def test_missing_assessment_without_object(self) -> None:
        result = compute_mlg_score(None)
        assert result.score == 0
        assert result.tier.label == "Deficient"

    def test_unknown_answers_score_zero(self) -> None:
        assert compute_mlg_score({"cadence": "maybe"}).score == 0


class TestSetMlgAssessment:
    """Recording answers validates checkpoint ids and answer values."""

    def test_records(self, snapshot_with_object: Snapshot) -> None:
        snap = set_mlg_assessment(snapshot_with_object, "obj-mfa", {"cadence": "yes"})
        assert snap.mlg_assessments == {"obj-mfa": {"cadence": "yes"}}
        assert snapshot_with_object.mlg_assessments == {}

    def test_replace_and_merge(self, snapshot_with_object: Snapshot) -> None:
        snap = set_mlg_assessment(snapshot_with_object, "obj-mfa", {"cadence": "yes"})
        replaced = set_mlg_assessment(snap, "obj-mfa", {"scope": "weak"})
        merged = set_mlg_assessment(snap, "obj-mfa", {"scope": "weak"}, merge=True)
        assert replaced.mlg_assessments["obj-mfa"] == {"scope": "weak"}
        assert merged.mlg_assessments["obj-mfa"] == {"cadence": "yes", "scope": "weak"}

    def test_rejects_unknown_checkpoint(self, snapshot_with_object: Snapshot) -> None:
        with pytest.raises(FieldValidationError) as exc:
            set_mlg_assessment(snapshot_with_object, "obj-mfa", {"vibes": "yes", "scope": "sure"})
        assert set(exc.value.errors) == {"vibes", "scope"}

    def test_rejects_unknown_object(self, snapshot_with_object: Snapshot) -> None:
        with pytest.raises(UnknownEntityError):
            set_mlg_assessment(snapshot_with_object, "nope", {"cadence": "yes"})
