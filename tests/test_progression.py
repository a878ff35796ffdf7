"""Tests for stage ordering and step-driven stage advancement."""

import itertools

import pytest

from portal.schemas.record import OnboardingRecord, Stage, Step, canonical_steps
from portal.services.progression import (
    STAGE_ORDER,
    StageState,
    classify_stages,
    mark_step,
    next_stage,
    progress_summary,
    stage_index,
)


STEP_IDS = ["application", "shift_selection", "docs", "first_day"]
EXPECTED_STAGE = {
    "application": Stage.APPLICATION,
    "shift_selection": Stage.SHIFT_SELECTION,
    "docs": Stage.ONBOARDING,
    "first_day": Stage.START_WORKING,
}


def make_steps(flags):
    return [Step(id=step_id, label=step_id, done=done) for step_id, done in zip(STEP_IDS, flags)]


class TestStageIndex:
    def test_canonical_stages_are_strictly_increasing(self):
        indexes = [stage_index(stage.value) for stage in STAGE_ORDER]
        assert indexes == [0, 1, 2, 3]

    def test_accepts_enum_members(self):
        assert stage_index(Stage.ONBOARDING) == 2

    @pytest.mark.parametrize("value", ["", "shift_pending", "START_WORKING", "docs", None, 7, ["onboarding"]])
    def test_unknown_values_fail_soft_to_zero(self, value):
        assert stage_index(value) == 0


class TestNextStage:
    @pytest.mark.parametrize("flags", list(itertools.product([False, True], repeat=4)))
    def test_first_incomplete_step_decides(self, flags):
        steps = make_steps(flags)
        pending = [step_id for step_id, done in zip(STEP_IDS, flags) if not done]
        expected = EXPECTED_STAGE[pending[0]] if pending else Stage.START_WORKING

        assert next_stage(steps) == expected

    def test_uses_canonical_order_not_list_order(self):
        steps = list(reversed(make_steps([True, False, True, False])))
        assert next_stage(steps) == Stage.SHIFT_SELECTION

    def test_missing_canonical_step_counts_as_incomplete(self):
        steps = [Step(id="application", done=True), Step(id="shift_selection", done=True)]
        assert next_stage(steps) == Stage.ONBOARDING

    def test_accepts_plain_dicts(self):
        steps = [{"id": step_id, "done": True} for step_id in STEP_IDS]
        assert next_stage(steps) == Stage.START_WORKING

    @pytest.mark.parametrize("steps", [[], None, "steps", [1, 2], [{"done": True}]])
    def test_empty_or_malformed_is_first_stage(self, steps):
        assert next_stage(steps) == Stage.APPLICATION


class TestClassifyStages:
    def test_done_active_upcoming(self):
        record = OnboardingRecord(stage="onboarding", steps=canonical_steps())
        states = [state for _, state in classify_stages(record)]
        assert states == [StageState.DONE, StageState.DONE, StageState.ACTIVE, StageState.UPCOMING]

    def test_unknown_stage_is_first(self):
        record = OnboardingRecord(stage="shift_pending", steps=canonical_steps())
        states = [state for _, state in classify_stages(record)]
        assert states[0] == StageState.ACTIVE
        assert states[1:] == [StageState.UPCOMING] * 3

    def test_empty_steps_are_all_upcoming(self):
        record = OnboardingRecord(stage="start_working", steps=[])
        assert all(state == StageState.UPCOMING for _, state in classify_stages(record))

    def test_uses_stored_stage_even_when_steps_disagree(self):
        steps = mark_step(canonical_steps(), "first_day", True)
        record = OnboardingRecord(stage="shift_selection", steps=steps)
        assert dict(classify_stages(record))[Stage.SHIFT_SELECTION] == StageState.ACTIVE


class TestStepHelpers:
    def test_mark_step_copies(self):
        steps = canonical_steps()
        updated = mark_step(steps, "docs", True)

        assert updated[2].done is True
        assert steps[2].done is False

    def test_progress_summary(self):
        steps = mark_step(canonical_steps(), "shift_selection", True)
        completed, total, pending = progress_summary(steps)

        assert (completed, total) == (2, 4)
        assert pending.id == "docs"

    def test_progress_summary_all_done(self):
        steps = make_steps([True] * 4)
        assert progress_summary(steps) == (4, 4, None)
