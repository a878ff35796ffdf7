"""
Onboarding progression: stage ordering and step-driven stage advancement.

Works on an in-memory record snapshot only. Callers re-derive after every
reload; nothing here is persisted or enforced centrally.
"""
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple

from portal.schemas.record import OnboardingRecord, Stage, Step, StepId


STAGE_ORDER: Tuple[Stage, ...] = (
    Stage.APPLICATION,
    Stage.SHIFT_SELECTION,
    Stage.ONBOARDING,
    Stage.START_WORKING,
)

STEP_ORDER: Tuple[StepId, ...] = (
    StepId.APPLICATION,
    StepId.SHIFT_SELECTION,
    StepId.DOCS,
    StepId.FIRST_DAY,
)

# Stage a user is in while the step is their first pending one
STEP_STAGE = {
    StepId.APPLICATION: Stage.APPLICATION,
    StepId.SHIFT_SELECTION: Stage.SHIFT_SELECTION,
    StepId.DOCS: Stage.ONBOARDING,
    StepId.FIRST_DAY: Stage.START_WORKING,
}


class StageState(str, Enum):
    """Visual state of a stage in the stage indicator."""
    DONE = "done"
    ACTIVE = "active"
    UPCOMING = "upcoming"


def stage_index(stage: Any) -> int:
    """Zero-based position of a stage; anything unknown counts as the first stage."""
    if isinstance(stage, Stage):
        return STAGE_ORDER.index(stage)
    if not isinstance(stage, str):
        return 0
    for index, candidate in enumerate(STAGE_ORDER):
        if candidate.value == stage:
            return index
    return 0


def _done_flags(steps: Any) -> Optional[dict]:
    if not isinstance(steps, (list, tuple)) or not steps:
        return None
    flags = {}
    for step in steps:
        if isinstance(step, Step):
            flags[step.id] = step.done
        elif isinstance(step, dict) and isinstance(step.get("id"), str):
            flags[step["id"]] = bool(step.get("done"))
        else:
            return None
    return flags


def next_stage(steps: Any) -> Stage:
    """
    Stage implied by the first incomplete canonical step.

    Canonical steps missing from the list count as incomplete. All steps
    done means START_WORKING; an empty or malformed list means APPLICATION.
    """
    flags = _done_flags(steps)
    if flags is None:
        return Stage.APPLICATION
    for step_id in STEP_ORDER:
        if not flags.get(step_id.value, False):
            return STEP_STAGE[step_id]
    return Stage.START_WORKING


def classify_stages(record: OnboardingRecord) -> List[Tuple[Stage, StageState]]:
    """Done/active/upcoming for each stage, relative to the record's stored stage."""
    if not record.steps:
        return [(stage, StageState.UPCOMING) for stage in STAGE_ORDER]

    current = stage_index(record.stage)
    result = []
    for index, stage in enumerate(STAGE_ORDER):
        if index < current:
            state = StageState.DONE
        elif index == current:
            state = StageState.ACTIVE
        else:
            state = StageState.UPCOMING
        result.append((stage, state))
    return result


def mark_step(steps: Iterable[Step], step_id: str, done: bool) -> List[Step]:
    """Copy of the step list with one step's done flag replaced."""
    return [
        step.model_copy(update={"done": done}) if step.id == step_id else step.model_copy()
        for step in steps
    ]


def progress_summary(steps: List[Step]) -> Tuple[int, int, Optional[Step]]:
    """(completed, total, first pending step in display order)."""
    completed = sum(1 for step in steps if step.done)
    pending = next((step for step in steps if not step.done), None)
    return completed, len(steps), pending


def steps_patch(steps: Iterable[Step]) -> List[dict]:
    """Steps serialized for a record patch."""
    return [step.model_dump(by_alias=True, mode="json") for step in steps]
