"""
Patch builders for screen controls.

Each takes the current record snapshot and returns the partial document to
write, or None when the action does nothing. Screens that touch steps
decide for themselves whether to recompute the stage.
"""
from typing import Optional

from portal.schemas.record import OnboardingRecord, ShiftChoice, StepId
from portal.services.progression import mark_step, next_stage, steps_patch


def choose_shift(record: OnboardingRecord, choice: str) -> Optional[dict]:
    """Pick a shift. Picking always clears a previous confirmation."""
    try:
        option = ShiftChoice(choice)
    except ValueError:
        return None
    if option == ShiftChoice.NONE:
        return None
    return {"shift": {"choice": option.value, "confirmed": False}}


def confirm_shift(record: OnboardingRecord) -> Optional[dict]:
    """Confirm the picked shift, complete its step and advance the stage."""
    if record.shift.choice == ShiftChoice.NONE:
        return None

    steps = mark_step(record.steps, StepId.SHIFT_SELECTION.value, True)
    return {
        "shift": {"choice": record.shift.choice.value, "confirmed": True},
        "steps": steps_patch(steps),
        "stage": next_stage(steps).value,
    }


def acknowledge_i9(record: OnboardingRecord) -> Optional[dict]:
    if record.i9.ack:
        return None
    return {"i9": {"ack": True}}


def toggle_docs(record: OnboardingRecord) -> dict:
    """Flip the documents step and recompute the stage."""
    current = record.step(StepId.DOCS.value)
    steps = mark_step(record.steps, StepId.DOCS.value, not (current and current.done))
    return {
        "steps": steps_patch(steps),
        "stage": next_stage(steps).value,
    }


def mark_first_day_ready(record: OnboardingRecord) -> Optional[dict]:
    """
    Complete the first-day step.

    The stage is left as stored: this screen has never recomputed it, so
    ``stage`` may lag behind ``steps`` until another screen saves.
    """
    current = record.step(StepId.FIRST_DAY.value)
    if current is not None and current.done:
        return None
    steps = mark_step(record.steps, StepId.FIRST_DAY.value, True)
    return {"steps": steps_patch(steps), "status": "active"}


def update_phone(record: OnboardingRecord, phone: str) -> Optional[dict]:
    phone = (phone or "").strip()
    if not phone:
        return None
    return {"phone": phone}
