"""
Text helpers shared by screens and admin handlers.
"""
import re
from typing import Optional
from aiogram import html
from portal.schemas.record import OnboardingRecord


def normalize_employee_id(value: Optional[str]) -> str:
    """Upper-case an employee ID and drop all whitespace."""
    if not value:
        return ""
    return re.sub(r"\s+", "", str(value)).upper()


def employee_number(employee_id: str) -> Optional[int]:
    """Numeric tail of an employee ID (``SP023`` -> 23), if any."""
    match = re.search(r"(\d{1,6})$", employee_id or "")
    if not match:
        return None
    return int(match.group(1))


def or_placeholder(value: Optional[str], placeholder: str = "—") -> str:
    """Value for display, or a placeholder when empty."""
    if value is None or value == "":
        return placeholder
    return value


def format_employee_card(employee_id: str, record: OnboardingRecord) -> str:
    """Admin view of an employee's record."""
    appt = record.appointment
    shift = record.shift.choice.value or "not selected"
    if record.shift.confirmed:
        shift += " (confirmed)"

    steps = "\n".join(
        f"{'✅' if step.done else '⏳'} {html.quote(step.label or step.id)}"
        for step in record.steps
    ) or "No steps"

    return (
        f"👤 <b>{html.quote(or_placeholder(record.full_name))}</b> — {html.quote(employee_id)}\n"
        f"<b>Stage:</b> {html.quote(record.stage)}\n"
        f"<b>Shift:</b> {html.quote(shift)}\n\n"
        f"<b>📅 Appointment</b>\n"
        f"Date: {html.quote(or_placeholder(appt.date))}\n"
        f"Time: {html.quote(or_placeholder(appt.time))}\n"
        f"Address: {html.quote(or_placeholder(appt.address))}\n"
        f"Notes: {html.quote(or_placeholder(appt.notes))}\n\n"
        f"<b>📋 Steps</b>\n{steps}"
    )
