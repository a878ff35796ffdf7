"""
Screen renderers.

Each renderer reads the context's record snapshot and returns a complete
Screen: a two-part header, the whole message body and its keyboard.
"""
from dataclasses import dataclass

from aiogram import html
from aiogram.types import InlineKeyboardMarkup

from portal.keyboards.inline import (
    SHIFT_LABELS,
    get_docs_keyboard,
    get_firstday_keyboard,
    get_help_keyboard,
    get_i9_keyboard,
    get_navigation_keyboard,
    get_notifications_keyboard,
    get_profile_keyboard,
    get_progress_keyboard,
    get_shift_keyboard,
)
from portal.schemas.record import ShiftChoice, StepId
from portal.screens.routes import Route, STEP_ROUTES
from portal.services.context import PortalContext
from portal.services.progression import progress_summary
from portal.utils.date_utils import format_datetime
from portal.utils.formatting import or_placeholder


@dataclass
class Screen:
    """A fully rendered screen."""
    title: str
    subtitle: str
    body: str
    keyboard: InlineKeyboardMarkup


def _line(label: str, value: str) -> str:
    return f"{html.bold(label)}: {html.quote(value)}"


def render_progress(ctx: PortalContext) -> Screen:
    steps = ctx.record.steps
    completed, total, pending = progress_summary(steps)

    if not steps:
        body = "Your onboarding checklist has not been set up yet."
        return Screen("Progress", "Your onboarding journey", body, get_progress_keyboard(None))

    lines = []
    for step in steps:
        if step.done:
            icon, state = "✅", "Completed"
        elif pending is not None and step.id == pending.id:
            icon, state = "🔓", "Action required"
        else:
            icon, state = "🔒", "Locked"
        lines.append(f"{icon} {html.quote(step.label or step.id)} — {state}")

    percent = round(completed * 100 / total)
    if pending is not None:
        summary = f"Next: {html.quote(pending.label)}. Complete all steps to finish onboarding."
    else:
        summary = "All steps completed! Ready for your first day."

    body = (
        f"{html.bold(f'{completed}/{total} steps')} ({percent}%)\n\n"
        + "\n".join(lines)
        + f"\n\n{summary}"
    )

    next_route = STEP_ROUTES.get(pending.id) if pending is not None else None
    keyboard = get_progress_keyboard(next_route, pending.label if pending is not None else "")
    return Screen("Progress", "Your onboarding journey", body, keyboard)


def render_appointment(ctx: PortalContext) -> Screen:
    appt = ctx.record.appointment
    pending = "To be confirmed by HR"

    body = "\n".join([
        _line("📅 Date", or_placeholder(appt.date, pending)),
        _line("🕒 Time", or_placeholder(appt.time, pending)),
        _line("📍 Address", or_placeholder(appt.address, pending)),
    ])
    if appt.notes:
        body += f"\n\n{html.bold('Special instructions')}\n{html.quote(appt.notes)}"
    if not appt.is_scheduled:
        body += "\n\nHR will schedule your first-day appointment and it will appear here."

    subtitle = "Scheduled" if appt.is_scheduled else "Not yet scheduled"
    return Screen("Appointment", subtitle, body, get_navigation_keyboard(Route.APPOINTMENT))


def render_shift(ctx: PortalContext) -> Screen:
    shift = ctx.record.shift

    if shift.confirmed:
        subtitle = "Confirmed"
        body = (
            f"Your shift is confirmed: {html.bold(SHIFT_LABELS[shift.choice])}\n\n"
            "Contact HR if you need to change it."
        )
    elif shift.choice == ShiftChoice.NONE:
        subtitle = "Choose your work schedule"
        body = "Pick the shift that works for you, then confirm it."
    else:
        subtitle = "Pending confirmation"
        body = (
            f"Selected: {html.bold(SHIFT_LABELS[shift.choice])}\n\n"
            "Confirm to lock in your shift, or pick another one."
        )

    return Screen("Shift Selection", subtitle, body, get_shift_keyboard(shift.choice, shift.confirmed))


def render_i9(ctx: PortalContext) -> Screen:
    acknowledged = ctx.record.i9.ack
    body = (
        "On your first day you must present original, unexpired documents for the I-9 form:\n"
        "• One document from List A (for example a U.S. passport), or\n"
        "• One document from List B (for example a driver's license) "
        "and one from List C (for example a Social Security card).\n\n"
        "Copies and photos are not accepted."
    )
    if acknowledged:
        body += f"\n\n{html.bold('✅ Acknowledged')}"
    subtitle = "Acknowledged" if acknowledged else "Employment eligibility documents"
    return Screen("I-9 Readiness", subtitle, body, get_i9_keyboard(acknowledged))


def render_docs(ctx: PortalContext) -> Screen:
    step = ctx.record.step(StepId.DOCS.value)
    done = bool(step and step.done)
    body = (
        "Complete and sign your onboarding documents:\n"
        "• Tax withholding form\n"
        "• Direct deposit authorization\n"
        "• Safety policy acknowledgement\n\n"
        f"Status: {html.bold('Complete' if done else 'Pending')}"
    )
    subtitle = "Complete" if done else "Paperwork before your first day"
    return Screen("Onboarding Documents", subtitle, body, get_docs_keyboard(done))


def render_firstday(ctx: PortalContext) -> Screen:
    record = ctx.record
    step = record.step(StepId.FIRST_DAY.value)
    done = bool(step and step.done)
    appt = record.appointment

    body = "\n".join([
        html.bold("Your first day"),
        _line("Date", or_placeholder(appt.date, "To be confirmed by HR")),
        _line("Time", or_placeholder(appt.time, "To be confirmed by HR")),
        _line("Where", or_placeholder(appt.address, "To be confirmed by HR")),
        "",
        html.bold("Bring with you"),
        "• Your I-9 documents",
        "• Safety footwear",
        "• Water and a lunch",
    ])
    if done:
        body += f"\n\n{html.bold('✅ You are ready for your first day!')}"
    subtitle = "Ready" if done else "Preparation checklist"
    return Screen("First Day", subtitle, body, get_firstday_keyboard(done))


def render_contacts(ctx: PortalContext) -> Screen:
    blocks = []
    for role, contact in ctx.record.contacts.roles():
        blocks.append("\n".join([
            html.bold(role),
            html.quote(or_placeholder(contact.name)),
            f"📞 {html.quote(or_placeholder(contact.phone))}",
            f"✉️ {html.quote(or_placeholder(contact.email))}",
        ]))
    return Screen("Contacts", "Who to reach out to", "\n\n".join(blocks), get_navigation_keyboard(Route.CONTACTS))


def render_notifications(ctx: PortalContext) -> Screen:
    notifications = ctx.record.notifications
    if not notifications:
        body = "📭 No notifications yet.\nCheck back for company updates."
    else:
        body = "\n\n".join(
            f"🔔 {html.bold(item.title or 'Update')}\n{html.quote(item.body)}"
            for item in notifications
        )
    return Screen("Notifications", "Inbox", body, get_notifications_keyboard(notifications))


def render_profile(ctx: PortalContext) -> Screen:
    record = ctx.record
    lines = [
        _line("Name", or_placeholder(record.full_name)),
        _line("Employee ID", or_placeholder(record.employee_id)),
        _line("Phone", or_placeholder(record.phone)),
        _line("Email", or_placeholder(record.email)),
        _line("Status", or_placeholder(record.status)),
        _line("Last sign-in", format_datetime(record.last_login_at)),
    ]
    if ctx.identity is not None and ctx.identity.username:
        lines.insert(1, _line("Telegram", f"@{ctx.identity.username}"))
    return Screen("Profile", "Your details", "\n".join(lines), get_profile_keyboard())


def render_help(ctx: PortalContext) -> Screen:
    hr = ctx.record.contacts.hr
    body = (
        "Use the buttons below to move between screens. Every change you make "
        "is saved right away.\n\n"
        f"{html.bold('Commands')}\n"
        "/start — sign in or register\n"
        "/go &lt;screen&gt; — open a screen (progress, shift, docs, ...)\n"
        "/cancel — cancel the current prompt\n\n"
        f"{html.bold('Need help?')}\n"
        f"{html.quote(or_placeholder(hr.name))}: "
        f"{html.quote(or_placeholder(hr.phone))} / {html.quote(or_placeholder(hr.email))}"
        "\n\nFor non-urgent requests tap ✉️ Contact HR to send a support ticket. "
        "HR responds within 24 business hours.\n\n"
        "🚨 For immediate danger or a medical emergency call 911 first, "
        "then notify your supervisor and HR."
    )
    return Screen("Help", "Questions about onboarding", body, get_help_keyboard())
