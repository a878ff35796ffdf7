"""
Inline keyboards for the onboarding portal.
"""
from typing import Iterable, List, Optional
from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.utils.keyboard import InlineKeyboardBuilder
from portal.schemas.record import Notification, ShiftChoice
from portal.screens.routes import Route, NAV_LABELS
from portal.services.support_service import TICKET_CATEGORIES


# Callback data prefixes
CALLBACK_NAV = "nav:"
CALLBACK_SHIFT_PICK = "shift_pick:"
CALLBACK_SHIFT_CONFIRM = "shift_confirm"
CALLBACK_I9_ACK = "i9_ack"
CALLBACK_DOCS_TOGGLE = "docs_toggle"
CALLBACK_FIRSTDAY_READY = "firstday_ready"
CALLBACK_PROFILE_PHONE = "profile_phone"
CALLBACK_SUPPORT = "support"
CALLBACK_SUPPORT_CATEGORY = "support_cat:"
CALLBACK_NOOP = "noop"
CALLBACK_CANCEL = "cancel"
CALLBACK_ADMIN_EDIT_APPOINTMENT = "admin_appt_edit"
CALLBACK_ADMIN_CLEAR_APPOINTMENT = "admin_appt_clear"

SHIFT_LABELS = {
    ShiftChoice.EARLY: "🌅 Early (6:00 AM – 2:30 PM)",
    ShiftChoice.MID: "🌇 Mid (2:00 PM – 10:30 PM)",
    ShiftChoice.LATE: "🌙 Late (10:00 PM – 6:30 AM)",
}


def nav_callback(route: str) -> str:
    """Callback data that navigates to a route token."""
    return f"{CALLBACK_NAV}{route}"


def _navigation_rows(current: Route) -> List[List[InlineKeyboardButton]]:
    buttons = []
    for route in Route:
        label = NAV_LABELS[route]
        if route == current:
            label = f"• {label}"
        buttons.append(InlineKeyboardButton(text=label, callback_data=nav_callback(route.value)))
    return [buttons[i:i + 2] for i in range(0, len(buttons), 2)]


def _with_navigation(
    current: Route,
    action_rows: Optional[Iterable[List[InlineKeyboardButton]]] = None,
) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    for row in action_rows or []:
        builder.row(*row)
    for row in _navigation_rows(current):
        builder.row(*row)
    return builder.as_markup()


def get_navigation_keyboard(current: Route) -> InlineKeyboardMarkup:
    """Only the screen menu."""
    return _with_navigation(current)


def get_progress_keyboard(next_route: Optional[Route], next_label: str = "") -> InlineKeyboardMarkup:
    """Progress screen: jump to the next pending step."""
    rows = []
    if next_route is not None and next_route != Route.PROGRESS:
        rows.append([
            InlineKeyboardButton(
                text=f"▶️ Continue to {next_label}",
                callback_data=nav_callback(next_route.value),
            )
        ])
    return _with_navigation(Route.PROGRESS, rows)


def get_shift_keyboard(choice: ShiftChoice, confirmed: bool) -> InlineKeyboardMarkup:
    """Shift picker; confirm stays disabled until a shift is picked."""
    rows = []
    if not confirmed:
        for option, label in SHIFT_LABELS.items():
            prefix = "✅ " if option == choice else ""
            rows.append([
                InlineKeyboardButton(
                    text=f"{prefix}{label}",
                    callback_data=f"{CALLBACK_SHIFT_PICK}{option.value}",
                )
            ])
        if choice == ShiftChoice.NONE:
            rows.append([InlineKeyboardButton(text="🔒 Confirm shift", callback_data=CALLBACK_NOOP)])
        else:
            rows.append([InlineKeyboardButton(text="✅ Confirm shift", callback_data=CALLBACK_SHIFT_CONFIRM)])
    return _with_navigation(Route.SHIFT, rows)


def get_i9_keyboard(acknowledged: bool) -> InlineKeyboardMarkup:
    """I-9 readiness acknowledgement."""
    rows = []
    if not acknowledged:
        rows.append([
            InlineKeyboardButton(
                text="☑️ I will bring my I-9 documents",
                callback_data=CALLBACK_I9_ACK,
            )
        ])
    return _with_navigation(Route.I9, rows)


def get_docs_keyboard(done: bool) -> InlineKeyboardMarkup:
    """Onboarding documents checklist toggle."""
    text = "↩️ Mark documents as not done" if done else "✅ Mark documents as complete"
    return _with_navigation(
        Route.DOCS,
        [[InlineKeyboardButton(text=text, callback_data=CALLBACK_DOCS_TOGGLE)]],
    )


def get_firstday_keyboard(done: bool) -> InlineKeyboardMarkup:
    """First day readiness."""
    rows = []
    if not done:
        rows.append([
            InlineKeyboardButton(
                text="🚀 I'm ready for my first day",
                callback_data=CALLBACK_FIRSTDAY_READY,
            )
        ])
    return _with_navigation(Route.FIRSTDAY, rows)


def get_notifications_keyboard(notifications: List[Notification]) -> InlineKeyboardMarkup:
    """One button per inbox item that points at a screen."""
    rows = []
    for item in notifications:
        if item.route:
            rows.append([
                InlineKeyboardButton(
                    text=f"➡️ {item.action or 'View'}",
                    callback_data=nav_callback(item.route),
                )
            ])
    return _with_navigation(Route.NOTIFICATIONS, rows)


def get_profile_keyboard() -> InlineKeyboardMarkup:
    """Profile edits."""
    return _with_navigation(
        Route.PROFILE,
        [[InlineKeyboardButton(text="📱 Update phone", callback_data=CALLBACK_PROFILE_PHONE)]],
    )


def get_help_keyboard() -> InlineKeyboardMarkup:
    """Help screen: contact HR."""
    return _with_navigation(
        Route.HELP,
        [[InlineKeyboardButton(text="✉️ Contact HR", callback_data=CALLBACK_SUPPORT)]],
    )


def get_ticket_category_keyboard() -> InlineKeyboardMarkup:
    """Support ticket categories, one per row."""
    builder = InlineKeyboardBuilder()
    for index, category in enumerate(TICKET_CATEGORIES):
        builder.button(text=category, callback_data=f"{CALLBACK_SUPPORT_CATEGORY}{index}")
    builder.button(text="❌ Cancel", callback_data=CALLBACK_CANCEL)
    builder.adjust(1)
    return builder.as_markup()


def get_cancel_keyboard() -> InlineKeyboardMarkup:
    """Get cancel button for text prompts."""
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="❌ Cancel", callback_data=CALLBACK_CANCEL)]
        ]
    )


def get_employee_card_keyboard() -> InlineKeyboardMarkup:
    """Admin actions on a loaded employee."""
    builder = InlineKeyboardBuilder()
    builder.button(text="📅 Edit appointment", callback_data=CALLBACK_ADMIN_EDIT_APPOINTMENT)
    builder.button(text="🧹 Clear appointment", callback_data=CALLBACK_ADMIN_CLEAR_APPOINTMENT)
    builder.adjust(1)
    return builder.as_markup()
