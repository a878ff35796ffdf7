"""
Navigation tokens.
"""
from enum import Enum
from typing import Optional


class Route(str, Enum):
    """The ten portal screens."""
    PROGRESS = "progress"
    APPOINTMENT = "appointment"
    SHIFT = "shift"
    I9 = "i9"
    DOCS = "docs"
    FIRSTDAY = "firstday"
    CONTACTS = "contacts"
    NOTIFICATIONS = "notifications"
    PROFILE = "profile"
    HELP = "help"


DEFAULT_ROUTE = Route.PROGRESS

NAV_LABELS = {
    Route.PROGRESS: "📊 Progress",
    Route.APPOINTMENT: "📅 Appointment",
    Route.SHIFT: "🕒 Shift",
    Route.I9: "🪪 I-9",
    Route.DOCS: "📄 Documents",
    Route.FIRSTDAY: "🚀 First Day",
    Route.CONTACTS: "📞 Contacts",
    Route.NOTIFICATIONS: "🔔 Inbox",
    Route.PROFILE: "👤 Profile",
    Route.HELP: "❓ Help",
}

# Screen where a pending checklist step is completed
STEP_ROUTES = {
    "application": Route.PROGRESS,
    "shift_selection": Route.SHIFT,
    "docs": Route.DOCS,
    "first_day": Route.FIRSTDAY,
}


def resolve_route(token: Optional[str]) -> Optional[Route]:
    """Exact match of a token against the known routes; no token means the default."""
    if token is None:
        return DEFAULT_ROUTE
    cleaned = str(token).replace("#", "").strip().lower()
    if not cleaned:
        return DEFAULT_ROUTE
    try:
        return Route(cleaned)
    except ValueError:
        return None
