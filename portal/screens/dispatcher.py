"""
Route dispatch: navigation token -> screen.
"""
from typing import Callable, Dict, Optional

from aiogram import html

from portal.schemas.record import OnboardingRecord, Stage
from portal.screens import renderers
from portal.screens.renderers import Screen
from portal.screens.routes import DEFAULT_ROUTE, Route, resolve_route
from portal.services.context import PortalContext
from portal.services.progression import StageState, classify_stages
from portal.logger import get_logger

logger = get_logger(__name__)

Renderer = Callable[[PortalContext], Screen]

SCREENS: Dict[Route, Renderer] = {
    Route.PROGRESS: renderers.render_progress,
    Route.APPOINTMENT: renderers.render_appointment,
    Route.SHIFT: renderers.render_shift,
    Route.I9: renderers.render_i9,
    Route.DOCS: renderers.render_docs,
    Route.FIRSTDAY: renderers.render_firstday,
    Route.CONTACTS: renderers.render_contacts,
    Route.NOTIFICATIONS: renderers.render_notifications,
    Route.PROFILE: renderers.render_profile,
    Route.HELP: renderers.render_help,
}

STAGE_LABELS = {
    Stage.APPLICATION: "Application",
    Stage.SHIFT_SELECTION: "Shift Selection",
    Stage.ONBOARDING: "Onboarding",
    Stage.START_WORKING: "Start Working",
}

STATE_ICONS = {
    StageState.DONE: "✅",
    StageState.ACTIVE: "▶️",
    StageState.UPCOMING: "⏳",
}


def render_stagebar(record: OnboardingRecord) -> str:
    """One-line stage indicator."""
    return " › ".join(
        f"{STATE_ICONS[state]} {STAGE_LABELS[stage]}"
        for stage, state in classify_stages(record)
    )


def render_route(route: Route, ctx: PortalContext) -> Screen:
    """Render a known route against the context's current record."""
    ctx.route = route.value
    return SCREENS[route](ctx)


def dispatch(token: Optional[str], ctx: PortalContext) -> Screen:
    """
    Render the screen for a navigation token.
    Unknown tokens are redirected to the default route.
    """
    route = resolve_route(token)
    if route is None:
        logger.info("Unknown route, redirecting", token=token, redirect=DEFAULT_ROUTE.value)
        route = DEFAULT_ROUTE
    return render_route(route, ctx)


def compose(screen: Screen, record: OnboardingRecord) -> str:
    """Message text: stage indicator, header and body."""
    parts = [
        render_stagebar(record),
        "",
        f"{html.bold(html.quote(screen.title))}\n{html.italic(html.quote(screen.subtitle))}",
        "",
        screen.body,
    ]
    if record.preview:
        parts.append("\n👀 Preview mode: changes are not saved. Use /start to sign in.")
    return "\n".join(parts)
