"""
Handlers for portal screens: navigation and screen controls.
"""
from typing import Callable, Optional

from aiogram import Router, F, html
from aiogram.exceptions import TelegramBadRequest
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from portal.exceptions import PreviewModeError
from portal.keyboards.inline import (
    CALLBACK_CANCEL,
    CALLBACK_DOCS_TOGGLE,
    CALLBACK_FIRSTDAY_READY,
    CALLBACK_I9_ACK,
    CALLBACK_NAV,
    CALLBACK_NOOP,
    CALLBACK_PROFILE_PHONE,
    CALLBACK_SHIFT_CONFIRM,
    CALLBACK_SHIFT_PICK,
    CALLBACK_SUPPORT,
    CALLBACK_SUPPORT_CATEGORY,
    get_cancel_keyboard,
    get_ticket_category_keyboard,
)
from portal.schemas.identity import Identity
from portal.schemas.record import OnboardingRecord
from portal.screens import actions
from portal.screens.dispatcher import compose, dispatch
from portal.screens.routes import Route, DEFAULT_ROUTE
from portal.services.context import TICKET_PREVIEW_TEXT, PortalContext
from portal.services.support_service import category_from_index
from portal.states.portal import ProfileStates, SupportStates
from portal.logger import get_logger

logger = get_logger(__name__)

router = Router()

ROUTE_KEY = "route"
TICKET_CATEGORY_KEY = "ticket_category"

PatchBuilder = Callable[[OnboardingRecord], Optional[dict]]


# --- Helper Functions ---

async def load_context(identity: Optional[Identity], state: FSMContext) -> PortalContext:
    """Context for the current user, positioned on their last route."""
    data = await state.get_data()
    ctx = PortalContext(identity, route=data.get(ROUTE_KEY, DEFAULT_ROUTE.value))
    await ctx.load()
    return ctx


async def send_screen(message: Message, ctx: PortalContext, state: FSMContext, token: Optional[str] = None) -> None:
    """Render a route as a new message."""
    screen = dispatch(token if token is not None else ctx.route, ctx)
    await state.update_data({ROUTE_KEY: ctx.route})
    await message.answer(compose(screen, ctx.record), reply_markup=screen.keyboard)


async def refresh_screen(callback: CallbackQuery, ctx: PortalContext, state: FSMContext, token: Optional[str] = None) -> None:
    """Render a route in place of the message the button belongs to."""
    screen = dispatch(token if token is not None else ctx.route, ctx)
    await state.update_data({ROUTE_KEY: ctx.route})
    try:
        await callback.message.edit_text(
            compose(screen, ctx.record),
            reply_markup=screen.keyboard,
        )
    except TelegramBadRequest as e:
        # Same text and keyboard as before
        logger.debug("Screen not updated", route=ctx.route, error=str(e))


async def apply_action(
    callback: CallbackQuery,
    state: FSMContext,
    identity: Optional[Identity],
    route: Route,
    build_patch: PatchBuilder,
    done_text: str,
    noop_text: str = "Nothing to change.",
) -> None:
    """Build a patch from the current record, save it, reload and re-render the action's screen."""
    ctx = await load_context(identity, state)
    patch = build_patch(ctx.record)

    if patch is None:
        await callback.answer(noop_text)
        return

    try:
        await ctx.patch_and_reload(patch)
    except PreviewModeError as e:
        await callback.answer(str(e), show_alert=True)
        return

    await refresh_screen(callback, ctx, state, route.value)
    await callback.answer(done_text)
    logger.info(
        "Screen action saved",
        user_id=identity.uid,
        route=ctx.route,
        fields=sorted(patch.keys()),
    )


# --- Navigation ---

@router.callback_query(F.data.startswith(CALLBACK_NAV))
async def navigate(callback: CallbackQuery, state: FSMContext, identity: Optional[Identity] = None):
    """Switch to the screen named in the button."""
    token = callback.data[len(CALLBACK_NAV):]
    ctx = await load_context(identity, state)
    await refresh_screen(callback, ctx, state, token)
    await callback.answer()


@router.callback_query(F.data == CALLBACK_NOOP)
async def disabled_control(callback: CallbackQuery):
    """Disabled buttons, such as confirming a shift before picking one."""
    await callback.answer("Pick a shift first.")


# --- Shift Selection ---

@router.callback_query(F.data.startswith(CALLBACK_SHIFT_PICK))
async def pick_shift(callback: CallbackQuery, state: FSMContext, identity: Optional[Identity] = None):
    """Select a shift (unconfirmed)."""
    choice = callback.data[len(CALLBACK_SHIFT_PICK):]
    await apply_action(
        callback,
        state,
        identity,
        Route.SHIFT,
        lambda record: actions.choose_shift(record, choice),
        done_text="Shift selected. Confirm to lock it in.",
    )


@router.callback_query(F.data == CALLBACK_SHIFT_CONFIRM)
async def confirm_shift(callback: CallbackQuery, state: FSMContext, identity: Optional[Identity] = None):
    """Confirm the selected shift."""
    await apply_action(
        callback,
        state,
        identity,
        Route.SHIFT,
        actions.confirm_shift,
        done_text="✅ Shift confirmed!",
        noop_text="Pick a shift first.",
    )


# --- Checklist Screens ---

@router.callback_query(F.data == CALLBACK_I9_ACK)
async def acknowledge_i9(callback: CallbackQuery, state: FSMContext, identity: Optional[Identity] = None):
    await apply_action(
        callback,
        state,
        identity,
        Route.I9,
        actions.acknowledge_i9,
        done_text="I-9 acknowledged.",
    )


@router.callback_query(F.data == CALLBACK_DOCS_TOGGLE)
async def toggle_docs(callback: CallbackQuery, state: FSMContext, identity: Optional[Identity] = None):
    await apply_action(
        callback,
        state,
        identity,
        Route.DOCS,
        actions.toggle_docs,
        done_text="Documents status updated.",
    )


@router.callback_query(F.data == CALLBACK_FIRSTDAY_READY)
async def first_day_ready(callback: CallbackQuery, state: FSMContext, identity: Optional[Identity] = None):
    await apply_action(
        callback,
        state,
        identity,
        Route.FIRSTDAY,
        actions.mark_first_day_ready,
        done_text="🎉 Congratulations! Onboarding complete.",
    )


# --- Profile ---

@router.callback_query(F.data == CALLBACK_PROFILE_PHONE)
async def ask_phone(callback: CallbackQuery, state: FSMContext, identity: Optional[Identity] = None):
    """Prompt for a new phone number."""
    if identity is None:
        await callback.answer(str(PreviewModeError()), show_alert=True)
        return

    await state.set_state(ProfileStates.phone)
    await callback.message.answer(
        "📱 Send your phone number:",
        reply_markup=get_cancel_keyboard(),
    )
    await callback.answer()


@router.message(ProfileStates.phone)
async def process_phone(message: Message, state: FSMContext, identity: Optional[Identity] = None):
    """Save the phone number and show the profile again."""
    ctx = await load_context(identity, state)
    patch = actions.update_phone(ctx.record, message.text or "")

    if patch is None:
        await message.answer("❌ Phone number cannot be empty. Send your phone number:")
        return

    try:
        await ctx.patch_and_reload(patch)
    except PreviewModeError as e:
        await state.set_state(None)
        await message.answer(str(e))
        return

    await state.set_state(None)
    await send_screen(message, ctx, state, Route.PROFILE.value)


# --- Support Tickets ---

@router.callback_query(F.data == CALLBACK_SUPPORT)
async def ask_ticket_category(callback: CallbackQuery, state: FSMContext, identity: Optional[Identity] = None):
    """Start a support ticket: pick a category."""
    ctx = await load_context(identity, state)
    if ctx.is_preview:
        await callback.answer(TICKET_PREVIEW_TEXT, show_alert=True)
        return

    await callback.message.answer(
        "✉️ <b>Contact HR</b>\n\nWhat is your question about?",
        reply_markup=get_ticket_category_keyboard(),
    )
    await callback.answer()


@router.callback_query(F.data.startswith(CALLBACK_SUPPORT_CATEGORY))
async def pick_ticket_category(callback: CallbackQuery, state: FSMContext):
    """Remember the category and ask for the message."""
    category = category_from_index(callback.data[len(CALLBACK_SUPPORT_CATEGORY):])

    await state.update_data({TICKET_CATEGORY_KEY: category})
    await state.set_state(SupportStates.message)
    await callback.message.edit_text(
        f"✉️ <b>{html.quote(category)}</b>\n\nDescribe your question or concern:",
        reply_markup=get_cancel_keyboard(),
    )
    await callback.answer()


@router.message(SupportStates.message)
async def process_ticket_message(message: Message, state: FSMContext, identity: Optional[Identity] = None):
    """Send the ticket to HR."""
    text = (message.text or "").strip()
    if not text:
        await message.answer("❌ Please enter a message.", reply_markup=get_cancel_keyboard())
        return

    data = await state.get_data()
    ctx = await load_context(identity, state)
    await state.set_state(None)

    try:
        ticket = await ctx.submit_ticket(data.get(TICKET_CATEGORY_KEY), text)
    except PreviewModeError as e:
        await message.answer(str(e))
        return

    await message.answer(
        f"✅ Ticket #{ticket.id} submitted! HR will respond within 24 hours.",
    )
    await send_screen(message, ctx, state, Route.HELP.value)


@router.callback_query(F.data == CALLBACK_CANCEL)
async def cancel_prompt(callback: CallbackQuery, state: FSMContext):
    """Leave any text prompt, keeping the current route."""
    await state.set_state(None)
    await callback.message.edit_text("❌ Cancelled.")
    await callback.answer()
