"""
Handler for general commands (/start, /go, /help, /cancel).
"""
from typing import Optional

from aiogram import Router
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import Message

from portal.database import get_session
from portal.handlers.employee import load_context, send_screen
from portal.keyboards.inline import get_cancel_keyboard
from portal.schemas.identity import Identity
from portal.schemas.record import default_record
from portal.screens.routes import DEFAULT_ROUTE, Route
from portal.services.allowlist_service import AllowListService
from portal.services.record_store import RecordStore
from portal.states.portal import RegistrationStates
from portal.utils.formatting import normalize_employee_id
from portal.logger import get_logger

logger = get_logger(__name__)

router = Router()


# --- Start / Registration ---

@router.message(CommandStart())
async def cmd_start(message: Message, state: FSMContext, identity: Optional[Identity] = None):
    """Sign in: show the portal, or ask for an employee ID on first visit."""
    await state.set_state(None)

    if identity is None:
        ctx = await load_context(None, state)
        await send_screen(message, ctx, state, DEFAULT_ROUTE.value)
        return

    async with get_session() as session:
        known = await RecordStore(session).touch_login(identity.uid)

    if known:
        logger.info("User signed in", user_id=identity.uid)
        ctx = await load_context(identity, state)
        await send_screen(message, ctx, state)
        return

    await state.set_state(RegistrationStates.employee_id)
    await message.answer(
        "👋 <b>Welcome to the Employee Portal!</b>\n\n"
        "Enter your Employee ID (example: SP023):",
        reply_markup=get_cancel_keyboard(),
    )


# --- Navigation Commands ---

@router.message(Command("go"))
async def cmd_go(message: Message, command: CommandObject, state: FSMContext, identity: Optional[Identity] = None):
    """Open a screen by name; unknown names land on progress."""
    ctx = await load_context(identity, state)
    await send_screen(message, ctx, state, command.args or DEFAULT_ROUTE.value)


@router.message(Command("help"))
async def cmd_help(message: Message, state: FSMContext, identity: Optional[Identity] = None, is_admin: bool = False):
    """Show the help screen, plus admin commands for admins."""
    ctx = await load_context(identity, state)
    await send_screen(message, ctx, state, Route.HELP.value)

    if is_admin:
        await message.answer(
            "🛠 <b>Admin commands</b>\n\n"
            "/find &lt;employee id&gt; — Load an employee and edit their appointment\n"
            "/allow &lt;employee id&gt; — Allow an employee ID to register\n"
            "/revoke &lt;employee id&gt; — Remove an employee ID from the allow-list\n"
            "/allowlist — List allowed employee IDs\n"
            "/tickets — List open support tickets\n"
            "/close &lt;ticket id&gt; — Close a support ticket"
        )


@router.message(Command("cancel"))
async def cmd_cancel(message: Message, state: FSMContext):
    """Cancel the current prompt."""
    if await state.get_state() is None:
        await message.answer("Nothing to cancel.")
        return

    await state.set_state(None)
    await message.answer("❌ Cancelled.")


# --- Registration Answers ---

@router.message(RegistrationStates.employee_id)
async def process_employee_id(message: Message, state: FSMContext, identity: Optional[Identity] = None):
    """Check the employee ID against the allow-list and create the record."""
    if identity is None:
        await state.set_state(None)
        return

    employee_id = normalize_employee_id(message.text)
    if not employee_id:
        await message.answer("❌ Employee ID required. Enter your Employee ID:")
        return

    async with get_session() as session:
        allowed = await AllowListService(session).is_allowed(employee_id)
        if allowed:
            await RecordStore(session).create(
                identity.uid,
                default_record(
                    full_name=identity.display_name,
                    employee_id=employee_id,
                ),
            )

    if not allowed:
        logger.info("Registration rejected", user_id=identity.uid, employee_id=employee_id)
        await message.answer("⛔ Invalid Employee ID. Contact HR.")
        return

    logger.info("User registered", user_id=identity.uid, employee_id=employee_id)
    await state.set_state(None)
    ctx = await load_context(identity, state)
    await send_screen(message, ctx, state, Route.PROGRESS.value)
