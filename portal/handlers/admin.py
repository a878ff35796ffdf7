"""
Handler for the administrator surface: employee lookup, appointment edits
and the employee ID allow-list.
"""
from aiogram import Router, F, html
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command, CommandObject
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from portal.database import get_session
from portal.keyboards.inline import (
    CALLBACK_ADMIN_CLEAR_APPOINTMENT,
    CALLBACK_ADMIN_EDIT_APPOINTMENT,
    get_cancel_keyboard,
    get_employee_card_keyboard,
)
from portal.middlewares.access import AdminAccessMiddleware
from portal.schemas.record import Appointment
from portal.services.allowlist_service import AllowListService
from portal.services.record_store import RecordStore
from portal.services.support_service import SupportService
from portal.states.portal import AppointmentStates
from portal.utils.date_utils import format_datetime
from portal.utils.formatting import format_employee_card, normalize_employee_id
from portal.logger import get_logger

logger = get_logger(__name__)

router = Router()
router.message.middleware(AdminAccessMiddleware())
router.callback_query.middleware(AdminAccessMiddleware())

TARGET_UID_KEY = "admin_target_uid"
TARGET_EMPLOYEE_KEY = "admin_target_employee_id"
DRAFT_KEY = "admin_appointment_draft"

# Answer that leaves an appointment field empty
SKIP_ANSWER = "-"

NO_TARGET_TEXT = "❌ Load an employee first with /find &lt;employee id&gt;."


# --- Helper Functions ---

async def save_appointment(state: FSMContext, appointment: Appointment):
    """Patch the loaded employee's appointment and reload it."""
    data = await state.get_data()
    user_id = data.get(TARGET_UID_KEY)
    employee_id = data.get(TARGET_EMPLOYEE_KEY, "")

    if not user_id:
        return None, employee_id

    async with get_session() as session:
        store = RecordStore(session)
        await store.patch(user_id, {"appointment": appointment.model_dump(by_alias=True)})
        record = await store.fetch(user_id)

    logger.info(
        "Appointment updated",
        user_id=user_id,
        employee_id=employee_id,
        scheduled=appointment.is_scheduled,
    )
    return record, employee_id


def _answer_value(message: Message) -> str:
    text = (message.text or "").strip()
    return "" if text == SKIP_ANSWER else text


# --- Employee Lookup ---

@router.message(Command("find"))
async def cmd_find(message: Message, command: CommandObject, state: FSMContext):
    """Load an employee by employee ID."""
    employee_id = normalize_employee_id(command.args)

    if not employee_id:
        await message.answer(
            "❌ Enter an employee ID.\n"
            "Example: /find SP023"
        )
        return

    async with get_session() as session:
        found = await RecordStore(session).find_by_employee_id(employee_id)

    if not found:
        await message.answer(f"❌ Employee {html.quote(employee_id)} not found.")
        return

    user_id, record = found
    await state.update_data({
        TARGET_UID_KEY: user_id,
        TARGET_EMPLOYEE_KEY: employee_id,
    })

    await message.answer(
        format_employee_card(employee_id, record),
        reply_markup=get_employee_card_keyboard(),
    )
    logger.info("Employee loaded", employee_id=employee_id, admin_id=message.from_user.id)


# --- Appointment Editor ---

@router.callback_query(F.data == CALLBACK_ADMIN_EDIT_APPOINTMENT)
async def start_appointment_edit(callback: CallbackQuery, state: FSMContext):
    """Ask for the appointment fields one by one."""
    data = await state.get_data()
    if not data.get(TARGET_UID_KEY):
        await callback.answer("Load an employee first with /find.", show_alert=True)
        return

    await state.update_data({DRAFT_KEY: {}})
    await state.set_state(AppointmentStates.date)
    await callback.message.answer(
        f"📅 Appointment date for {html.quote(data.get(TARGET_EMPLOYEE_KEY, ''))} (YYYY-MM-DD, or {SKIP_ANSWER} to leave empty):",
        reply_markup=get_cancel_keyboard(),
    )
    await callback.answer()


@router.message(AppointmentStates.date)
async def process_date(message: Message, state: FSMContext):
    data = await state.get_data()
    draft = {**data.get(DRAFT_KEY, {}), "date": _answer_value(message)}
    await state.update_data({DRAFT_KEY: draft})
    await state.set_state(AppointmentStates.time)
    await message.answer(f"🕒 Time (for example 8:00 AM, or {SKIP_ANSWER}):", reply_markup=get_cancel_keyboard())


@router.message(AppointmentStates.time)
async def process_time(message: Message, state: FSMContext):
    data = await state.get_data()
    draft = {**data.get(DRAFT_KEY, {}), "time": _answer_value(message)}
    await state.update_data({DRAFT_KEY: draft})
    await state.set_state(AppointmentStates.address)
    await message.answer(f"📍 Address (or {SKIP_ANSWER}):", reply_markup=get_cancel_keyboard())


@router.message(AppointmentStates.address)
async def process_address(message: Message, state: FSMContext):
    data = await state.get_data()
    draft = {**data.get(DRAFT_KEY, {}), "address": _answer_value(message)}
    await state.update_data({DRAFT_KEY: draft})
    await state.set_state(AppointmentStates.notes)
    await message.answer(f"📝 Notes for the employee (or {SKIP_ANSWER}):", reply_markup=get_cancel_keyboard())


@router.message(AppointmentStates.notes)
async def process_notes(message: Message, state: FSMContext):
    """Last field: save the whole appointment."""
    data = await state.get_data()
    draft = {**data.get(DRAFT_KEY, {}), "notes": _answer_value(message)}
    await state.set_state(None)
    await state.update_data({DRAFT_KEY: {}})

    record, employee_id = await save_appointment(state, Appointment(**draft))
    if record is None:
        await message.answer(NO_TARGET_TEXT)
        return

    await message.answer(
        "✅ Appointment saved.\n\n" + format_employee_card(employee_id, record),
        reply_markup=get_employee_card_keyboard(),
    )


@router.callback_query(F.data == CALLBACK_ADMIN_CLEAR_APPOINTMENT)
async def clear_appointment(callback: CallbackQuery, state: FSMContext):
    """Reset the appointment to "not yet scheduled"."""
    record, employee_id = await save_appointment(state, Appointment())
    if record is None:
        await callback.answer("Load an employee first with /find.", show_alert=True)
        return

    try:
        await callback.message.edit_text(
            format_employee_card(employee_id, record),
            reply_markup=get_employee_card_keyboard(),
        )
    except TelegramBadRequest as e:
        logger.debug("Employee card not updated", employee_id=employee_id, error=str(e))
    await callback.answer("Appointment cleared.")


# --- Allow-list ---

@router.message(Command("allow"))
async def cmd_allow(message: Message, command: CommandObject):
    """Allow an employee ID to register."""
    employee_id = normalize_employee_id(command.args)
    if not employee_id:
        await message.answer("❌ Enter an employee ID.\nExample: /allow SP023")
        return

    async with get_session() as session:
        await AllowListService(session).allow(employee_id)

    await message.answer(f"✅ {html.quote(employee_id)} can now register.")


@router.message(Command("revoke"))
async def cmd_revoke(message: Message, command: CommandObject):
    """Remove an employee ID from the allow-list."""
    employee_id = normalize_employee_id(command.args)
    if not employee_id:
        await message.answer("❌ Enter an employee ID.\nExample: /revoke SP023")
        return

    async with get_session() as session:
        removed = await AllowListService(session).revoke(employee_id)

    if removed:
        await message.answer(f"🗑 {html.quote(employee_id)} removed from the allow-list.")
    else:
        await message.answer(f"ℹ️ {html.quote(employee_id)} was not on the allow-list.")


@router.message(Command("allowlist"))
async def cmd_allowlist(message: Message):
    """List allowed employee IDs."""
    async with get_session() as session:
        entries = await AllowListService(session).list_all()

    if not entries:
        await message.answer("📋 <b>Allowed employees</b>\n\nNo employee IDs yet.")
        return

    lines = [
        f"{'✅' if entry.active else '⏸'} <b>{html.quote(entry.employee_id)}</b> — added {format_datetime(entry.created_at)}"
        for entry in entries[:50]
    ]
    text = "📋 <b>Allowed employees</b>\n\n" + "\n".join(lines)
    if len(entries) > 50:
        text += f"\n\n…and {len(entries) - 50} more"
    await message.answer(text)


# --- Support Tickets ---

@router.message(Command("tickets"))
async def cmd_tickets(message: Message):
    """List open support tickets."""
    async with get_session() as session:
        tickets = await SupportService(session).list_open()

    if not tickets:
        await message.answer("📨 <b>Open tickets</b>\n\nNo open tickets.")
        return

    blocks = [
        f"#{ticket.id} <b>{html.quote(ticket.category)}</b> · "
        f"{html.quote(ticket.employee_id or ticket.user_id)} · {format_datetime(ticket.created_at)}\n"
        f"{html.quote(ticket.message[:300])}"
        for ticket in tickets
    ]
    await message.answer(
        "📨 <b>Open tickets</b>\n\n" + "\n\n".join(blocks) + "\n\nClose one with /close &lt;ticket id&gt;"
    )


@router.message(Command("close"))
async def cmd_close_ticket(message: Message, command: CommandObject):
    """Close a support ticket by number."""
    value = (command.args or "").strip().lstrip("#")
    if not value.isdigit():
        await message.answer("❌ Enter a ticket number.\nExample: /close 12")
        return

    async with get_session() as session:
        closed = await SupportService(session).close_ticket(int(value))

    if closed:
        await message.answer(f"✅ Ticket #{value} closed.")
    else:
        await message.answer(f"❌ Ticket #{value} not found.")
