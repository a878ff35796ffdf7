"""Tests for the bot handlers, driven with stub messages and callback queries."""

import asyncio
from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from aiogram.filters import CommandObject
from aiogram.fsm.context import FSMContext
from aiogram.fsm.storage.base import StorageKey
from aiogram.fsm.storage.memory import MemoryStorage

from portal.config import settings
from portal.exceptions import PreviewModeError
from portal.handlers import admin, commands, employee
from portal.schemas.record import Appointment, Shift, ShiftChoice, default_record
from portal.services import context
from portal.services.allowlist_service import AllowListService
from portal.services.context import TICKET_PREVIEW_TEXT
from portal.services.record_store import RecordStore
from portal.services.support_service import SupportService
from portal.states.portal import AppointmentStates, RegistrationStates, SupportStates


def run(coro):
    return asyncio.run(coro)


def make_state(user_id=1001):
    return FSMContext(
        storage=MemoryStorage(),
        key=StorageKey(bot_id=1, chat_id=user_id, user_id=user_id),
    )


def make_callback(data):
    return SimpleNamespace(
        data=data,
        answer=AsyncMock(),
        message=SimpleNamespace(answer=AsyncMock(), edit_text=AsyncMock()),
    )


def make_message(text, user_id=1001):
    return SimpleNamespace(
        text=text,
        answer=AsyncMock(),
        from_user=SimpleNamespace(id=user_id),
    )


def sent_text(mock):
    return mock.call_args.args[0]


@pytest.fixture
def portal_database(database, monkeypatch):
    """A fresh database wired into every module the handlers open sessions from."""

    @asynccontextmanager
    async def open_database():
        async with database() as session_factory:
            for module in (context, commands, admin):
                monkeypatch.setattr(module, "get_session", session_factory)
            yield session_factory

    return open_database


async def seed(session_factory, user_id, record):
    async with session_factory() as session:
        return await RecordStore(session).create(user_id, record)


async def fetch(session_factory, user_id):
    async with session_factory() as session:
        return await RecordStore(session).fetch(user_id)


class TestScreenActions:
    def test_confirm_shift_rerenders_with_fresh_record(self, portal_database, identity):
        async def scenario():
            async with portal_database() as session_factory:
                record = default_record()
                record.shift = Shift(choice=ShiftChoice.MID)
                await seed(session_factory, identity.uid, record)

                state = make_state()
                # The user moved on to another screen before tapping the older message
                await state.update_data({employee.ROUTE_KEY: "docs"})
                callback = make_callback("shift_confirm")

                await employee.confirm_shift(callback, state, identity)
                return callback, await state.get_data(), await fetch(session_factory, identity.uid)

        callback, data, record = run(scenario())

        text = sent_text(callback.message.edit_text)
        assert "Your shift is confirmed" in text
        assert "▶️ Onboarding" in text
        callback.answer.assert_awaited_once_with("✅ Shift confirmed!")
        assert data[employee.ROUTE_KEY] == "shift"
        assert record.shift.confirmed is True
        assert record.stage == "onboarding"

    def test_confirm_without_choice_skips_save(self, portal_database, identity):
        async def scenario():
            async with portal_database() as session_factory:
                created = await seed(session_factory, identity.uid, default_record())
                callback = make_callback("shift_confirm")

                await employee.confirm_shift(callback, make_state(), identity)
                return created, callback, await fetch(session_factory, identity.uid)

        created, callback, record = run(scenario())

        callback.answer.assert_awaited_once_with("Pick a shift first.")
        callback.message.edit_text.assert_not_awaited()
        assert record.updated_at == created.updated_at

    def test_preview_save_shows_alert(self):
        callback = make_callback("shift_pick:early")

        run(employee.pick_shift(callback, make_state(), None))

        callback.answer.assert_awaited_once_with(str(PreviewModeError()), show_alert=True)
        callback.message.edit_text.assert_not_awaited()

    def test_unknown_route_shows_progress(self):
        callback = make_callback("nav:bogus")
        state = make_state()

        run(employee.navigate(callback, state, None))

        assert "<b>Progress</b>" in sent_text(callback.message.edit_text)
        assert run(state.get_data())[employee.ROUTE_KEY] == "progress"


class TestSupportTickets:
    def test_ticket_is_stored(self, portal_database, identity):
        async def scenario():
            async with portal_database() as session_factory:
                await seed(session_factory, identity.uid, default_record(employee_id="SP023"))
                state = make_state()

                await employee.pick_ticket_category(make_callback("support_cat:2"), state)
                message = make_message("  Can I swap my Friday shift?  ")
                await employee.process_ticket_message(message, state, identity)

                async with session_factory() as session:
                    tickets = await SupportService(session).list_open()
                return message, await state.get_state(), tickets

        message, current_state, tickets = run(scenario())

        assert len(tickets) == 1
        assert tickets[0].category == "Schedule Change"
        assert tickets[0].message == "Can I swap my Friday shift?"
        assert tickets[0].employee_id == "SP023"
        assert tickets[0].user_id == identity.uid
        assert "submitted" in message.answer.await_args_list[0].args[0]
        assert current_state is None

    def test_empty_message_is_rejected(self, portal_database, identity):
        async def scenario():
            async with portal_database() as session_factory:
                await seed(session_factory, identity.uid, default_record())
                state = make_state()
                await state.set_state(SupportStates.message)
                message = make_message("   ")

                await employee.process_ticket_message(message, state, identity)

                async with session_factory() as session:
                    tickets = await SupportService(session).list_open()
                return message, await state.get_state(), tickets

        message, current_state, tickets = run(scenario())

        assert sent_text(message.answer) == "❌ Please enter a message."
        assert current_state == SupportStates.message.state
        assert tickets == []

    def test_preview_ticket_is_not_sent(self, portal_database, identity):
        async def scenario():
            async with portal_database() as session_factory:
                # Signed in but never registered: the demo record is shown
                state = make_state()
                await state.set_state(SupportStates.message)
                message = make_message("Hello HR")

                await employee.process_ticket_message(message, state, identity)

                async with session_factory() as session:
                    tickets = await SupportService(session).list_open()
                return message, tickets

        message, tickets = run(scenario())

        message.answer.assert_awaited_once_with(TICKET_PREVIEW_TEXT)
        assert tickets == []

    def test_contact_button_in_preview_alerts(self):
        callback = make_callback("support")

        run(employee.ask_ticket_category(callback, make_state(), None))

        callback.answer.assert_awaited_once_with(TICKET_PREVIEW_TEXT, show_alert=True)
        callback.message.answer.assert_not_awaited()


class TestAdminAppointment:
    def test_save_appointment_without_target_makes_no_write(self, monkeypatch):
        opened = []

        def no_session():
            opened.append(True)
            raise AssertionError("no session expected")

        monkeypatch.setattr(admin, "get_session", no_session)

        record, employee_id = run(admin.save_appointment(make_state(), Appointment(date="2026-11-02")))

        assert record is None
        assert employee_id == ""
        assert opened == []

    def test_clear_without_target_alerts(self, monkeypatch):
        monkeypatch.setattr(admin, "get_session", None)
        callback = make_callback("admin_appt_clear")

        run(admin.clear_appointment(callback, make_state()))

        callback.answer.assert_awaited_once_with("Load an employee first with /find.", show_alert=True)
        callback.message.edit_text.assert_not_awaited()

    def test_find_unknown_employee(self, portal_database):
        async def scenario():
            async with portal_database():
                state = make_state(42)
                message = make_message("/find SP999", user_id=42)
                await admin.cmd_find(message, CommandObject(command="find", args="SP999"), state)
                return message, await state.get_data()

        message, data = run(scenario())

        assert "not found" in sent_text(message.answer)
        assert admin.TARGET_UID_KEY not in data

    def test_edit_appointment_for_loaded_employee(self, portal_database):
        async def scenario():
            async with portal_database() as session_factory:
                await seed(session_factory, "2002", default_record(employee_id="SP024"))
                await seed(session_factory, "2003", default_record(employee_id="SP025"))
                state = make_state(42)

                await admin.cmd_find(make_message("/find", user_id=42), CommandObject(command="find", args="sp 024"), state)
                await admin.start_appointment_edit(make_callback("admin_appt_edit"), state)
                after_start = await state.get_state()
                await admin.process_date(make_message("2026-11-02", user_id=42), state)
                await admin.process_time(make_message("8:00 AM", user_id=42), state)
                await admin.process_address(make_message("-", user_id=42), state)
                last = make_message("Bring two forms of ID", user_id=42)
                await admin.process_notes(last, state)

                return (
                    after_start,
                    last,
                    await fetch(session_factory, "2002"),
                    await fetch(session_factory, "2003"),
                )

        after_start, last, target, other = run(scenario())

        assert after_start == AppointmentStates.date.state
        assert target.appointment.date == "2026-11-02"
        assert target.appointment.time == "8:00 AM"
        assert target.appointment.address == ""
        assert target.appointment.notes == "Bring two forms of ID"
        assert other.appointment.date == ""
        assert sent_text(last.answer).startswith("✅ Appointment saved.")


class TestRegistration:
    def test_unlisted_employee_id_is_rejected(self, portal_database, identity, monkeypatch):
        monkeypatch.setattr(settings, "AUTO_ALLOW_MAX", 0)

        async def scenario():
            async with portal_database() as session_factory:
                state = make_state()
                await state.set_state(RegistrationStates.employee_id)
                message = make_message("sp 999")

                await commands.process_employee_id(message, state, identity)
                return message, await state.get_state(), await fetch(session_factory, identity.uid)

        message, current_state, record = run(scenario())

        message.answer.assert_awaited_once_with("⛔ Invalid Employee ID. Contact HR.")
        assert current_state == RegistrationStates.employee_id.state
        assert record is None

    def test_allowed_employee_id_creates_record(self, portal_database, identity):
        async def scenario():
            async with portal_database() as session_factory:
                async with session_factory() as session:
                    await AllowListService(session).allow("SP023")
                state = make_state()
                await state.set_state(RegistrationStates.employee_id)
                message = make_message(" sp023 ")

                await commands.process_employee_id(message, state, identity)
                return message, await state.get_state(), await fetch(session_factory, identity.uid)

        message, current_state, record = run(scenario())

        assert record.employee_id == "SP023"
        assert record.full_name == "Jamie Rivera"
        assert current_state is None
        assert "<b>Progress</b>" in sent_text(message.answer)

    def test_start_asks_new_user_for_employee_id(self, portal_database, identity):
        async def scenario():
            async with portal_database():
                state = make_state()
                message = make_message("/start")
                await commands.cmd_start(message, state, identity)
                return message, await state.get_state()

        message, current_state = run(scenario())

        assert current_state == RegistrationStates.employee_id.state
        assert "Employee ID" in sent_text(message.answer)
