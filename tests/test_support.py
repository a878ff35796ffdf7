"""Tests for HR support tickets."""

import asyncio

import pytest

from portal.exceptions import PreviewModeError
from portal.schemas.record import default_record
from portal.services.context import TICKET_PREVIEW_TEXT, PortalContext
from portal.services.record_store import RecordStore
from portal.services.support_service import (
    DEFAULT_CATEGORY,
    SupportService,
    category_from_index,
    ticket_category,
)


def run(coro):
    return asyncio.run(coro)


class TestCategories:
    def test_known_category(self):
        assert ticket_category("Schedule Change") == "Schedule Change"

    def test_unknown_category(self):
        assert ticket_category("Parking") == DEFAULT_CATEGORY
        assert ticket_category(None) == DEFAULT_CATEGORY

    def test_category_from_index(self):
        assert category_from_index("0") == "Payroll Question"
        assert category_from_index("99") == DEFAULT_CATEGORY
        assert category_from_index("x") == DEFAULT_CATEGORY


class TestSupportService:
    def test_create_and_list(self, database):
        async def scenario():
            async with database() as session_factory:
                async with session_factory() as session:
                    service = SupportService(session)
                    first = await service.create_ticket("1001", "  Where is my W-2?  ", category="Payroll Question", employee_id="SP023")
                    await service.create_ticket("1002", "Locker broken", category="Parking")
                    return first, await service.list_open()

        first, tickets = run(scenario())

        assert first.message == "Where is my W-2?"
        assert first.status == "open"
        assert first.employee_id == "SP023"
        assert [ticket.user_id for ticket in tickets] == ["1001", "1002"]
        assert tickets[1].category == DEFAULT_CATEGORY
        assert tickets[1].employee_id is None

    def test_empty_message_is_rejected(self, database):
        async def scenario():
            async with database() as session_factory:
                async with session_factory() as session:
                    service = SupportService(session)
                    with pytest.raises(ValueError):
                        await service.create_ticket("1001", "   ")
                    return await service.list_open()

        assert run(scenario()) == []

    def test_close_ticket(self, database):
        async def scenario():
            async with database() as session_factory:
                async with session_factory() as session:
                    service = SupportService(session)
                    ticket = await service.create_ticket("1001", "Question")
                    closed = await service.close_ticket(ticket.id)
                    missing = await service.close_ticket(999)
                    return closed, missing, await service.list_open()

        closed, missing, open_tickets = run(scenario())

        assert closed is True
        assert missing is False
        assert open_tickets == []


class TestSubmitTicket:
    def test_signed_in_employee(self, database, identity):
        async def scenario():
            async with database() as session_factory:
                async with session_factory() as session:
                    await RecordStore(session).create(identity.uid, default_record(employee_id="SP023"))
                ctx = PortalContext(identity, session_factory)
                await ctx.load()
                return await ctx.submit_ticket("Safety Concern", "Wet floor by dock 4")

        ticket = run(scenario())

        assert ticket.id is not None
        assert ticket.user_id == identity.uid
        assert ticket.employee_id == "SP023"
        assert ticket.category == "Safety Concern"

    def test_preview_is_refused(self):
        ctx = PortalContext(None)
        with pytest.raises(PreviewModeError, match="ticket not sent"):
            run(ctx.submit_ticket("Other", "Hello"))
        assert TICKET_PREVIEW_TEXT.startswith("Preview mode: ticket not sent.")
