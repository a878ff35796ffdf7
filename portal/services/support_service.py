"""
Service layer for HR support tickets.
"""
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from portal.database.models import SupportTicket
from portal.services.record_store import utcnow
from portal.logger import get_logger

logger = get_logger(__name__)

TICKET_CATEGORIES = (
    "Payroll Question",
    "Benefits Enrollment",
    "Schedule Change",
    "Safety Concern",
    "Technical Issue",
    "Other",
)
DEFAULT_CATEGORY = "Other"

TICKET_STATUS_OPEN = "open"
TICKET_STATUS_CLOSED = "closed"


def ticket_category(value: Optional[str]) -> str:
    """Known category name, or the catch-all one."""
    return value if value in TICKET_CATEGORIES else DEFAULT_CATEGORY


def category_from_index(value: str) -> str:
    """Category for a keyboard position; anything out of range is the catch-all one."""
    if value.isdigit() and int(value) < len(TICKET_CATEGORIES):
        return TICKET_CATEGORIES[int(value)]
    return DEFAULT_CATEGORY


class SupportService:
    """Create and list support tickets."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_ticket(
        self,
        user_id: str,
        message: str,
        category: Optional[str] = None,
        employee_id: str = "",
    ) -> SupportTicket:
        """Store a new open ticket. The message must be non-empty."""
        message = (message or "").strip()
        if not message:
            raise ValueError("Ticket message is required")

        ticket = SupportTicket(
            user_id=user_id,
            employee_id=employee_id or None,
            category=ticket_category(category),
            message=message,
            status=TICKET_STATUS_OPEN,
            created_at=utcnow(),
        )
        self.session.add(ticket)
        await self.session.commit()
        await self.session.refresh(ticket)

        logger.info(
            "Support ticket created",
            ticket_id=ticket.id,
            user_id=user_id,
            category=ticket.category,
        )
        return ticket

    async def get_ticket(self, ticket_id: int) -> Optional[SupportTicket]:
        result = await self.session.execute(
            select(SupportTicket).where(SupportTicket.id == ticket_id)
        )
        return result.scalar_one_or_none()

    async def list_open(self, limit: int = 20) -> List[SupportTicket]:
        """Open tickets, oldest first."""
        result = await self.session.execute(
            select(SupportTicket)
            .where(SupportTicket.status == TICKET_STATUS_OPEN)
            .order_by(SupportTicket.created_at.asc(), SupportTicket.id.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def close_ticket(self, ticket_id: int) -> bool:
        """Mark a ticket closed. Returns False when it does not exist."""
        ticket = await self.get_ticket(ticket_id)
        if not ticket:
            return False

        ticket.status = TICKET_STATUS_CLOSED
        await self.session.commit()
        logger.info("Support ticket closed", ticket_id=ticket_id)
        return True
