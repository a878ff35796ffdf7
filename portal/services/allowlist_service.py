"""
Service layer for the employee ID allow-list.
"""
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from portal.config import settings
from portal.database.models import AllowedEmployee
from portal.services.record_store import utcnow
from portal.utils.formatting import employee_number
from portal.logger import get_logger

logger = get_logger(__name__)


class AllowListService:
    """Keyed CRUD over allowed employee IDs. IDs are expected to be normalized."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, employee_id: str) -> Optional[AllowedEmployee]:
        """Get an allow-list entry."""
        result = await self.session.execute(
            select(AllowedEmployee).where(AllowedEmployee.employee_id == employee_id)
        )
        return result.scalar_one_or_none()

    async def allow(self, employee_id: str) -> AllowedEmployee:
        """Create or merge an active entry; adding twice keeps one entry."""
        entry = await self.get(employee_id)

        if entry:
            entry.active = True
        else:
            entry = AllowedEmployee(
                employee_id=employee_id,
                active=True,
                created_at=utcnow(),
            )
            self.session.add(entry)

        await self.session.commit()
        logger.info("Employee allowed", employee_id=employee_id)
        return entry

    async def revoke(self, employee_id: str) -> bool:
        """Delete an entry. Returns False if there was nothing to delete."""
        entry = await self.get(employee_id)
        if not entry:
            return False

        await self.session.delete(entry)
        await self.session.commit()
        logger.info("Employee revoked", employee_id=employee_id)
        return True

    async def list_all(self) -> List[AllowedEmployee]:
        """All entries ordered by ID."""
        result = await self.session.execute(
            select(AllowedEmployee).order_by(AllowedEmployee.employee_id.asc())
        )
        return list(result.scalars().all())

    async def is_allowed(self, employee_id: str) -> bool:
        """
        Check whether an ID may register.
        Falls back to the configured numeric range when there is no entry.
        """
        if not employee_id:
            return False

        entry = await self.get(employee_id)
        if entry:
            return entry.active

        if not settings.auto_allow_enabled:
            return False

        number = employee_number(employee_id)
        if number is None or not settings.AUTO_ALLOW_MIN <= number <= settings.AUTO_ALLOW_MAX:
            return False

        if settings.AUTO_ALLOW_CREATE:
            await self.allow(employee_id)
        return True
