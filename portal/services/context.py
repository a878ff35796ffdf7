"""
Per-update application context handed to every screen.

Holds the record snapshot and its one write path: patch, then reload
from storage. Nothing is updated optimistically. Support tickets go
through here too so preview mode applies to them.
"""
from typing import Any, AsyncContextManager, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.database import SupportTicket, get_session
from portal.exceptions import PreviewModeError
from portal.schemas.identity import Identity
from portal.schemas.record import OnboardingRecord, demo_record
from portal.services.record_store import RecordStore
from portal.services.support_service import SupportService
from portal.logger import get_logger

logger = get_logger(__name__)

TICKET_PREVIEW_TEXT = "Preview mode: ticket not sent. Sign in with /start to contact HR."

SessionFactory = Callable[[], AsyncContextManager[AsyncSession]]


class PortalContext:
    """Record accessor plus patch-and-reload for one user."""

    def __init__(
        self,
        identity: Optional[Identity],
        session_factory: Optional[SessionFactory] = None,
        route: Optional[str] = None,
    ):
        self.identity = identity
        self.session_factory = session_factory or get_session
        self.route = route
        self.record: OnboardingRecord = demo_record()

    @property
    def is_preview(self) -> bool:
        return self.identity is None or self.record.preview

    async def load(self) -> OnboardingRecord:
        """Reload the record; fall back to the demonstration record when it is unavailable."""
        if self.identity is None:
            self.record = demo_record()
            return self.record

        try:
            async with self.session_factory() as session:
                record = await RecordStore(session).fetch(self.identity.uid)
        except SQLAlchemyError as e:
            logger.warning(
                "Record load failed, showing demo record",
                user_id=self.identity.uid,
                error=str(e),
            )
            record = None

        self.record = record if record is not None else demo_record()
        return self.record

    async def patch_and_reload(self, patch: dict[str, Any]) -> OnboardingRecord:
        """Persist a partial update, then reload the full record from storage."""
        if self.is_preview:
            raise PreviewModeError()

        async with self.session_factory() as session:
            await RecordStore(session).patch(self.identity.uid, patch)

        return await self.load()

    async def submit_ticket(self, category: Optional[str], message: str) -> SupportTicket:
        """Send a support ticket to HR on behalf of the signed-in employee."""
        if self.is_preview:
            raise PreviewModeError(TICKET_PREVIEW_TEXT)

        async with self.session_factory() as session:
            return await SupportService(session).create_ticket(
                self.identity.uid,
                message,
                category=category,
                employee_id=self.record.employee_id,
            )
