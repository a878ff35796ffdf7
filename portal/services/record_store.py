"""
Service layer for onboarding record documents.
"""
import asyncio
import copy
import weakref
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from portal.database.models import OnboardingRecordRow
from portal.schemas.record import OnboardingRecord, TIMESTAMP_FIELDS
from portal.logger import get_logger

logger = get_logger(__name__)

# One lock per user id while any patch for it is in flight
_record_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _record_lock(user_id: str) -> asyncio.Lock:
    lock = _record_locks.get(user_id)
    if lock is None:
        lock = asyncio.Lock()
        _record_locks[user_id] = lock
    return lock


def merge_patch(document: dict, patch: dict) -> dict:
    """
    Merge a patch into a document.
    Mappings merge recursively; lists and scalars replace.
    """
    merged = copy.deepcopy(document) if isinstance(document, dict) else {}
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_patch(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _to_record(row: OnboardingRecordRow) -> OnboardingRecord:
    return OnboardingRecord.from_document(
        row.document,
        createdAt=row.created_at,
        updatedAt=row.updated_at,
        lastLoginAt=row.last_login_at,
    )


class RecordStore:
    """Fetch and patch onboarding records by user id."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_row(self, user_id: str, refresh: bool = False) -> Optional[OnboardingRecordRow]:
        query = select(OnboardingRecordRow).where(OnboardingRecordRow.user_id == user_id)
        if refresh:
            # Overwrite a row this session loaded before another writer committed
            query = query.execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def fetch(self, user_id: str) -> Optional[OnboardingRecord]:
        """Get a user's record, or None if there is none."""
        row = await self._get_row(user_id)
        if not row:
            return None
        return _to_record(row)

    async def create(self, user_id: str, record: OnboardingRecord) -> OnboardingRecord:
        """Store a brand-new record for a user."""
        now = utcnow()
        row = OnboardingRecordRow(
            user_id=user_id,
            employee_id=record.employee_id or None,
            document=record.to_document(),
            created_at=now,
            updated_at=now,
            last_login_at=now,
        )
        self.session.add(row)
        await self.session.commit()

        logger.info(
            "Record created",
            user_id=user_id,
            employee_id=record.employee_id,
        )

        return _to_record(row)

    async def patch(self, user_id: str, patch: dict) -> None:
        """
        Merge a partial document into a user's record with a fresh update timestamp.
        Creates the record when it does not exist. Does not return the result;
        callers fetch again.

        The read-merge-write runs under the record's lock, so patches to
        disjoint sub-trees from concurrent handlers all survive.
        """
        patch = {k: v for k, v in patch.items() if k not in TIMESTAMP_FIELDS}

        lock = _record_lock(user_id)
        async with lock:
            now = utcnow()
            row = await self._get_row(user_id, refresh=True)
            if not row:
                row = OnboardingRecordRow(
                    user_id=user_id,
                    document={},
                    created_at=now,
                )
                self.session.add(row)

            row.document = merge_patch(row.document or {}, patch)
            row.updated_at = now
            if "employeeId" in patch:
                row.employee_id = patch["employeeId"] or None

            await self.session.commit()

        logger.info(
            "Record patched",
            user_id=user_id,
            fields=sorted(patch.keys()),
        )

    async def touch_login(self, user_id: str) -> bool:
        """Record a sign-in. Returns False when the user has no record."""
        row = await self._get_row(user_id)
        if not row:
            return False

        row.last_login_at = utcnow()
        await self.session.commit()
        return True

    async def find_by_employee_id(
        self,
        employee_id: str,
    ) -> Optional[Tuple[str, OnboardingRecord]]:
        """Look up at most one record by its (normalized) employee ID."""
        result = await self.session.execute(
            select(OnboardingRecordRow)
            .where(OnboardingRecordRow.employee_id == employee_id)
            .order_by(OnboardingRecordRow.created_at.asc())
            .limit(1)
        )
        row = result.scalar_one_or_none()
        if not row:
            return None
        return row.user_id, _to_record(row)

    async def list_scheduled(self) -> List[Tuple[str, OnboardingRecord]]:
        """All records that have an appointment date set."""
        result = await self.session.execute(select(OnboardingRecordRow))
        records = []
        for row in result.scalars().all():
            record = _to_record(row)
            if record.appointment.date:
                records.append((row.user_id, record))
        return records
