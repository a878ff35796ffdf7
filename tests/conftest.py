"""
Pytest configuration and fixtures for portal tests.
"""
import os
from contextlib import asynccontextmanager

import pytest

# Set test environment before importing portal modules
os.environ.setdefault("BOT_TOKEN", "123456:TEST-TOKEN")
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("TIMEZONE", "UTC")

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from portal.database import Base, session_scope
from portal.schemas.identity import Identity


@pytest.fixture
def database(tmp_path):
    """
    Factory for a fresh SQLite database.

    Use inside a coroutine: ``async with database() as session_factory``;
    the factory behaves like ``portal.database.get_session``.
    """
    url = f"sqlite+aiosqlite:///{tmp_path / 'portal-test.db'}"

    @asynccontextmanager
    async def open_database():
        engine = create_async_engine(url)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        try:
            yield session_scope(maker)
        finally:
            await engine.dispose()

    return open_database


@pytest.fixture
def identity():
    return Identity(uid="1001", display_name="Jamie Rivera", username="jrivera")
