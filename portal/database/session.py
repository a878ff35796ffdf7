"""
Database session management and initialization.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import (
    AsyncSession, 
    async_sessionmaker, 
    create_async_engine,
    AsyncEngine
)
from portal.config import settings
from portal.database.models import Base
from portal.logger import get_logger

logger = get_logger(__name__)

# Create async engine
engine: AsyncEngine = create_async_engine(
    settings.DB_URL,
    echo=False,  # Set to True for SQL debugging
)

# Create session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db() -> None:
    """Initialize database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized successfully")


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
    logger.info("Database connections closed")


def session_scope(maker: async_sessionmaker):
    """Build a get_session-style context manager bound to another session maker."""
    
    @asynccontextmanager
    async def scope() -> AsyncGenerator[AsyncSession, None]:
        async with maker() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error("Database session error", error=str(e))
                raise
    
    return scope


get_session = session_scope(async_session_maker)
