"""
Database module for the onboarding portal.
"""
from portal.database.models import (
    Base,
    OnboardingRecordRow,
    AllowedEmployee,
    SupportTicket,
)
from portal.database.session import (
    engine,
    async_session_maker,
    init_db,
    close_db,
    get_session,
    session_scope,
)

__all__ = [
    "Base",
    "OnboardingRecordRow",
    "AllowedEmployee",
    "SupportTicket",
    "engine",
    "async_session_maker",
    "init_db",
    "close_db",
    "get_session",
    "session_scope",
]
