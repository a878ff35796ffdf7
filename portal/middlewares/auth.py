"""
Middlewares for the onboarding portal.
"""
from typing import Callable, Dict, Any, Awaitable, Optional
from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, User
from portal.config import settings
from portal.schemas.identity import Identity
from portal.logger import bind_update_context, get_logger

logger = get_logger(__name__)


def resolve_identity(user: Optional[User]) -> Optional[Identity]:
    """Identity for a Telegram user; None means anonymous/preview."""
    if user is None or user.is_bot:
        return None
    return Identity(
        uid=str(user.id),
        display_name=user.full_name,
        username=user.username,
    )


class AuthMiddleware(BaseMiddleware):
    """Resolve who is behind the update before any handler runs."""
    
    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        """Attach identity and admin flag to handler data."""
        user: Optional[User] = data.get("event_from_user")
        
        data["identity"] = resolve_identity(user)
        data["is_admin"] = bool(user) and user.id in settings.admin_ids_list
        
        return await handler(event, data)


class LoggingMiddleware(BaseMiddleware):
    """Bind the update's user to the log context and log the update."""
    
    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        user: Optional[User] = data.get("event_from_user")
        
        bind_update_context(
            user_id=user.id if user else None,
            update_type=type(event).__name__,
        )
        if user:
            logger.debug("Update received", username=user.username)
        
        return await handler(event, data)
