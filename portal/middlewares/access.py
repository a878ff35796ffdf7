"""
Access control for the administrator surface.
"""
from typing import Any, Awaitable, Callable, Dict, Optional
from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject, User
from portal.config import settings
from portal.logger import get_logger

logger = get_logger(__name__)

UNAUTHORIZED_TEXT = "⛔ Admin access only. This account is not an administrator."


def is_admin(user_id: int) -> bool:
    """Check if user is an admin."""
    return user_id in settings.admin_ids_list


class AdminAccessMiddleware(BaseMiddleware):
    """Drop admin updates from non-admins with a blocking notice."""
    
    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        user: Optional[User] = data.get("event_from_user")
        
        if user and is_admin(user.id):
            return await handler(event, data)
        
        logger.warning(
            "Unauthorized admin access",
            user_id=user.id if user else None,
            update_type=type(event).__name__,
        )
        
        if isinstance(event, CallbackQuery):
            await event.answer(UNAUTHORIZED_TEXT, show_alert=True)
        elif isinstance(event, Message):
            await event.answer(UNAUTHORIZED_TEXT)
        return None
