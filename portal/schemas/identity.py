"""
Resolved identity of the user behind an update.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Identity:
    """Opaque user id plus what Telegram tells us about the user."""
    uid: str
    display_name: str = ""
    username: Optional[str] = None
