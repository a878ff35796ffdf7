"""
Configuration module for the onboarding portal bot.
Loads environment variables and provides settings.
"""
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Bot configuration
    BOT_TOKEN: str = Field(..., description="Telegram Bot Token")

    # Database
    DB_URL: str = Field(
        default="sqlite+aiosqlite:///./portal.db",
        description="Database connection URL"
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Log level name (DEBUG, INFO, WARNING, ...)"
    )
    LOG_JSON: Optional[bool] = Field(
        default=None,
        description="Force JSON (true) or console (false) log output; unset picks by terminal"
    )

    # HR chat for startup/shutdown notices
    HR_CHAT_ID: int = Field(
        default=0,
        description="ID of the HR chat/group, 0 disables notices"
    )

    # Access control
    ADMIN_IDS: str = Field(
        default="",
        description="Comma-separated list of admin Telegram user IDs"
    )

    # Employee ID auto-allow range (numeric part of the ID, inclusive)
    AUTO_ALLOW_MIN: int = Field(
        default=0,
        description="Lowest employee number allowed without an allow-list entry"
    )
    AUTO_ALLOW_MAX: int = Field(
        default=0,
        description="Highest employee number allowed without an allow-list entry, 0 disables"
    )
    AUTO_ALLOW_CREATE: bool = Field(
        default=True,
        description="Create allow-list entries for IDs accepted through the range"
    )

    # Timezone
    TIMEZONE: str = Field(
        default="America/New_York",
        description="Timezone for date/time operations"
    )

    # Reminder settings
    APPOINTMENT_REMINDER_DAYS: int = Field(
        default=1,
        description="Days before the appointment date to remind the employee"
    )
    SCHEDULER_INTERVAL_MINUTES: int = Field(
        default=30,
        description="How often to check reminders (in minutes)"
    )

    @property
    def admin_ids_list(self) -> List[int]:
        """Parse ADMIN_IDS into list of integers."""
        if not self.ADMIN_IDS:
            return []
        return [int(x.strip()) for x in self.ADMIN_IDS.split(",") if x.strip()]

    @property
    def auto_allow_enabled(self) -> bool:
        """Whether the numeric auto-allow range is configured."""
        return self.AUTO_ALLOW_MAX > 0 and self.AUTO_ALLOW_MAX >= self.AUTO_ALLOW_MIN

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()
