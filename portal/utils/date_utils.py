"""
Date helpers in the configured timezone.
"""
from datetime import date, datetime
from typing import Optional
import pytz
from portal.config import settings

# Timezone
TZ = pytz.timezone(settings.TIMEZONE)


def get_now() -> datetime:
    """Get current datetime in configured timezone."""
    return datetime.now(TZ)


def parse_date(date_str: str) -> Optional[date]:
    """Parse an appointment date in YYYY-MM-DD format."""
    try:
        return datetime.strptime((date_str or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def days_until(day: date, today: Optional[date] = None) -> int:
    """Calculate days from today until a date."""
    if today is None:
        today = get_now().date()
    return (day - today).days


def format_datetime(dt: Optional[datetime]) -> str:
    """Format a stored (naive UTC) timestamp for display."""
    if dt is None:
        return "—"
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt.astimezone(TZ).strftime("%b %d, %Y %H:%M")
