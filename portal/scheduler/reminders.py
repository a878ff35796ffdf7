"""
Scheduler for appointment reminders.
"""
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from aiogram import Bot, html
from aiogram.exceptions import TelegramAPIError

from portal.config import settings
from portal.database import get_session
from portal.schemas.record import OnboardingRecord
from portal.services.record_store import RecordStore
from portal.utils.date_utils import TZ, days_until, get_now, parse_date
from portal.utils.formatting import or_placeholder
from portal.logger import get_logger

logger = get_logger(__name__)

scheduler = AsyncIOScheduler(timezone=TZ)


def needs_reminder(record: OnboardingRecord, today=None) -> bool:
    """Appointment is exactly APPOINTMENT_REMINDER_DAYS away and not yet reminded."""
    day = parse_date(record.appointment.date)
    if day is None:
        return False
    if record.appointment_reminded_for == record.appointment.date:
        return False
    return days_until(day, today) == settings.APPOINTMENT_REMINDER_DAYS


def format_reminder(record: OnboardingRecord) -> str:
    appt = record.appointment
    text = (
        "⏰ <b>Appointment reminder</b>\n\n"
        f"📅 {html.quote(appt.date)}\n"
        f"🕒 {html.quote(or_placeholder(appt.time, 'Time to be confirmed'))}\n"
        f"📍 {html.quote(or_placeholder(appt.address, 'Address to be confirmed'))}"
    )
    if appt.notes:
        text += f"\n\n{html.quote(appt.notes)}"
    return text


async def send_reminders(bot: Bot, today=None) -> int:
    """Check all scheduled appointments and remind employees. Returns the number sent."""
    logger.info("Running reminder check")
    if today is None:
        today = get_now().date()

    async with get_session() as session:
        records = await RecordStore(session).list_scheduled()

    sent = 0
    for user_id, record in records:
        if not needs_reminder(record, today):
            continue

        try:
            await bot.send_message(chat_id=int(user_id), text=format_reminder(record))
        except TelegramAPIError as e:
            logger.error("Failed to send appointment reminder", user_id=user_id, error=str(e))
            continue

        async with get_session() as session:
            await RecordStore(session).patch(
                user_id,
                {"appointmentRemindedFor": record.appointment.date},
            )

        sent += 1
        logger.info(
            "Appointment reminder sent",
            user_id=user_id,
            appointment_date=record.appointment.date,
        )

    return sent


def setup_scheduler(bot: Bot, interval_minutes: Optional[int] = None) -> None:
    """Setup the scheduler with the bot instance."""
    interval = interval_minutes or settings.SCHEDULER_INTERVAL_MINUTES
    scheduler.add_job(
        send_reminders,
        trigger=IntervalTrigger(minutes=interval),
        args=[bot],
        id="appointment_reminder_job",
        replace_existing=True,
    )

    logger.info("Scheduler configured", interval_minutes=interval)


def start_scheduler() -> None:
    """Start the scheduler."""
    scheduler.start()
    logger.info("Scheduler started")


def shutdown_scheduler() -> None:
    """Shutdown the scheduler."""
    if scheduler.running:
        scheduler.shutdown()
    logger.info("Scheduler shutdown")
