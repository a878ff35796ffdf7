"""
Main entry point for the Employee Onboarding Portal bot.
"""
import asyncio
import logging
import signal
import sys

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError
from aiogram.fsm.storage.memory import MemoryStorage

from portal.config import settings
from portal.database import init_db, close_db
from portal.logger import configure_logging, get_logger
from portal.handlers import admin, commands, employee
from portal.middlewares.auth import AuthMiddleware, LoggingMiddleware
from portal.scheduler.reminders import (
    setup_scheduler,
    start_scheduler,
    shutdown_scheduler,
)

# Configure logging
configure_logging(
    logging.getLevelName(settings.LOG_LEVEL.upper()),
    json_logs=settings.LOG_JSON,
)
logger = get_logger(__name__)


# Global bot and dispatcher
bot: Bot = None
dp: Dispatcher = None


async def on_startup() -> None:
    """Actions to perform on startup."""
    logger.info("Starting Onboarding Portal...")

    # Initialize database
    await init_db()
    logger.info("Database initialized")

    # Setup scheduler
    setup_scheduler(bot)
    start_scheduler()
    logger.info("Scheduler started")

    # Send startup notification to HR chat (optional)
    try:
        if settings.HR_CHAT_ID:
            await bot.send_message(
                chat_id=settings.HR_CHAT_ID,
                text="🤖 Onboarding Portal is up and running!",
            )
    except TelegramAPIError as e:
        logger.warning("Could not send startup notification", error=str(e))

    logger.info("Onboarding Portal started successfully")


async def on_shutdown() -> None:
    """Actions to perform on shutdown."""
    logger.info("Shutting down Onboarding Portal...")

    # Stop scheduler
    shutdown_scheduler()

    # Close database
    await close_db()

    # Send shutdown notification
    try:
        if settings.HR_CHAT_ID:
            await bot.send_message(
                chat_id=settings.HR_CHAT_ID,
                text="🤖 Onboarding Portal stopped.",
            )
    except TelegramAPIError as e:
        logger.warning("Could not send shutdown notification", error=str(e))

    # Close bot session
    await bot.session.close()

    logger.info("Onboarding Portal shutdown complete")


def setup_handlers() -> None:
    """Setup middlewares and handlers."""
    # Create dispatcher
    global dp
    dp = Dispatcher(storage=MemoryStorage())

    # Session gate runs before every handler
    for observer in (dp.message, dp.callback_query):
        observer.outer_middleware(LoggingMiddleware())
        observer.outer_middleware(AuthMiddleware())

    # Register routers; commands first so they win over pending prompts
    dp.include_router(commands.router)
    dp.include_router(admin.router)
    dp.include_router(employee.router)

    logger.info("Handlers registered")


async def main() -> None:
    """Main function."""
    global bot

    if not settings.admin_ids_list:
        logger.warning("ADMIN_IDS is not set! Admin commands will be unavailable.")

    # Create bot instance
    bot = Bot(
        token=settings.BOT_TOKEN,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )

    # Setup handlers
    setup_handlers()

    # Run startup
    await on_startup()

    # Setup signal handlers for graceful shutdown
    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.info("Received shutdown signal")
        asyncio.create_task(dp.stop_polling())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    try:
        # Start polling
        logger.info("Starting polling...")
        await dp.start_polling(
            bot,
            allowed_updates=dp.resolve_used_update_types(),
            handle_signals=False,
        )
    except asyncio.CancelledError:
        logger.info("Polling cancelled")
    finally:
        await on_shutdown()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except Exception as e:
        logger.error("Fatal error", error=str(e), exc_info=True)
        sys.exit(1)
