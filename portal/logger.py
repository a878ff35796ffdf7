"""
Structured logging for the portal.

Every event carries the Telegram user and update type of the update being
handled, bound by ``LoggingMiddleware`` through structlog context variables.
"""
import logging
import sys
from typing import Any, List, Optional
import structlog

# Library loggers that flood INFO with per-update chatter
NOISY_LOGGERS = ("aiogram.event", "apscheduler.executors.default", "sqlalchemy.engine")


def _renderer(json_logs: bool) -> Any:
    if json_logs:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True)


def configure_logging(log_level: int = logging.INFO, json_logs: Optional[bool] = None) -> None:
    """
    Configure stdlib logging and structlog.

    JSON output is used when stdout is not a terminal unless ``json_logs``
    says otherwise.
    """
    if json_logs is None:
        json_logs = not sys.stdout.isatty()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_logs:
        processors.append(structlog.processors.format_exc_info)
    else:
        processors.append(structlog.dev.set_exc_info)
    processors.append(_renderer(json_logs))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_update_context(**fields: Any) -> None:
    """Start a fresh log context for one update."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**fields)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance."""
    return structlog.get_logger(name)
