"""
Employee onboarding portal bot package.
"""
from portal.config import settings
from portal.logger import configure_logging, get_logger

__all__ = ["settings", "configure_logging", "get_logger"]
