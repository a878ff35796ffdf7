"""
Exceptions raised by portal services.
"""


class PortalError(Exception):
    """Base class for portal errors."""


class PreviewModeError(PortalError):
    """A save was attempted while showing the demonstration record."""

    def __init__(self, message: str = "Preview mode: sign in with /start to save changes."):
        super().__init__(message)
