"""
Exception types raised by FlexImage.

Every error derives from FlexImageError so callers can catch the whole
family. Errors tied to a file carry the attempted path for diagnostics.
"""

from typing import Optional


class FlexImageError(Exception):
    """Base class for all FlexImage errors."""


class InvalidUploadError(FlexImageError):
    """The assigned upload source was empty, unreadable or not an image."""


class MasterImageNotFoundError(FlexImageError):
    """A decode was requested but no master image exists at the path."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = str(path)
        if message is None:
            message = (
                "Master image was not found for this record, so no image can be rendered.\n"
                f"Expected image to be at:\n  {self.path}"
            )
        super().__init__(message)


class DecodeError(FlexImageError):
    """The master image exists but could not be decoded."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = str(path)
        super().__init__(message or f"Failed to decode master image at {self.path}")


class OperatorError(FlexImageError):
    """An operator rejected its arguments or failed while executing."""

    def __init__(self, message: str, operator: Optional[str] = None):
        self.operator = operator
        super().__init__(message)


class NotFoundError(FlexImageError):
    """Deletion was requested for a master image file that does not exist."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = str(path)
        super().__init__(message or f"No master image file to delete at {self.path}")


class RenderError(FlexImageError):
    """Rendering was requested without an image buffer."""


class PipelineStateError(FlexImageError, RuntimeError):
    """A pipeline session was used out of order (e.g. entered twice)."""


class UnknownOperatorError(FlexImageError, AttributeError):
    """No operator, nor anything else, handled a call made inside operate()."""
