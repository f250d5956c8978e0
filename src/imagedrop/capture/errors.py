"""Capture errors."""


class CaptureError(Exception):
    """Raised when a clipboard, screen or snipping capture cannot be performed."""


class CaptureTimeoutError(CaptureError):
    """Raised when no new clipboard image appeared within the wait period."""
