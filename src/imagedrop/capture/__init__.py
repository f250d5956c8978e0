"""Clipboard, screen and snipping tool capture."""

from .clipboard import ClipboardMonitor, ClipboardReader, clear_clipboard, read_clipboard_image
from .errors import CaptureError, CaptureTimeoutError
from .screen import WINDOWS_SNIPPING_COMMAND, capture_screen, launch_snipping_tool

__all__ = [
    "CaptureError",
    "CaptureTimeoutError",
    "ClipboardMonitor",
    "ClipboardReader",
    "clear_clipboard",
    "read_clipboard_image",
    "WINDOWS_SNIPPING_COMMAND",
    "capture_screen",
    "launch_snipping_tool",
]
