"""Clipboard access and the bounded wait used by the snipping flow."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import pyperclip
from PIL import Image, ImageGrab

from imagedrop.conversion import encode_png

from .errors import CaptureTimeoutError

LOGGER = logging.getLogger(__name__)

ClipboardReader = Callable[[], Optional[bytes]]


def read_clipboard_image() -> Optional[bytes]:
    """Return the clipboard image as PNG bytes, or ``None`` when there is none.

    Clipboard backends that are unavailable on this machine are treated like
    an empty clipboard.
    """
    try:
        content = ImageGrab.grabclipboard()
    except (NotImplementedError, OSError) as exc:
        LOGGER.debug("Clipboard image unavailable: %s", exc)
        return None
    if not isinstance(content, Image.Image):
        return None
    return encode_png(content)


def clear_clipboard() -> None:
    """Empty the clipboard so the same image is not picked up twice."""
    try:
        pyperclip.copy("")
    except pyperclip.PyperclipException as exc:
        LOGGER.warning("Could not clear clipboard: %s", exc)


class ClipboardMonitor:
    """Poll the clipboard until an image different from a baseline appears."""

    def __init__(
        self,
        reader: ClipboardReader = read_clipboard_image,
        *,
        poll_interval: float = 0.5,
        timeout: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the monitor.

        Args:
            reader: Callable returning the current clipboard image bytes.
            poll_interval: Seconds between clipboard checks.
            timeout: Maximum number of seconds to wait.
            sleep: Sleep function, replaceable in tests.
            clock: Monotonic clock, replaceable in tests.
        """
        self._reader = reader
        self._poll_interval = max(0.0, poll_interval)
        self._timeout = max(0.0, timeout)
        self._sleep = sleep
        self._clock = clock

    def wait_for_new_image(self, baseline: Optional[bytes] = None) -> bytes:
        """Return the first clipboard image that differs from ``baseline``.

        Raises:
            CaptureTimeoutError: If no new image appeared before the timeout.
        """
        deadline = self._clock() + self._timeout
        while True:
            current = self._reader()
            if current and current != baseline:
                return current
            if self._clock() >= deadline:
                raise CaptureTimeoutError(
                    f"No new clipboard image within {self._timeout:g} seconds."
                )
            self._sleep(self._poll_interval)


__all__ = ["ClipboardReader", "read_clipboard_image", "clear_clipboard", "ClipboardMonitor"]
