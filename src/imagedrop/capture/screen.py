"""Screen capture and external snipping tool launch."""

from __future__ import annotations

import logging
import shlex
import subprocess
import sys
from typing import Optional

from PIL import ImageGrab

from imagedrop.conversion import encode_png

from .errors import CaptureError

LOGGER = logging.getLogger(__name__)

WINDOWS_SNIPPING_COMMAND = "snippingtool /clip"


def capture_screen() -> bytes:
    """Return a PNG screenshot of the primary display.

    Raises:
        CaptureError: If the screen cannot be grabbed on this machine.
    """
    try:
        image = ImageGrab.grab()
    except (NotImplementedError, OSError) as exc:
        raise CaptureError(f"Screen capture unavailable: {exc}") from exc
    return encode_png(image)


def launch_snipping_tool(command: Optional[str] = None) -> subprocess.Popen:
    """Start an external snipping tool that places its result on the clipboard.

    Args:
        command: Command line to run. Defaults to the Windows Snipping Tool.

    Raises:
        CaptureError: If no command is available or it cannot be started.
    """
    if not command:
        if sys.platform != "win32":
            raise CaptureError(
                "No snipping tool configured. Set capture.snipping_command for this platform."
            )
        command = WINDOWS_SNIPPING_COMMAND

    argv = shlex.split(command, posix=sys.platform != "win32")
    LOGGER.debug("Launching snipping tool: %s", command)
    try:
        return subprocess.Popen(argv)
    except OSError as exc:
        raise CaptureError(f"Could not start snipping tool {argv[0]!r}: {exc}") from exc


__all__ = ["WINDOWS_SNIPPING_COMMAND", "capture_screen", "launch_snipping_tool"]
