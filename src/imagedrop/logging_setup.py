"""Logging configuration for the ImageDrop CLI."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from imagedrop.config.models import LoggingSettings

LOG_FILENAME = "imagedrop.log"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(
    settings: LoggingSettings,
    log_dir: Optional[Path] = None,
    *,
    level_override: Optional[str] = None,
) -> logging.Logger:
    """Attach console and rotating file handlers to the ``imagedrop`` logger.

    Existing handlers on the package logger are replaced, so calling this
    more than once does not duplicate output.

    Args:
        settings: Logging section of the configuration.
        log_dir: Directory receiving ``imagedrop.log``; no file is written when ``None``.
        level_override: Optional level name taking precedence over ``settings.level``.

    Returns:
        logging.Logger: The configured package logger.
    """
    level_name = (level_override or settings.level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING

    logger = logging.getLogger("imagedrop")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(min(level, logging.INFO) if log_dir is not None else level)
    logger.propagate = False

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_dir is not None:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_dir / LOG_FILENAME,
                maxBytes=max(1, settings.max_size_mb) * 1024 * 1024,
                backupCount=max(0, settings.backup_count),
                encoding="utf-8",
            )
        except OSError as exc:
            logger.warning("File logging disabled: %s", exc)
        else:
            file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
            file_handler.setLevel(min(level, logging.INFO))
            logger.addHandler(file_handler)

    return logger


__all__ = ["LOG_FILENAME", "configure_logging"]
