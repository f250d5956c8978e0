"""Errors raised while loading or validating ImageDrop settings."""

from __future__ import annotations

from pathlib import Path


class ConfigError(Exception):
    """Raised when settings cannot be parsed, merged or validated."""


class ConfigFileError(ConfigError):
    """Raised when the YAML settings file itself is unreadable or malformed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
