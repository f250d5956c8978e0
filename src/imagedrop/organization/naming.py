"""Folder and file naming rules for organized drops."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

ILLEGAL_CHARACTERS = re.compile(r'[<>:"/\\|?*]')
MAX_FOLDER_NAME_LENGTH = 100


def sanitize_folder_name(value: Optional[str]) -> str:
    """Return ``value`` made safe for use as a folder name.

    Every character in ``<>:"/\\|?*`` becomes ``_`` and the result is cut to
    100 characters. Empty input, ``.`` and ``..`` sanitize to ``""``.
    """
    if not value:
        return ""
    cleaned = ILLEGAL_CHARACTERS.sub("_", value.strip())[:MAX_FOLDER_NAME_LENGTH]
    if cleaned in {".", ".."}:
        return ""
    return cleaned


def folder_timestamp(now: Optional[datetime] = None) -> str:
    """Return the local-time ``YYYY-MM-DD_HH-MM-SS`` folder fallback name."""
    moment = now or datetime.now()
    return moment.strftime("%Y-%m-%d_%H-%M-%S")


def file_timestamp(now: Optional[datetime] = None) -> str:
    """Return the UTC stamp used to disambiguate synthetic file names.

    The ISO-8601 form with milliseconds has ``:`` and ``.`` replaced by ``-``
    and the zone marker dropped, e.g. ``2024-05-01T09-30-12-345``.
    """
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    iso = moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return re.sub(r"[:.]", "-", iso).split("Z", 1)[0]


def choose_base_name(
    title: Optional[str] = None,
    fallback: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> str:
    """Pick the folder base name: AI title, then fallback, then a timestamp."""
    for candidate in (title, fallback):
        sanitized = sanitize_folder_name(candidate)
        if sanitized:
            return sanitized
    return folder_timestamp(now)


def resolve_folder_name(candidate: str, root: Path) -> str:
    """Return a folder name that does not yet exist under ``root``.

    The sanitized candidate is used as is when free; otherwise ``" 2"``,
    ``" 3"``, ... is appended until the filesystem reports no entry. The
    check is a plain existence probe, so two processes racing on the same
    name may both pick it.
    """
    base = sanitize_folder_name(candidate) or folder_timestamp()
    name = base
    index = 2
    while (root / name).exists():
        suffix = f" {index}"
        name = f"{base[: MAX_FOLDER_NAME_LENGTH - len(suffix)]}{suffix}"
        index += 1
    return name


def synthetic_name(base: str, stamp: str, extension: str) -> str:
    """Return ``<base>_<stamp><extension>`` for captures without a real filename."""
    return f"{base}_{stamp}{extension}"


def page_name(base: str, number: int, total: int, *, real_drop: bool, stamp: str) -> str:
    """Return the file name for page ``number`` (1-based) of ``total`` rasterized pages."""
    if real_drop:
        return f"{base} {number}-{total}.png"
    return f"{base}_page_{number}_{stamp}.png"


__all__ = [
    "ILLEGAL_CHARACTERS",
    "MAX_FOLDER_NAME_LENGTH",
    "sanitize_folder_name",
    "folder_timestamp",
    "file_timestamp",
    "choose_base_name",
    "resolve_folder_name",
    "synthetic_name",
    "page_name",
]
