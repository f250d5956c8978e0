"""Data models persisted in the folder index files."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


def stat_created(path: Path) -> datetime:
    """Return the creation time of ``path``, falling back to its modification time."""
    stat = path.stat()
    seconds = getattr(stat, "st_birthtime", None) or stat.st_mtime
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


class FileEntry(BaseModel):
    """A file inside an organized folder."""

    name: str
    path: str
    created: datetime = Field(default_factory=_now)


class FolderRecord(BaseModel):
    """Index entry mirroring one organized folder."""

    path: str
    name: str
    created: datetime = Field(default_factory=_now)
    files: List[FileEntry] = Field(default_factory=list)


class FolderStructure(BaseModel):
    """Contents of ``folder-structure.json``; newest records first."""

    folders: List[FolderRecord] = Field(default_factory=list)


class LastProcessed(BaseModel):
    """Contents of ``last-processed.json``."""

    model_config = ConfigDict(populate_by_name=True)

    last_folder: Optional[str] = Field(default=None, alias="lastFolder")
    last_folder_name: Optional[str] = Field(default=None, alias="lastFolderName")
    last_files: List[str] = Field(default_factory=list, alias="lastFiles")
    timestamp: Optional[datetime] = None


__all__ = ["stat_created", "FileEntry", "FolderRecord", "FolderStructure", "LastProcessed"]
