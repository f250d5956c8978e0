"""Read-side view of the organized folders on disk.

Unlike :mod:`imagedrop.state`, every function here scans the filesystem
directly, so results reflect folders changed outside ImageDrop too.
"""

from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from imagedrop.organization.models import IMAGE_EXTENSIONS
from imagedrop.state import DESCRIPTION_FILENAME, FileEntry
from imagedrop.state.models import stat_created

LOGGER = logging.getLogger(__name__)

EXPORT_FILENAME = "etcim.json"


class FolderSummary(BaseModel):
    """Listing entry for one organized folder."""

    name: str
    path: str
    image_count: int
    created: datetime
    first_image: Optional[str] = None


class FolderContents(BaseModel):
    """Images and description stored in one organized folder."""

    images: List[FileEntry] = Field(default_factory=list)
    description: Optional[str] = None


class LibraryError(Exception):
    """Raised when a folder operation targets an invalid location."""


def _images(folder: Path) -> list[FileEntry]:
    entries = [
        FileEntry(name=child.name, path=str(child), created=stat_created(child))
        for child in folder.iterdir()
        if child.is_file() and child.suffix.lower() in IMAGE_EXTENSIONS
    ]
    entries.sort(key=lambda entry: entry.created, reverse=True)
    return entries


def list_folders(root: Path) -> list[FolderSummary]:
    """Return the folders under ``root``, newest first.

    The root folder is created when it does not exist yet.
    """
    root.mkdir(parents=True, exist_ok=True)
    summaries: list[FolderSummary] = []
    for folder in root.iterdir():
        if not folder.is_dir() or folder.name.startswith("."):
            continue
        images = _images(folder)
        summaries.append(
            FolderSummary(
                name=folder.name,
                path=str(folder),
                image_count=len(images),
                created=stat_created(folder),
                first_image=images[0].path if images else None,
            )
        )
    summaries.sort(key=lambda summary: summary.created, reverse=True)
    return summaries


def read_folder(folder: Path) -> FolderContents:
    """Return the images (newest first) and description of ``folder``.

    Raises:
        LibraryError: If ``folder`` is not a directory.
    """
    if not folder.is_dir():
        raise LibraryError(f"Folder not found: {folder}")
    description_path = folder / DESCRIPTION_FILENAME
    description = None
    if description_path.is_file():
        description = description_path.read_text(encoding="utf-8")
    return FolderContents(images=_images(folder), description=description)


def resolve_in_root(folder: Path | str, root: Path) -> Path:
    """Return ``folder`` as a path inside ``root``.

    Bare names are taken relative to ``root``.

    Raises:
        LibraryError: If the resolved path is ``root`` itself or lies outside it.
    """
    root_resolved = root.expanduser().resolve()
    candidate = Path(folder).expanduser()
    if not candidate.is_absolute():
        candidate = root_resolved / candidate
    candidate = candidate.resolve()
    if candidate == root_resolved or root_resolved not in candidate.parents:
        raise LibraryError(f"{candidate} is not a folder inside {root_resolved}")
    return candidate


def delete_folder(folder: Path | str, root: Path) -> Path:
    """Recursively remove an organized folder.

    Returns:
        Path: The removed folder.

    Raises:
        LibraryError: If the folder lies outside ``root`` or does not exist.
    """
    target = resolve_in_root(folder, root)
    if not target.is_dir():
        raise LibraryError(f"Folder not found: {target}")
    shutil.rmtree(target)
    LOGGER.info("Deleted folder %s", target)
    return target


def export_folder(folder: Path | str, root: Path) -> Path:
    """Write ``etcim.json`` describing ``folder`` into the root folder.

    Any previous export is overwritten. Only images are listed.

    Returns:
        Path: Location of the written export file.

    Raises:
        LibraryError: If the folder lies outside ``root`` or does not exist.
    """
    target = resolve_in_root(folder, root)
    contents = read_folder(target)
    payload = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "folder": {
            "name": target.name,
            "path": str(target),
            "created": stat_created(target).isoformat(),
            "fileCount": len(contents.images),
            "files": [entry.model_dump(mode="json") for entry in contents.images],
        },
    }
    destination = root.expanduser() / EXPORT_FILENAME
    destination.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    LOGGER.info("Exported %s to %s", target.name, destination)
    return destination


__all__ = [
    "EXPORT_FILENAME",
    "FolderSummary",
    "FolderContents",
    "LibraryError",
    "list_folders",
    "read_folder",
    "resolve_in_root",
    "delete_folder",
    "export_folder",
]
