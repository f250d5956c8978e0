"""Sidecar folder index kept next to the user's settings.

The index mirrors what the organizer wrote to disk so "what did I last do"
questions can be answered without a scan. It is a cache: the filesystem under
the root folder stays authoritative and :meth:`FolderIndex.reconcile` rebuilds
the index from it.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, ValidationError

from .errors import IndexCorruptedError, StateError
from .models import FileEntry, FolderRecord, FolderStructure, LastProcessed, stat_created

LOGGER = logging.getLogger(__name__)

FOLDER_STRUCTURE_FILENAME = "folder-structure.json"
LAST_PROCESSED_FILENAME = "last-processed.json"
DESCRIPTION_FILENAME = "description.txt"


class FolderIndex:
    """Persist folder/file records and the last-processed pointer as JSON."""

    def __init__(self, data_dir: Path) -> None:
        """Initialize the index rooted at ``data_dir``.

        Args:
            data_dir: User-data directory holding the JSON files.
        """
        self._data_dir = data_dir.expanduser()

    @property
    def structure_path(self) -> Path:
        """Return the path of ``folder-structure.json``."""
        return self._data_dir / FOLDER_STRUCTURE_FILENAME

    @property
    def last_processed_path(self) -> Path:
        """Return the path of ``last-processed.json``."""
        return self._data_dir / LAST_PROCESSED_FILENAME

    def initialize(self) -> Path:
        """Create both index files in their empty shape when missing.

        Returns:
            Path: Directory containing the index files.
        """
        self._data_dir.mkdir(parents=True, exist_ok=True)
        if not self.structure_path.exists():
            self._write(self.structure_path, FolderStructure())
        if not self.last_processed_path.exists():
            self._write(self.last_processed_path, LastProcessed())
        return self._data_dir

    def load(self) -> FolderStructure:
        """Return the stored folder records, newest first.

        Raises:
            IndexCorruptedError: If the file cannot be parsed.
        """
        self.initialize()
        return self._read(self.structure_path, FolderStructure)

    def last_processed(self) -> LastProcessed:
        """Return the pointer written by the most recent upsert.

        Raises:
            IndexCorruptedError: If the file cannot be parsed.
        """
        self.initialize()
        return self._read(self.last_processed_path, LastProcessed)

    def find(self, folder_path: Path | str) -> Optional[FolderRecord]:
        """Return the record whose path equals ``folder_path``, if any."""
        key = str(_absolute(folder_path))
        return next((record for record in self.load().folders if record.path == key), None)

    def upsert(
        self,
        folder_path: Path,
        folder_name: str,
        file_names: Iterable[str],
    ) -> FolderRecord:
        """Record the current files of a folder and move the last-processed pointer.

        The record with an identical path is replaced in place; otherwise the
        new record is prepended. The folder's first ``created`` time is kept
        across replacements.

        Args:
            folder_path: Absolute folder path, used as the record key.
            folder_name: Display name of the folder.
            file_names: Names of the files that belong to the folder.

        Returns:
            FolderRecord: The stored record.
        """
        structure = self.load()
        folder_path = _absolute(folder_path)
        key = str(folder_path)
        names = list(dict.fromkeys(file_names))
        position = next(
            (i for i, record in enumerate(structure.folders) if record.path == key), None
        )

        record = FolderRecord(
            path=key,
            name=folder_name,
            files=[self._file_entry(folder_path, name) for name in names],
        )
        if position is None:
            structure.folders.insert(0, record)
        else:
            record.created = structure.folders[position].created
            structure.folders[position] = record

        self._write(self.structure_path, structure)
        self._write(
            self.last_processed_path,
            LastProcessed(
                last_folder=key,
                last_folder_name=folder_name,
                last_files=[str(folder_path / name) for name in names],
                timestamp=datetime.now(timezone.utc),
            ),
        )
        LOGGER.debug("Indexed %d file(s) for %s", len(names), key)
        return record

    def remove(self, folder_path: Path | str) -> bool:
        """Drop the record for ``folder_path``.

        Returns:
            bool: ``True`` when a record was removed.
        """
        structure = self.load()
        key = str(_absolute(folder_path))
        remaining = [record for record in structure.folders if record.path != key]
        if len(remaining) == len(structure.folders):
            return False
        self._write(self.structure_path, FolderStructure(folders=remaining))
        return True

    def reconcile(self, root: Path) -> FolderStructure:
        """Rebuild the folder records from a scan of ``root``.

        Every sub-directory becomes a record listing its regular files
        (``description.txt`` excluded). Records of folders that no longer
        exist are dropped. The last-processed pointer is left untouched.

        Args:
            root: Root folder holding the organized folders.

        Returns:
            FolderStructure: The rebuilt index.
        """
        records: list[FolderRecord] = []
        root = _absolute(root)
        if root.is_dir():
            for folder in root.iterdir():
                if not folder.is_dir() or folder.name.startswith("."):
                    continue
                files = sorted(
                    child.name
                    for child in folder.iterdir()
                    if child.is_file() and child.name != DESCRIPTION_FILENAME
                )
                records.append(
                    FolderRecord(
                        path=str(folder),
                        name=folder.name,
                        created=stat_created(folder),
                        files=[self._file_entry(folder, name) for name in files],
                    )
                )
        records.sort(key=lambda record: record.created, reverse=True)
        structure = FolderStructure(folders=records)
        self.initialize()
        self._write(self.structure_path, structure)
        LOGGER.info("Rebuilt folder index from %s (%d folders)", root, len(records))
        return structure

    # Internal helpers -------------------------------------------------

    def _file_entry(self, folder_path: Path, name: str) -> FileEntry:
        path = folder_path / name
        try:
            created = stat_created(path)
        except OSError:
            created = datetime.now(timezone.utc)
        return FileEntry(name=name, path=str(path), created=created)

    def _read(self, path: Path, model: type[BaseModel]):
        try:
            return model.model_validate(json.loads(path.read_text(encoding="utf-8")))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise IndexCorruptedError(f"Invalid index data in {path}: {exc}") from exc

    def _write(self, path: Path, payload: BaseModel) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        data = payload.model_dump(mode="json", by_alias=True)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")



def _absolute(path: Path | str) -> Path:
    return Path(path).expanduser().resolve()


__all__ = [
    "FolderIndex",
    "FOLDER_STRUCTURE_FILENAME",
    "LAST_PROCESSED_FILENAME",
    "DESCRIPTION_FILENAME",
    "FileEntry",
    "FolderRecord",
    "FolderStructure",
    "LastProcessed",
    "StateError",
    "IndexCorruptedError",
]
