"""Artifact and outcome models for the drop pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field


class ArtifactKind(str, Enum):
    """Supported input families."""

    IMAGE = "image"
    SVG = "svg"
    PDF = "pdf"
    WORD = "word"
    EXCEL = "excel"
    POWERPOINT = "powerpoint"


EXTENSION_KINDS = {
    ".png": ArtifactKind.IMAGE,
    ".jpg": ArtifactKind.IMAGE,
    ".jpeg": ArtifactKind.IMAGE,
    ".svg": ArtifactKind.SVG,
    ".pdf": ArtifactKind.PDF,
    ".doc": ArtifactKind.WORD,
    ".docx": ArtifactKind.WORD,
    ".xls": ArtifactKind.EXCEL,
    ".xlsx": ArtifactKind.EXCEL,
    ".ppt": ArtifactKind.POWERPOINT,
    ".pptx": ArtifactKind.POWERPOINT,
}

IMAGE_EXTENSIONS = frozenset(ext for ext, kind in EXTENSION_KINDS.items() if kind is ArtifactKind.IMAGE)


@dataclass(slots=True)
class Artifact:
    """One incoming item.

    Attributes:
        name: File name including extension. Synthetic captures use their base
            name (``clipboard``, ``screenshot``) plus extension.
        real_drop: Whether ``name`` is a user's original file name to preserve.
        source: Path the bytes are read from, when known.
        data: In-memory bytes, used when there is no source path.
    """

    name: str
    real_drop: bool
    source: Optional[Path] = None
    data: Optional[bytes] = None

    @classmethod
    def from_path(cls, path: Path, *, real_drop: bool = True) -> "Artifact":
        """Return an artifact backed by a file on disk."""
        return cls(name=path.name, real_drop=real_drop, source=path)

    @classmethod
    def from_capture(cls, data: bytes, base_name: str, extension: str = ".png") -> "Artifact":
        """Return a synthetic artifact for clipboard or screen captures."""
        return cls(name=f"{base_name}{extension}", real_drop=False, data=data)

    @property
    def stem(self) -> str:
        return Path(self.name).stem

    @property
    def suffix(self) -> str:
        return Path(self.name).suffix.lower()

    @property
    def kind(self) -> Optional[ArtifactKind]:
        return EXTENSION_KINDS.get(self.suffix)

    def read(self) -> bytes:
        """Return the artifact bytes, reading the source file when needed."""
        if self.data is not None:
            return self.data
        if self.source is None:
            raise ValueError(f"Artifact {self.name!r} has neither data nor a source path.")
        return self.source.read_bytes()


class OutcomeStatus(str, Enum):
    """Terminal state of one artifact in the pipeline."""

    SAVED = "saved"
    CONVERTED = "converted"
    ORIGINAL_ONLY = "original_only"
    FAILED = "failed"
    SKIPPED = "skipped"


class ProcessingOutcome(BaseModel):
    """Result of processing a single artifact.

    Attributes:
        artifact: Name of the processed artifact.
        status: Terminal pipeline state.
        message: Human-readable status line.
        folder_name: Destination folder name, when one was created.
        folder_path: Destination folder path, when one was created.
        files: Files written to the destination folder, in write order.
        pages: Subset of ``files`` that are rendered pages.
        reason: Failure detail for ``ORIGINAL_ONLY`` and ``FAILED``.
        description_written: Whether a ``description.txt`` was created.
    """

    artifact: str
    status: OutcomeStatus
    message: str
    folder_name: Optional[str] = None
    folder_path: Optional[Path] = None
    files: List[str] = Field(default_factory=list)
    pages: List[str] = Field(default_factory=list)
    reason: Optional[str] = None
    description_written: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status in {
            OutcomeStatus.SAVED,
            OutcomeStatus.CONVERTED,
            OutcomeStatus.ORIGINAL_ONLY,
        }


class BatchSummary(BaseModel):
    """Aggregated outcomes for a batch of artifacts."""

    outcomes: List[ProcessingOutcome] = Field(default_factory=list)

    @property
    def processed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def skipped(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is OutcomeStatus.FAILED)

    def summary_line(self) -> str:
        """Return ``"N processed, M skipped"`` with a failure count when non-zero."""
        line = f"{self.processed} processed, {self.skipped} skipped"
        if self.failed:
            line += f", {self.failed} failed"
        return line


__all__ = [
    "ArtifactKind",
    "EXTENSION_KINDS",
    "IMAGE_EXTENSIONS",
    "Artifact",
    "OutcomeStatus",
    "ProcessingOutcome",
    "BatchSummary",
]
