"""Folder naming and the drop processing pipeline."""

from .models import (
    EXTENSION_KINDS,
    IMAGE_EXTENSIONS,
    Artifact,
    ArtifactKind,
    BatchSummary,
    OutcomeStatus,
    ProcessingOutcome,
)
from .naming import (
    MAX_FOLDER_NAME_LENGTH,
    choose_base_name,
    file_timestamp,
    folder_timestamp,
    page_name,
    resolve_folder_name,
    sanitize_folder_name,
    synthetic_name,
)
from .pipeline import DropProcessor

__all__ = [
    "EXTENSION_KINDS",
    "IMAGE_EXTENSIONS",
    "Artifact",
    "ArtifactKind",
    "BatchSummary",
    "OutcomeStatus",
    "ProcessingOutcome",
    "MAX_FOLDER_NAME_LENGTH",
    "choose_base_name",
    "file_timestamp",
    "folder_timestamp",
    "page_name",
    "resolve_folder_name",
    "sanitize_folder_name",
    "synthetic_name",
    "DropProcessor",
]
