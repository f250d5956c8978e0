"""Folder index errors."""


class StateError(Exception):
    """Base exception for folder index operations."""


class IndexCorruptedError(StateError):
    """Raised when an index file exists but cannot be parsed."""
