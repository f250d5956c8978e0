"""Inbox monitoring."""

from .service import InboxBatchResult, InboxWatcher

__all__ = ["InboxBatchResult", "InboxWatcher"]
