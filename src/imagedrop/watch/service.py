"""Inbox watch service feeding dropped files into the drop pipeline."""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from imagedrop.config import ImageDropConfig
from imagedrop.organization import Artifact, BatchSummary, DropProcessor, OutcomeStatus

LOGGER = logging.getLogger(__name__)

_KEPT_STATUSES = {OutcomeStatus.FAILED, OutcomeStatus.SKIPPED}


@dataclass(slots=True)
class InboxBatchResult:
    """Outcome of one processed inbox batch.

    Attributes:
        batch_id: Sequential batch number, starting at 1.
        summary: Pipeline outcomes for the batch.
        triggered_paths: Inbox files that made up the batch.
        consumed_paths: Inbox files removed after being organized.
    """

    batch_id: int
    summary: BatchSummary
    triggered_paths: list[Path]
    consumed_paths: list[Path] = field(default_factory=list)


class InboxWatcher:
    """Treat files appearing in an inbox directory as real drops."""

    def __init__(
        self,
        config: ImageDropConfig,
        processor: DropProcessor,
        inbox: Path,
        *,
        debounce_override: Optional[float] = None,
    ) -> None:
        """Initialize the watcher.

        Args:
            config: Loaded ImageDrop configuration.
            processor: Pipeline used for every batch.
            inbox: Directory to monitor (non-recursive).
            debounce_override: Optional debounce interval override in seconds.
        """
        self._processor = processor
        self._inbox = inbox.expanduser().resolve()
        self._consume = config.watch.consume_inbox
        self._debounce_seconds = (
            max(0.1, debounce_override)
            if debounce_override and debounce_override > 0
            else max(0.1, config.watch.debounce_seconds)
        )
        self._observer: Optional[Observer] = None
        self._queue: queue.Queue[Optional[Path]] = queue.Queue()
        self._stop_event = threading.Event()
        self._batch_counter = 0

    @property
    def inbox(self) -> Path:
        """Return the monitored inbox directory."""
        return self._inbox

    def process_once(self) -> Optional[InboxBatchResult]:
        """Process the files currently in the inbox.

        Returns:
            Optional[InboxBatchResult]: The batch result, or ``None`` when the
            inbox holds no files.
        """
        self._inbox.mkdir(parents=True, exist_ok=True)
        files = sorted(
            child
            for child in self._inbox.iterdir()
            if child.is_file() and not child.name.startswith(".")
        )
        return self._run_batch(files)

    def watch(self, callback: Callable[[InboxBatchResult], None]) -> None:
        """Process inbox events until :meth:`stop` is called.

        Args:
            callback: Callable invoked with each completed batch result.
        """
        if self._observer is not None:
            raise RuntimeError("InboxWatcher is already running.")

        self._inbox.mkdir(parents=True, exist_ok=True)
        self._stop_event.clear()
        self._observer = Observer()
        self._observer.schedule(_InboxEventHandler(self._queue), str(self._inbox), recursive=False)
        self._observer.start()
        LOGGER.info("Watching %s", self._inbox)
        try:
            self._run_loop(callback)
        finally:
            self.stop()

    def stop(self) -> None:
        """Stop the observer and unblock the processing loop."""
        self._stop_event.set()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
        self._queue.put(None)

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _run_loop(self, callback: Callable[[InboxBatchResult], None]) -> None:
        pending: set[Path] = set()
        flush_deadline: Optional[float] = None

        while not self._stop_event.is_set():
            timeout: Optional[float] = None
            if flush_deadline is not None:
                timeout = max(0.0, flush_deadline - time.monotonic())

            try:
                path = self._queue.get(timeout=timeout)
            except queue.Empty:
                if pending:
                    result = self._run_batch(sorted(pending))
                    pending.clear()
                    if result is not None:
                        callback(result)
                flush_deadline = None
                continue

            if path is None:
                break
            if not path.is_file():
                continue

            pending.add(path)
            flush_deadline = time.monotonic() + self._debounce_seconds

    def _run_batch(self, paths: Iterable[Path]) -> Optional[InboxBatchResult]:
        candidates = [path for path in paths if path.is_file()]
        if not candidates:
            return None

        summary = BatchSummary()
        consumed: list[Path] = []
        for path in candidates:
            outcome = self._processor.process(Artifact.from_path(path))
            summary.outcomes.append(outcome)
            if self._consume and outcome.status not in _KEPT_STATUSES:
                try:
                    path.unlink()
                except OSError as exc:
                    LOGGER.warning("Could not remove %s from inbox: %s", path, exc)
                else:
                    consumed.append(path)

        self._batch_counter += 1
        LOGGER.info("Inbox batch %d: %s", self._batch_counter, summary.summary_line())
        return InboxBatchResult(
            batch_id=self._batch_counter,
            summary=summary,
            triggered_paths=candidates,
            consumed_paths=consumed,
        )


class _InboxEventHandler(FileSystemEventHandler):
    """Forward file events into the watcher queue."""

    def __init__(self, queue_handle: queue.Queue[Optional[Path]]) -> None:
        self._queue = queue_handle

    def on_created(self, event: FileSystemEvent) -> None:
        self._enqueue(event.src_path, event.is_directory)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._enqueue(event.src_path, event.is_directory)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._enqueue(getattr(event, "dest_path", event.src_path), event.is_directory)

    def _enqueue(self, raw_path, is_directory: bool) -> None:
        if is_directory:
            return
        if isinstance(raw_path, bytes):
            raw_path = raw_path.decode()
        path = Path(raw_path)
        if path.name.startswith("."):
            return
        self._queue.put(path)
