"""Debounced background writer for the snapshot file.

Store mutations call :meth:`SnapshotWriter.schedule`; the actual write runs
on a timer thread after ``delay`` seconds, so a burst of mutations costs one
write and the request path never waits on disk. Write failures are logged and
swallowed: the mutation that triggered them has already succeeded in memory.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from mediator.persistence.snapshot import SnapshotStore

logger = logging.getLogger(__name__)


class SnapshotWriter:
    """Coalesces save requests into delayed whole-file writes.

    A ``delay`` of zero or less writes synchronously inside ``schedule``.
    """

    def __init__(self, store: SnapshotStore, delay: float = 0.5) -> None:
        self._store = store
        self._delay = delay
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._closed = False
        self.failures = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def schedule(self) -> None:
        """Request a snapshot write."""
        if self._delay <= 0:
            self.flush()
            return
        with self._lock:
            if self._closed or self._timer is not None:
                return
            self._timer = threading.Timer(self._delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            self._timer = None
        self._write()

    def _write(self) -> None:
        with self._write_lock:
            try:
                self._store.save()
            except Exception:
                self.failures += 1
                logger.exception("Failed to write snapshot %s", self._store.path)

    def flush(self) -> None:
        """Cancel any pending timer and write now."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        self._write()

    def close(self) -> None:
        """Write outstanding state and stop accepting scheduled writes."""
        with self._lock:
            had_pending = self._timer is not None
            self._closed = True
        if had_pending:
            self.flush()
