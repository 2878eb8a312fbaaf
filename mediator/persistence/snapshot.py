"""File-based JSON snapshot of the sanction and report stores.

The snapshot is one document with two top-level arrays::

    {"reports": [...], "sanctions": [...]}

Writes replace the whole file through a temporary sibling and ``os.replace``
so a failed write never leaves a truncated snapshot behind. A missing, empty
or unparseable file loads as empty stores.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from mediator.reports.store import ReportStore
from mediator.sanctions.store import SanctionStore

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Loads and saves ``{reports, sanctions}`` at *path*."""

    def __init__(self, path: str | Path, sanctions: SanctionStore, reports: ReportStore) -> None:
        self.path = Path(path)
        self.sanctions = sanctions
        self.reports = reports

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_json(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Could not read snapshot %s: %s", self.path, e)
            return {}
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring malformed snapshot %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_json(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Repopulate both stores from disk. Never raises for bad files."""
        data = self._read_json()
        reports = data.get("reports")
        sanctions = data.get("sanctions")
        self.reports.load_records(reports if isinstance(reports, list) else [])
        self.sanctions.load_records(sanctions if isinstance(sanctions, list) else [])
        logger.info(
            "Loaded snapshot %s (%d reports, %d sanctions)",
            self.path,
            len(self.reports.list_reports()),
            len(self.sanctions.list_sanctions()),
        )

    def snapshot(self) -> dict:
        return {
            "reports": self.reports.to_records(),
            "sanctions": self.sanctions.to_records(),
        }

    def save(self) -> None:
        """Overwrite the snapshot file with the current state of both stores."""
        self._write_json(self.snapshot())
