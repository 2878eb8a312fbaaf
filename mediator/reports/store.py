"""Append-only in-memory report store.

Reports are created through the public report endpoint and never mutated or
deleted. The store keeps arrival order and notifies ``on_change`` after each
append so the snapshot can be rewritten.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Any, Callable, Optional

from mediator.reports.models import Report

logger = logging.getLogger(__name__)


class ReportStore:
    """Ordered collection of abuse reports."""

    def __init__(
        self,
        clock: Optional[Callable[[], int]] = None,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._clock = clock or (lambda: int(time.time() * 1000))
        self._on_change = on_change
        self._lock = threading.Lock()
        self._reports: list[Report] = []

    def set_on_change(self, hook: Optional[Callable[[], None]]) -> None:
        self._on_change = hook

    def create_report(self, ip: str, fields: Optional[dict[str, Any]] = None) -> Report:
        """Stamp and append a new report. Returns it."""
        report = Report(
            id=uuid.uuid4().hex[:12],
            created_at=self._clock(),
            ip=ip,
            fields=dict(fields or {}),
        )
        with self._lock:
            self._reports.append(report)
        logger.info("Report %s received", report.id)
        if self._on_change is not None:
            self._on_change()
        return report

    def get_report(self, report_id: str) -> Optional[Report]:
        with self._lock:
            for r in self._reports:
                if r.id == report_id:
                    return r
        return None

    def list_reports(self) -> list[Report]:
        with self._lock:
            return list(self._reports)

    def to_records(self) -> list[dict[str, Any]]:
        with self._lock:
            return [r.to_dict() for r in self._reports]

    def load_records(self, records: list) -> None:
        loaded: list[Report] = []
        for d in records:
            if not isinstance(d, dict) or "id" not in d:
                continue
            try:
                loaded.append(Report.from_dict(d))
            except (TypeError, ValueError):
                continue
        with self._lock:
            self._reports = loaded
