"""Process-wide service container shared by the routers.

Wires the sanction and report stores to the snapshot writer and the mediator.
The stores are loaded from disk when the container is first built.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from mediator.chat.mediator import Mediator
from mediator.config import Settings, load_settings
from mediator.persistence.snapshot import SnapshotStore
from mediator.persistence.writer import SnapshotWriter
from mediator.reports.store import ReportStore
from mediator.sanctions.store import SanctionStore

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    sanctions: SanctionStore
    reports: ReportStore
    snapshot: SnapshotStore
    writer: SnapshotWriter
    mediator: Mediator

    @classmethod
    def from_settings(cls, settings: Settings) -> "Services":
        sanctions = SanctionStore()
        reports = ReportStore()
        snapshot = SnapshotStore(settings.data_path, sanctions, reports)
        snapshot.load()
        writer = SnapshotWriter(snapshot, delay=settings.save_delay)
        sanctions.set_on_change(writer.schedule)
        reports.set_on_change(writer.schedule)
        return cls(
            settings=settings,
            sanctions=sanctions,
            reports=reports,
            snapshot=snapshot,
            writer=writer,
            mediator=Mediator(sanctions),
        )


_services: Optional[Services] = None


def get_services() -> Services:
    """Return the singleton Services instance, building it on first use."""
    global _services
    if _services is None:
        _services = Services.from_settings(load_settings())
    return _services


def reset_services(settings: Optional[Settings] = None) -> Services:
    """Replace the singleton, flushing the previous writer first."""
    global _services
    if _services is not None:
        _services.writer.close()
    _services = Services.from_settings(settings or load_settings())
    return _services
