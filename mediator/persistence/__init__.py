"""Persistence -- single-file JSON snapshot of sanctions and reports."""

from mediator.persistence.snapshot import SnapshotStore
from mediator.persistence.writer import SnapshotWriter

__all__ = ["SnapshotStore", "SnapshotWriter"]
