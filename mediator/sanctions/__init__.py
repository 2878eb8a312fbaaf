"""Sanctions -- per-IP mute/ban state with absolute expiry and history."""

from mediator.sanctions.models import Sanction, SanctionClass, SanctionEvent, SanctionStatus
from mediator.sanctions.store import SanctionStore

__all__ = [
    "Sanction",
    "SanctionClass",
    "SanctionEvent",
    "SanctionStatus",
    "SanctionStore",
]
