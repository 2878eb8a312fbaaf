"""Single-slot first-come-first-served matcher.

At most one connection waits at a time. The next arrival takes it; there is
no compatibility scoring, and preferences are stored but never used to choose
a partner.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from mediator.chat.models import Connection, ConnectionState, ServerEvent, WaitingSlot
from mediator.chat.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class Matcher:
    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry
        self._slot: Optional[WaitingSlot] = None

    @property
    def waiting(self) -> Optional[WaitingSlot]:
        return self._slot

    def request_pairing(self, conn: Connection, preferences: Any = None) -> Optional[Connection]:
        """Pair *conn* with the waiting connection, or make it the one waiting.

        Returns the new partner when a match happened (both sides have been
        notified ``matched``), else ``None``.
        """
        conn.preferences = preferences
        slot = self._slot
        if slot is not None and slot.connection_id != conn.id and self._registry.is_live(slot.connection_id):
            other = self._registry.get(slot.connection_id)
            self._slot = None
            self._registry.link(conn, other)
            other.notify(ServerEvent.MATCHED)
            conn.notify(ServerEvent.MATCHED)
            logger.info("Paired %s with %s", other.id, conn.id)
            return other

        self._slot = WaitingSlot(conn.id, preferences)
        conn.state = ConnectionState.waiting
        return None

    def cancel_waiting(self, conn: Connection) -> bool:
        """Release the slot if *conn* holds it."""
        if self._slot is None or self._slot.connection_id != conn.id:
            return False
        self._slot = None
        if conn.state is ConnectionState.waiting:
            conn.state = ConnectionState.unpaired
        return True
