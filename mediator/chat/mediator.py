"""Mediator facade -- connection lifecycle and event dispatch.

Every mutation of the registry, the waiting slot and the partner links goes
through this class under one lock, so pairing and relay operations are atomic
with respect to each other whichever thread or task calls them.

Per-connection states::

    unpaired --find_partner--> waiting --matched--> paired
    unpaired --find_partner (slot taken)--> paired
    paired   --next/end--> unpaired   (partner notified ``end``)
    waiting  --cancel/end--> unpaired
    any      --disconnect--> ended    (removed from the registry)
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from mediator.chat.matcher import Matcher
from mediator.chat.models import ClientEvent, Connection, ConnectionState, ServerEvent
from mediator.chat.registry import ConnectionRegistry
from mediator.chat.relay import Relay
from mediator.sanctions.store import SanctionStore

logger = logging.getLogger(__name__)


class Mediator:
    """Owns all live pairing state for one process."""

    def __init__(self, sanctions: SanctionStore) -> None:
        self._lock = threading.RLock()
        self.sanctions = sanctions
        self.registry = ConnectionRegistry()
        self.matcher = Matcher(self.registry)
        self.relay = Relay(self.registry, sanctions)
        self._handlers: dict[ClientEvent, Callable[[Connection, Any], None]] = {
            ClientEvent.FIND_PARTNER: self.find_partner,
            ClientEvent.MESSAGE: self.message,
            ClientEvent.NEXT: lambda conn, _data: self.next(conn),
            ClientEvent.END: lambda conn, _data: self.end(conn),
            ClientEvent.CANCEL: lambda conn, _data: self.cancel(conn),
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self, ip: str) -> Connection:
        """Admit a new connection from *ip*.

        A banned IP gets a connection already in the ``ended`` state with an
        ``end`` event queued; it is never registered and the caller must close
        the transport. Mutes do not block connecting.
        """
        conn = Connection(ip=ip)
        if self.sanctions.is_banned(ip):
            conn.state = ConnectionState.ended
            conn.notify(ServerEvent.END)
            logger.warning("Refused connection from banned address %s", ip)
            return conn
        with self._lock:
            self.registry.add(conn)
        logger.debug("Connection %s opened", conn.id)
        return conn

    def disconnect(self, conn: Connection) -> None:
        """Tear down *conn* immediately: free the slot, release the partner."""
        with self._lock:
            self.matcher.cancel_waiting(conn)
            self._release_partner(conn)
            self.registry.remove(conn.id)
            conn.state = ConnectionState.ended
        logger.debug("Connection %s closed", conn.id)

    def _release_partner(self, conn: Connection) -> None:
        partner = self.registry.unlink(conn)
        if partner is not None:
            partner.notify(ServerEvent.END)

    # ------------------------------------------------------------------
    # Client events
    # ------------------------------------------------------------------

    def find_partner(self, conn: Connection, preferences: Any = None) -> None:
        with self._lock:
            if not self.registry.is_live(conn.id) or conn.state is ConnectionState.paired:
                return
            self.matcher.request_pairing(conn, preferences)

    def message(self, conn: Connection, payload: Any) -> bool:
        with self._lock:
            return self.relay.relay_message(conn, payload)

    def next(self, conn: Connection) -> None:
        """End the current chat and search again right away."""
        with self._lock:
            if not self.registry.is_live(conn.id):
                return
            self._release_partner(conn)
            if self.matcher.request_pairing(conn, conn.preferences) is None:
                conn.notify(ServerEvent.MATCHED)

    def end(self, conn: Connection) -> None:
        """End the current chat (or pending search) and stay idle."""
        with self._lock:
            self.matcher.cancel_waiting(conn)
            self._release_partner(conn)

    def cancel(self, conn: Connection) -> None:
        with self._lock:
            self.matcher.cancel_waiting(conn)

    def dispatch(self, conn: Connection, event: str, data: Any = None) -> bool:
        """Route one inbound client event. Unknown events are ignored."""
        try:
            kind = ClientEvent(event)
        except ValueError:
            logger.debug("Ignoring unknown event %r from %s", event, conn.id)
            return False
        self._handlers[kind](conn, data)
        return True

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def state_of(self, conn: Connection) -> ConnectionState:
        with self._lock:
            return conn.state

    def connection_count(self) -> int:
        with self._lock:
            return len(self.registry)
