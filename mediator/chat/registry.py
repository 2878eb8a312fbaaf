"""Registry of live connections and their partner links.

Keeps partner pointers symmetric: :meth:`link` and :meth:`unlink` always
update both sides. Callers serialize access (see ``Mediator``).
"""

from __future__ import annotations

from typing import Iterator, Optional

from mediator.chat.models import Connection, ConnectionState


class ConnectionRegistry:
    """Arena of live connections indexed by id."""

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def __iter__(self) -> Iterator[Connection]:
        return iter(list(self._connections.values()))

    def add(self, conn: Connection) -> None:
        self._connections[conn.id] = conn

    def remove(self, conn_id: str) -> Optional[Connection]:
        return self._connections.pop(conn_id, None)

    def get(self, conn_id: Optional[str]) -> Optional[Connection]:
        if conn_id is None:
            return None
        return self._connections.get(conn_id)

    def is_live(self, conn_id: str) -> bool:
        conn = self._connections.get(conn_id)
        return conn is not None and conn.is_live

    def partner_of(self, conn: Connection) -> Optional[Connection]:
        return self.get(conn.partner_id)

    def link(self, a: Connection, b: Connection) -> None:
        a.partner_id = b.id
        b.partner_id = a.id
        a.state = b.state = ConnectionState.paired

    def unlink(self, conn: Connection) -> Optional[Connection]:
        """Break *conn*'s pairing. Returns the former partner, if still registered."""
        partner = self.partner_of(conn)
        conn.partner_id = None
        if conn.state is ConnectionState.paired:
            conn.state = ConnectionState.unpaired
        if partner is not None and partner.partner_id == conn.id:
            partner.partner_id = None
            partner.state = ConnectionState.unpaired
        return partner
