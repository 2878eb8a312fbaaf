"""Data models for live chat connections."""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ConnectionState(str, Enum):
    unpaired = "unpaired"
    waiting = "waiting"
    paired = "paired"
    ended = "ended"


class ClientEvent(str, Enum):
    """Events a client may send over its channel."""

    FIND_PARTNER = "find_partner"
    MESSAGE = "message"
    NEXT = "next"
    END = "end"
    CANCEL = "cancel"


class ServerEvent(str, Enum):
    """Events the server pushes to a client."""

    MATCHED = "matched"
    MESSAGE = "message"
    END = "end"


@dataclass(frozen=True)
class OutboundEvent:
    event: ServerEvent
    data: Any = None

    def to_wire(self) -> dict[str, Any]:
        return {"event": self.event.value, "data": self.data}


@dataclass
class Connection:
    """One live client link.

    ``ip`` stays server-side; nothing derived from it is ever sent to a peer.
    ``partner_id`` is only changed by the mediator while it holds its lock.
    """

    ip: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    partner_id: Optional[str] = None
    preferences: Any = None
    state: ConnectionState = ConnectionState.unpaired
    outbox: asyncio.Queue = field(default_factory=asyncio.Queue, repr=False, compare=False)

    @property
    def is_live(self) -> bool:
        return self.state is not ConnectionState.ended

    def notify(self, event: ServerEvent, data: Any = None) -> None:
        """Queue *event* for delivery to this client."""
        self.outbox.put_nowait(OutboundEvent(event, data))

    def drain(self) -> list[OutboundEvent]:
        """Pop everything currently queued (used when no sender task runs)."""
        events = []
        while not self.outbox.empty():
            events.append(self.outbox.get_nowait())
        return events


@dataclass(frozen=True)
class WaitingSlot:
    """The single pending pairing request."""

    connection_id: str
    preferences: Any = None
