"""Partner message relay with shadow moderation.

Messages from a sender without a partner, or from a muted/banned IP, are
dropped without telling the sender. Payloads are forwarded verbatim.
"""

from __future__ import annotations

from typing import Any

from mediator.chat.models import Connection, ServerEvent
from mediator.chat.registry import ConnectionRegistry
from mediator.sanctions.store import SanctionStore


class Relay:
    def __init__(self, registry: ConnectionRegistry, sanctions: SanctionStore) -> None:
        self._registry = registry
        self._sanctions = sanctions

    def relay_message(self, sender: Connection, payload: Any) -> bool:
        """Forward *payload* to *sender*'s partner. Returns True if delivered."""
        partner = self._registry.partner_of(sender)
        if partner is None:
            return False
        if not self._sanctions.can_send(sender.ip):
            return False
        partner.notify(ServerEvent.MESSAGE, payload)
        return True
