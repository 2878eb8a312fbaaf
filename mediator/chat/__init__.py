"""Chat core -- connection registry, pairing, relay and lifecycle."""

from mediator.chat.matcher import Matcher
from mediator.chat.mediator import Mediator
from mediator.chat.models import ClientEvent, Connection, ConnectionState, OutboundEvent, ServerEvent
from mediator.chat.registry import ConnectionRegistry
from mediator.chat.relay import Relay

__all__ = [
    "ClientEvent",
    "Connection",
    "ConnectionRegistry",
    "ConnectionState",
    "Matcher",
    "Mediator",
    "OutboundEvent",
    "Relay",
    "ServerEvent",
]
