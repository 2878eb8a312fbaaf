"""Chat WebSocket endpoint.

Frames are JSON objects ``{"event": <name>, "data": <payload>}``. Inbound
frames are dispatched to the mediator; outbound events are queued on the
connection and written by a per-connection sender task.
"""

from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from mediator.chat.models import Connection
from mediator.utils.client_ip import client_ip
from web.backend.app.services import get_services

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


async def _message_sender(websocket: WebSocket, conn: Connection) -> None:
    """Write queued events to the socket until cancelled or the socket dies."""
    try:
        while True:
            event = await conn.outbox.get()
            await websocket.send_json(event.to_wire())
    except (WebSocketDisconnect, RuntimeError, OSError):
        logger.debug("Sender for %s stopped", conn.id)


def _parse_frame(raw: str):
    try:
        frame = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
        return None
    return frame


@router.websocket("/ws")
async def chat_socket(websocket: WebSocket):
    mediator = get_services().mediator
    await websocket.accept()
    ip = client_ip(websocket.headers, websocket.client.host if websocket.client else None)
    conn = mediator.connect(ip)

    if not conn.is_live:
        for event in conn.drain():
            await websocket.send_json(event.to_wire())
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    sender = asyncio.create_task(_message_sender(websocket, conn))
    try:
        while True:
            raw = await websocket.receive_text()
            frame = _parse_frame(raw)
            if frame is None:
                logger.debug("Dropping malformed frame from %s", conn.id)
                continue
            mediator.dispatch(conn, frame["event"], frame.get("data"))
    except WebSocketDisconnect:
        pass
    except KeyError:
        # receive_text() on a binary frame; the socket is not usable for chat.
        logger.debug("Non-text frame from %s, closing", conn.id)
    finally:
        mediator.disconnect(conn)
        sender.cancel()
        try:
            await sender
        except asyncio.CancelledError:
            pass
