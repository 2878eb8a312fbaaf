"""Tests for the chat WebSocket channel."""

import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from mediator.config import Settings
from web.backend.app.main import app
from web.backend.app.services import get_services, reset_services

MATCHED = {"event": "matched", "data": None}
END = {"event": "end", "data": None}


@pytest.fixture
def client():
    with tempfile.TemporaryDirectory() as tmpdir:
        reset_services(Settings(admin_key="k", data_path=Path(tmpdir) / "data.json", save_delay=0))
        with TestClient(app) as c:
            yield c


def _connect(client, ip):
    return client.websocket_connect("/ws", headers={"x-forwarded-for": ip})


def test_pair_message_and_next(client):
    with _connect(client, "10.0.0.1") as a, _connect(client, "10.0.0.2") as b:
        a.send_json({"event": "find_partner", "data": {"lang": "en"}})
        b.send_json({"event": "find_partner", "data": {}})
        assert a.receive_json() == MATCHED
        assert b.receive_json() == MATCHED

        a.send_json({"event": "message", "data": "hi"})
        assert b.receive_json() == {"event": "message", "data": "hi"}

        b.send_json({"event": "next"})
        assert a.receive_json() == END
        assert b.receive_json() == MATCHED

        # b is the one waiting now, so a newcomer is paired with it.
        with _connect(client, "10.0.0.3") as c:
            c.send_json({"event": "find_partner"})
            assert c.receive_json() == MATCHED
            assert b.receive_json() == MATCHED


def test_disconnect_notifies_partner(client):
    with _connect(client, "10.0.0.1") as a:
        with _connect(client, "10.0.0.2") as b:
            a.send_json({"event": "find_partner"})
            b.send_json({"event": "find_partner"})
            assert a.receive_json() == MATCHED
            assert b.receive_json() == MATCHED
        assert a.receive_json() == END


def test_muted_sender_is_silently_dropped(client):
    get_services().sanctions.apply_sanction("10.0.0.1", "15m")
    with _connect(client, "10.0.0.1") as a, _connect(client, "10.0.0.2") as b:
        a.send_json({"event": "find_partner"})
        b.send_json({"event": "find_partner"})
        assert a.receive_json() == MATCHED
        assert b.receive_json() == MATCHED

        b.send_json({"event": "message", "data": "hello"})
        assert a.receive_json() == {"event": "message", "data": "hello"}

        # Frames from one socket are handled in order, so the partner sees
        # the end without the muted message before it.
        a.send_json({"event": "message", "data": "blocked"})
        a.send_json({"event": "end"})
        assert b.receive_json() == END


def test_banned_ip_is_refused(client):
    get_services().sanctions.apply_sanction("6.6.6.6", "3d")
    with _connect(client, "6.6.6.6") as ws:
        assert ws.receive_json() == END
        with pytest.raises(WebSocketDisconnect):
            ws.receive_json()
    assert get_services().mediator.connection_count() == 0


def test_malformed_frames_ignored(client):
    with _connect(client, "10.0.0.1") as a, _connect(client, "10.0.0.2") as b:
        a.send_text("not json")
        a.send_json(["find_partner"])
        a.send_json({"event": "typing"})
        a.send_json({"event": "find_partner"})
        b.send_json({"event": "find_partner"})
        assert a.receive_json() == MATCHED
        assert b.receive_json() == MATCHED


def test_binary_frame_ends_session(client):
    with _connect(client, "10.0.0.1") as a, _connect(client, "10.0.0.2") as b:
        a.send_json({"event": "find_partner"})
        b.send_json({"event": "find_partner"})
        assert a.receive_json() == MATCHED
        assert b.receive_json() == MATCHED

        a.send_bytes(b"\x00\x01")
        assert b.receive_json() == END
        assert get_services().mediator.connection_count() == 1
