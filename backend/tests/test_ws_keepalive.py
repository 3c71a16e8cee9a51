from __future__ import annotations

import time

from starlette.testclient import WebSocketTestSession

from app.api import ws as ws_module
from app.core.security import create_access_token, get_password_hash
from app.models import User


def test_chat_connection_survives_keepalive_timeout(client, session_factory, monkeypatch) -> None:
    """Ensure that the server side keepalive pings keep the socket open."""

    with session_factory() as session:
        user = User(
            name="Keepalive",
            email="keepalive@example.com",
            hashed_password=get_password_hash("hashed-secret"),
            is_verified=True,
        )
        session.add(user)
        session.commit()
        user_id = user.id

    token = create_access_token({"sub": str(user_id), "role": "user"})

    settings = ws_module.settings
    monkeypatch.setattr(settings, "websocket_keepalive_timeout_seconds", 0.1)
    monkeypatch.setattr(settings, "websocket_keepalive_ping_interval_seconds", 0.05)

    with client.websocket_connect("/ws/chat") as connection:
        connection.send_json({"type": "auth", "token": token})
        assert connection.receive_json() == {"type": "auth_ok", "userId": user_id}
        _assert_keepalive_sequence(connection)


def _assert_keepalive_sequence(connection: WebSocketTestSession) -> None:
    """Observe two keepalive pings with client responses to keep the connection active."""

    time.sleep(0.15)
    ping = connection.receive_json()
    assert ping["type"] == "ping"
    connection.send_json({"type": "pong"})

    time.sleep(0.12)
    ping_again = connection.receive_json()
    assert ping_again["type"] == "ping"
    connection.send_json({"type": "pong"})

    connection.send_json({"type": "ping"})
    pong = connection.receive_json()
    while pong["type"] == "ping":
        pong = connection.receive_json()
    assert pong["type"] == "pong"
