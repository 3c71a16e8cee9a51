"""End-to-end tests for the chat WebSocket."""

from __future__ import annotations

from starlette.testclient import WebSocketTestSession

from app.api import ws as ws_module

CHAT_URL = "/ws/chat"


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _authenticate(connection: WebSocketTestSession, token: str) -> dict:
    connection.send_json({"type": "auth", "token": token})
    reply = connection.receive_json()
    assert reply["type"] == "auth_ok", reply
    return reply


def test_direct_message_reaches_receiver_and_sender(client, make_user, token_for):
    alice = make_user("alice@example.com", name="Alice")
    bob = make_user("bob@example.com", name="Bob")

    with client.websocket_connect(CHAT_URL) as alice_ws, client.websocket_connect(CHAT_URL) as bob_ws:
        assert _authenticate(alice_ws, token_for(alice))["userId"] == alice.id
        _authenticate(bob_ws, token_for(bob))

        alice_ws.send_json({"type": "message", "receiverId": bob.id, "content": "hi"})

        received = bob_ws.receive_json()
        echoed = alice_ws.receive_json()

    assert received == echoed
    assert received["type"] == "message"
    assert received["senderId"] == alice.id
    assert received["receiverId"] == bob.id
    assert received["content"] == "hi"
    assert isinstance(received["id"], int)
    assert received["createdAt"].endswith("Z")

    history = client.get(f"/api/messages/{alice.id}", headers=auth_headers(token_for(bob)))
    assert history.status_code == 200
    assert [item["content"] for item in history.json()] == ["hi"]
    assert history.json()[0]["id"] == received["id"]


def test_message_to_offline_user_is_persisted(client, make_user, token_for):
    alice = make_user("alice@example.com", name="Alice")
    bob = make_user("bob@example.com", name="Bob")

    with client.websocket_connect(CHAT_URL) as alice_ws:
        _authenticate(alice_ws, token_for(alice))
        alice_ws.send_json({"type": "message", "receiverId": bob.id, "content": "see this later"})
        echoed = alice_ws.receive_json()

    assert echoed["content"] == "see this later"
    history = client.get(f"/api/messages/{bob.id}", headers=auth_headers(token_for(alice)))
    assert [item["id"] for item in history.json()] == [echoed["id"]]


def test_send_before_auth_is_rejected(client, make_user):
    bob = make_user("bob@example.com", name="Bob")

    with client.websocket_connect(CHAT_URL) as connection:
        connection.send_json({"type": "message", "receiverId": bob.id, "content": "hello?"})
        error = connection.receive_json()

    assert error == {
        "type": "error",
        "code": "unauthorized",
        "detail": "Authenticate before sending messages",
    }


def test_handshake_without_token_is_rejected_by_default(client, make_user):
    alice = make_user("alice@example.com", name="Alice")

    with client.websocket_connect(CHAT_URL) as connection:
        connection.send_json({"type": "auth", "userId": alice.id})
        error = connection.receive_json()

        assert error["type"] == "error"
        assert error["code"] == "unauthorized"

        connection.send_json({"type": "ping"})
        assert connection.receive_json() == {"type": "pong"}


def test_handshake_with_invalid_token(client):
    with client.websocket_connect(CHAT_URL) as connection:
        connection.send_json({"type": "auth", "token": "garbage"})
        error = connection.receive_json()

    assert error["code"] == "unauthorized"


def test_handshake_user_id_must_match_token(client, make_user, token_for):
    alice = make_user("alice@example.com", name="Alice")
    bob = make_user("bob@example.com", name="Bob")

    with client.websocket_connect(CHAT_URL) as connection:
        connection.send_json({"type": "auth", "token": token_for(alice), "userId": bob.id})
        error = connection.receive_json()

    assert error["code"] == "unauthorized"


def test_trusted_handshake_accepts_bare_user_id(client, make_user, monkeypatch):
    alice = make_user("alice@example.com", name="Alice")
    monkeypatch.setattr(ws_module.settings, "ws_trust_client_user_id", True)

    with client.websocket_connect(CHAT_URL) as connection:
        connection.send_json({"type": "auth", "userId": alice.id})
        reply = connection.receive_json()

        connection.send_json({"type": "auth", "userId": 4242})
        error = connection.receive_json()

    assert reply == {"type": "auth_ok", "userId": alice.id}
    assert error["code"] == "already_authenticated"


def test_trusted_handshake_rejects_unknown_user(client, monkeypatch):
    monkeypatch.setattr(ws_module.settings, "ws_trust_client_user_id", True)

    with client.websocket_connect(CHAT_URL) as connection:
        connection.send_json({"type": "auth", "userId": 4242})
        error = connection.receive_json()

    assert error["code"] == "not_found"


def test_second_auth_on_same_channel(client, make_user, token_for):
    alice = make_user("alice@example.com", name="Alice")

    with client.websocket_connect(CHAT_URL) as connection:
        _authenticate(connection, token_for(alice))
        connection.send_json({"type": "auth", "token": token_for(alice)})
        error = connection.receive_json()

    assert error["code"] == "already_authenticated"


def test_newer_channel_replaces_older_one(client, make_user, token_for):
    alice = make_user("alice@example.com", name="Alice")
    bob = make_user("bob@example.com", name="Bob")

    with client.websocket_connect(CHAT_URL) as bob_ws:
        _authenticate(bob_ws, token_for(bob))

        with client.websocket_connect(CHAT_URL) as second_ws:
            with client.websocket_connect(CHAT_URL) as first_ws:
                _authenticate(first_ws, token_for(alice))
                _authenticate(second_ws, token_for(alice))

                bob_ws.send_json({"type": "message", "receiverId": alice.id, "content": "one"})
                assert second_ws.receive_json()["content"] == "one"
                assert bob_ws.receive_json()["content"] == "one"

                # The evicted channel stays open but no longer receives messages.
                first_ws.send_json({"type": "ping"})
                assert first_ws.receive_json() == {"type": "pong"}

            # Closing the evicted channel must not unregister the newer one.
            bob_ws.send_json({"type": "message", "receiverId": alice.id, "content": "two"})
            assert second_ws.receive_json()["content"] == "two"
            assert bob_ws.receive_json()["content"] == "two"


def test_malformed_frames_get_error_frames(client, make_user, token_for):
    alice = make_user("alice@example.com", name="Alice")

    with client.websocket_connect(CHAT_URL) as connection:
        _authenticate(connection, token_for(alice))

        connection.send_text("{not json")
        invalid = connection.receive_json()

        connection.send_json({"type": "typing"})
        unknown = connection.receive_json()

        connection.send_json({"type": "message", "receiverId": 999, "content": "nobody home"})
        missing = connection.receive_json()

    assert invalid["code"] == "invalid_payload"
    assert unknown["code"] == "unknown_type"
    assert missing["code"] == "foreign_key_violation"


def test_plain_text_ping(client):
    with client.websocket_connect(CHAT_URL) as connection:
        connection.send_text("ping")
        assert connection.receive_json() == {"type": "pong"}


def test_rest_send_pushes_to_live_channels(client, make_user, token_for):
    alice = make_user("alice@example.com", name="Alice")
    bob = make_user("bob@example.com", name="Bob")

    with client.websocket_connect(CHAT_URL) as bob_ws:
        _authenticate(bob_ws, token_for(bob))

        response = client.post(
            "/api/messages",
            json={"receiverId": bob.id, "content": "sent over http"},
            headers=auth_headers(token_for(alice)),
        )
        assert response.status_code == 201, response.text

        pushed = bob_ws.receive_json()

    assert pushed["id"] == response.json()["id"]
    assert pushed["content"] == "sent over http"


def test_non_integer_receiver_is_rejected_not_coerced(client, make_user, token_for):
    alice = make_user("alice@example.com", name="Alice")

    with client.websocket_connect(CHAT_URL) as connection:
        _authenticate(connection, token_for(alice))
        connection.send_json({"type": "message", "receiverId": True, "content": "x"})
        error = connection.receive_json()

    assert error["type"] == "error"
    assert error["code"] == "invalid_payload"
    history = client.get(f"/api/messages/{alice.id}", headers=auth_headers(token_for(alice)))
    assert history.json() == []
