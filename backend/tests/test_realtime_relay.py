from __future__ import annotations

import itertools
from datetime import datetime, timezone
from typing import Any

import pytest
from fastapi.websockets import WebSocketState

from app.core.errors import ForeignKeyViolation
from app.schemas import MessageRead
from meghna.realtime import MessageRelay, PresenceRegistry


class DummyWebSocket:
    def __init__(self) -> None:
        self.application_state = WebSocketState.CONNECTED
        self.sent: list[dict[str, Any]] = []

    async def send_json(self, payload: dict[str, Any]) -> None:
        self.sent.append(payload)


class BrokenWebSocket(DummyWebSocket):
    async def send_json(self, payload: dict[str, Any]) -> None:
        raise RuntimeError("socket went away")


class MemoryStore:
    def __init__(self, known_users: set[int]) -> None:
        self.known_users = known_users
        self.rows: list[MessageRead] = []
        self._ids = itertools.count(1)

    async def append(
        self, sender_id: int, receiver_id: int, content: str, attachment: str | None = None
    ) -> MessageRead:
        if not {sender_id, receiver_id} <= self.known_users:
            raise ForeignKeyViolation()
        record = MessageRead(
            id=next(self._ids),
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            attachment=attachment,
            created_at=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
        )
        self.rows.append(record)
        return record


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore({1, 2, 3})


@pytest.fixture()
def relay(store) -> MessageRelay:
    return MessageRelay(store, PresenceRegistry())


@pytest.mark.anyio("asyncio")
async def test_second_registration_evicts_first_channel():
    registry = PresenceRegistry()
    first, second = DummyWebSocket(), DummyWebSocket()

    assert await registry.register(7, first) is None
    evicted = await registry.register(7, second)

    assert evicted is first
    assert await registry.lookup(7) is second


@pytest.mark.anyio("asyncio")
async def test_closing_superseded_channel_keeps_newer_entry():
    registry = PresenceRegistry()
    first, second = DummyWebSocket(), DummyWebSocket()
    await registry.register(7, first)
    await registry.register(7, second)

    assert await registry.unregister(7, first) is False
    assert await registry.lookup(7) is second

    assert await registry.unregister(7, second) is True
    assert await registry.lookup(7) is None


@pytest.mark.anyio("asyncio")
async def test_lookup_skips_disconnected_sockets():
    registry = PresenceRegistry()
    websocket = DummyWebSocket()
    await registry.register(3, websocket)
    websocket.application_state = WebSocketState.DISCONNECTED

    assert await registry.lookup(3) is None
    assert await registry.online_user_ids() == {3}


@pytest.mark.anyio("asyncio")
async def test_deliver_forwards_to_receiver_and_echoes_to_origin(relay, store):
    sender_socket, receiver_socket = DummyWebSocket(), DummyWebSocket()
    await relay.registry.register(1, sender_socket)
    await relay.registry.register(2, receiver_socket)

    report = await relay.deliver(1, 2, "hi", origin=sender_socket)

    expected = {
        "type": "message",
        "id": 1,
        "senderId": 1,
        "receiverId": 2,
        "content": "hi",
        "attachment": None,
        "createdAt": "2026-03-01T12:00:00Z",
    }
    assert receiver_socket.sent == [expected]
    assert sender_socket.sent == [expected]
    assert report.forwarded and report.echoed
    assert len(store.rows) == 1


@pytest.mark.anyio("asyncio")
async def test_deliver_without_receiver_channel_still_persists(relay, store):
    sender_socket = DummyWebSocket()

    report = await relay.deliver(1, 2, "are you there?", origin=sender_socket)

    assert report.forwarded is False
    assert report.echoed is True
    assert [row.content for row in store.rows] == ["are you there?"]
    assert sender_socket.sent[0]["id"] == report.message.id


@pytest.mark.anyio("asyncio")
async def test_deliver_only_reaches_the_latest_channel(relay):
    old_socket, new_socket = DummyWebSocket(), DummyWebSocket()
    await relay.registry.register(2, old_socket)
    await relay.registry.register(2, new_socket)

    await relay.deliver(1, 2, "ping")

    assert old_socket.sent == []
    assert [frame["content"] for frame in new_socket.sent] == ["ping"]


@pytest.mark.anyio("asyncio")
async def test_deliver_to_self_sends_once(relay):
    websocket = DummyWebSocket()
    await relay.registry.register(1, websocket)

    await relay.deliver(1, 1, "note", origin=websocket)

    assert len(websocket.sent) == 1


@pytest.mark.anyio("asyncio")
async def test_rest_delivery_echoes_to_registered_sender_channel(relay):
    sender_socket = DummyWebSocket()
    await relay.registry.register(1, sender_socket)

    report = await relay.deliver(1, 3, "from the api")

    assert report.echoed is True
    assert sender_socket.sent[0]["receiverId"] == 3


@pytest.mark.anyio("asyncio")
async def test_failed_forward_is_not_retried(relay, store):
    sender_socket, broken = DummyWebSocket(), BrokenWebSocket()
    await relay.registry.register(2, broken)

    report = await relay.deliver(1, 2, "lost in transit", origin=sender_socket)

    assert report.forwarded is False
    assert report.echoed is True
    assert len(store.rows) == 1


@pytest.mark.anyio("asyncio")
async def test_persist_failure_sends_nothing(relay, store):
    sender_socket = DummyWebSocket()

    with pytest.raises(ForeignKeyViolation):
        await relay.deliver(1, 99, "nobody", origin=sender_socket)

    assert sender_socket.sent == []
    assert store.rows == []
