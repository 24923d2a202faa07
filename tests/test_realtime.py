"""WebSocket channel tests."""
import json
import logging

import pytest
from fastapi.testclient import TestClient

from main import app
from realtime import ConnectionManager


def _client() -> TestClient:
    return TestClient(app)


class StubSocket:

    def __init__(self, broken: bool = False) -> None:
        self.sent = []
        self.broken = broken

    async def send_json(self, message):
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(message)


class TestRealtimeChannel:

    def test_welcome_on_connect(self):
        with _client().websocket_connect("/ws") as ws:
            message = ws.receive_json()

        assert message["event"] == "server:welcome"
        assert message["data"]["socketId"]
        assert message["data"]["message"]

    def test_ping_is_answered_with_pong(self):
        with _client().websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"event": "client:ping", "data": {"note": "hi"}})
            message = ws.receive_json()

        assert message["event"] == "server:pong"
        assert message["data"]["data"] == {"note": "hi"}
        assert isinstance(message["data"]["at"], int)

    def test_chat_message_is_trimmed_and_echoed(self):
        with _client().websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"event": "chat:message", "data": {"text": "  hello  "}})
            message = ws.receive_json()

        assert message["event"] == "chat:message"
        assert message["data"]["text"] == "hello"

    def test_blank_chat_and_garbage_are_ignored(self):
        with _client().websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"event": "chat:message", "data": {"text": "   "}})
            ws.send_text("not json")
            ws.send_json({"event": "unknown"})
            ws.send_json({"event": "client:ping", "data": {}})

            # the first frame back is the pong, nothing was sent for the rest
            message = ws.receive_json()

        assert message["event"] == "server:pong"

    def test_binary_frame_is_ignored(self):
        with _client().websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_bytes(b"\x00\x01")
            ws.send_json({"event": "chat:message", "data": {"text": "still here"}})
            message = ws.receive_json()

        assert message["event"] == "chat:message"
        assert message["data"]["text"] == "still here"


@pytest.mark.asyncio
class TestConnectionManager:

    async def test_chat_reaches_every_socket(self):
        manager = ConnectionManager()
        first, second = StubSocket(), StubSocket()
        manager.sockets = {"a": first, "b": second}

        await manager.handle("a", json.dumps({"event": "chat:message", "data": {"text": " hi "}}))

        assert [m["data"]["text"] for m in first.sent] == ["hi"]
        assert [m["data"]["text"] for m in second.sent] == ["hi"]

    async def test_broken_socket_is_dropped(self):
        manager = ConnectionManager()
        healthy, broken = StubSocket(), StubSocket(broken=True)
        manager.sockets = {"a": healthy, "b": broken}

        await manager.handle("a", json.dumps({"event": "client:ping", "data": {}}))

        assert list(manager.sockets) == ["a"]
        assert healthy.sent[0]["event"] == "server:pong"

    async def test_empty_chat_sends_nothing(self):
        manager = ConnectionManager()
        socket = StubSocket()
        manager.sockets = {"a": socket}

        await manager.handle("a", json.dumps({"event": "chat:message", "data": {"text": ""}}))

        assert socket.sent == []

    async def test_dropped_socket_is_not_disconnected_twice(self, caplog):
        manager = ConnectionManager()
        manager.sockets = {"a": StubSocket(), "b": StubSocket(broken=True)}
        await manager.broadcast({"event": "server:pong", "data": {}})

        with caplog.at_level(logging.INFO, logger="realtime"):
            manager.disconnect("b")

        assert "disconnected" not in caplog.text
        assert list(manager.sockets) == ["a"]
