"""Realtime ping/chat channel over a WebSocket.

Frames are JSON envelopes ``{"event": ..., "data": {...}}``. Pongs and chat
messages go to every connected socket, the sender included.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

router = APIRouter()

WELCOME = "server:welcome"
PING = "client:ping"
PONG = "server:pong"
CHAT = "chat:message"


def now_ms() -> int:
    return int(time.time() * 1000)


def envelope(event: str, data: dict[str, Any]) -> dict[str, Any]:
    return {"event": event, "data": data}


class ConnectionManager:

    def __init__(self) -> None:
        self.sockets: dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket) -> str:
        await websocket.accept()
        socket_id = uuid.uuid4().hex
        self.sockets[socket_id] = websocket
        logger.info("Socket %s connected. Total clients: %d", socket_id, len(self.sockets))
        await websocket.send_json(envelope(WELCOME, {
            "message": "Connected to the storefront channel",
            "socketId": socket_id,
        }))
        return socket_id

    def disconnect(self, socket_id: str) -> None:
        if self.sockets.pop(socket_id, None) is None:
            return
        logger.info("Socket %s disconnected. Total clients: %d", socket_id, len(self.sockets))

    async def broadcast(self, message: dict[str, Any]) -> None:
        dead = []
        for socket_id, websocket in list(self.sockets.items()):
            try:
                await websocket.send_json(message)
            except Exception as e:
                logger.error("Error broadcasting to socket %s: %s", socket_id, e)
                dead.append(socket_id)

        for socket_id in dead:
            self.disconnect(socket_id)

    async def handle(self, socket_id: str, raw: str) -> None:
        try:
            frame = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("Ignoring malformed frame from %s", socket_id)
            return
        if not isinstance(frame, dict):
            logger.debug("Ignoring non-object frame from %s", socket_id)
            return

        event = frame.get("event")
        data = frame.get("data")
        if not isinstance(data, dict):
            data = {}

        if event == PING:
            await self.broadcast(envelope(PONG, {"at": now_ms(), "data": data}))
        elif event == CHAT:
            text = data.get("text")
            text = text.strip() if isinstance(text, str) else ""
            if not text:
                return
            await self.broadcast(envelope(CHAT, {"at": now_ms(), "text": text}))
        else:
            logger.debug("Ignoring unknown event %r from %s", event, socket_id)


manager = ConnectionManager()


@router.websocket("/ws")
async def channel(websocket: WebSocket):
    socket_id = await manager.connect(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            raw = message.get("text")
            if raw is None:
                logger.debug("Ignoring binary frame from %s", socket_id)
                continue
            await manager.handle(socket_id, raw)
    except WebSocketDisconnect as e:
        logger.debug("Socket %s closed with code %s", socket_id, e.code)
    finally:
        manager.disconnect(socket_id)
