from __future__ import annotations

import asyncio
import logging
from typing import Any
from uuid import uuid4

from fastapi import WebSocket
from fastapi.websockets import WebSocketState

logger = logging.getLogger(__name__)


class ConnectionHub:
    """In-process registry of live WebSockets keyed by connection identity.

    Contract:
      - `connect(websocket)` accepts the socket and returns a fresh opaque identity.
      - `send(identity, payload)` is best-effort and never raises.

    Payloads should be JSON-serializable dicts.
    """

    def __init__(self) -> None:
        self._by_identity: dict[str, WebSocket] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> str:
        await websocket.accept()
        identity = uuid4().hex
        async with self._lock:
            self._by_identity[identity] = websocket
        return identity

    async def disconnect(self, identity: str) -> None:
        async with self._lock:
            self._by_identity.pop(identity, None)

    async def send(self, identity: str, message: dict[str, Any]) -> bool:
        async with self._lock:
            ws = self._by_identity.get(identity)

        if ws is None:
            return False
        if ws.application_state != WebSocketState.CONNECTED or ws.client_state != WebSocketState.CONNECTED:
            return False

        try:
            await ws.send_json(message)
        except Exception:
            logger.warning("Dropping %s message for %s: send failed", message.get("type"), identity, exc_info=True)
            async with self._lock:
                self._by_identity.pop(identity, None)
            return False
        return True
