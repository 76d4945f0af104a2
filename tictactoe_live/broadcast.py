from __future__ import annotations

from typing import Any, Protocol

from tictactoe_live.api.models import GameStateUpdate, PlayerDisconnected, ServerPayload, Symbol
from tictactoe_live.room_store import RoomStore


class MessageSender(Protocol):
    async def send(self, identity: str, message: dict[str, Any]) -> bool:
        """Deliver one message; return False if the channel is gone."""
        ...


class BroadcastGateway:
    """Pushes room views to the connections seated in a room.

    Delivery only: no game rules, no retries, no queueing.
    """

    def __init__(self, *, store: RoomStore, sender: MessageSender) -> None:
        self._store = store
        self._sender = sender

    async def send(self, identity: str, payload: ServerPayload) -> bool:
        return await self._sender.send(identity, payload.to_message())

    async def broadcast_state(self, code: str) -> int:
        room = self._store.get_room(code)
        if room is None:
            return 0

        message = GameStateUpdate.from_room(room).to_message()
        delivered = 0
        for symbol in Symbol:
            identity = room.players.get(symbol)
            if identity is not None and await self._sender.send(identity, message):
                delivered += 1
        return delivered

    async def notify_disconnect(self, code: str, symbol: Symbol, exclude_identity: str) -> int:
        room = self._store.get_room(code)
        if room is None:
            return 0

        message = PlayerDisconnected(disconnected_player=symbol).to_message()
        delivered = 0
        for other in Symbol:
            identity = room.players.get(other)
            if identity is None or identity == exclude_identity:
                continue
            if await self._sender.send(identity, message):
                delivered += 1
        return delivered
