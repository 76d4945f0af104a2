from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from tictactoe_live.api.models import PlayerRecord, Room, Symbol
from tictactoe_live.board import empty_board
from tictactoe_live.errors import ConnectionNotRegistered, RoomExists, RoomFull, RoomNotFound
from tictactoe_live.fsm import RoomFSM
from tictactoe_live.lock import RoomLocks


def _now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True, slots=True)
class Vacancy:
    """What a leave freed up: the room and the seat."""

    room_code: str
    symbol: Symbol


class RoomStore:
    """In-memory owner of every room and connection record.

    All mutation goes through these methods; lookups hand out copies so
    nobody can change stored state behind the store's back. Methods are
    synchronous and never await, so each one is atomic on the event loop.
    Read-validate-write sequences that span several calls should run under
    `lock(code)`.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _now) -> None:
        self._rooms: dict[str, Room] = {}
        self._players: dict[str, PlayerRecord] = {}
        self._locks = RoomLocks()
        self._clock = clock

    def lock(self, code: str) -> AbstractAsyncContextManager[None]:
        return self._locks.hold(code)

    # -------------------- Rooms -------------------- #

    def create_room(self, code: str) -> Room:
        if code in self._rooms:
            raise RoomExists(f"Room {code} already exists")
        room = Room(code=code, created_at=self._clock())
        self._rooms[code] = room
        return room.model_copy(deep=True)

    def get_room(self, code: str) -> Room | None:
        room = self._rooms.get(code)
        if room is None:
            return None
        return room.model_copy(deep=True)

    def list_rooms(self) -> list[Room]:
        return [self._rooms[code].model_copy(deep=True) for code in sorted(self._rooms)]

    def update_room(self, code: str, **fields: Any) -> None:
        room = self._rooms.get(code)
        if room is None:
            return
        # Re-validate so a bad field never lands in the authoritative copy.
        self._rooms[code] = Room.model_validate({**room.model_dump(), **fields})

    # -------------------- Connections -------------------- #

    def register_connection(self, identity: str) -> PlayerRecord:
        player = self._players.get(identity)
        if player is None:
            player = PlayerRecord(identity=identity)
            self._players[identity] = player
        return player.model_copy()

    def unregister_connection(self, identity: str) -> Vacancy | None:
        vacancy = self.leave_room(identity)
        self._players.pop(identity, None)
        return vacancy

    def get_player(self, identity: str) -> PlayerRecord | None:
        player = self._players.get(identity)
        if player is None:
            return None
        return player.model_copy()

    # -------------------- Seats -------------------- #

    def join_room(self, identity: str, code: str) -> Symbol:
        player = self._players.get(identity)
        if player is None:
            raise ConnectionNotRegistered()

        room = self._rooms.get(code)
        if room is None:
            raise RoomNotFound()

        if player.room_code is not None and player.room_code != code and room.is_full:
            raise RoomFull()

        # One room per connection: drop any current seat first.
        if player.room_code is not None:
            self.leave_room(identity)

        if room.is_full:
            raise RoomFull()

        symbol = Symbol.X if Symbol.X not in room.players else Symbol.O
        room.players[symbol] = identity
        player.room_code = code
        player.symbol = symbol

        if room.is_full:
            fsm = RoomFSM(room)
            fsm.opponent_joined()
            fsm.sync_status_to_model()

        return symbol

    def leave_room(self, identity: str) -> Vacancy | None:
        """Vacate the identity's seat, if any.

        Losing an occupant always sends the room back to a fresh waiting state;
        a remaining occupant keeps its seat and waits for a new opponent.
        """

        player = self._players.get(identity)
        if player is None or player.room_code is None or player.symbol is None:
            return None

        vacancy = Vacancy(room_code=player.room_code, symbol=player.symbol)
        room = self._rooms.get(player.room_code)
        if room is not None and room.players.get(player.symbol) == identity:
            del room.players[player.symbol]
            fsm = RoomFSM(room)
            fsm.occupant_lost()
            fsm.sync_status_to_model()
            room.board = empty_board()
            room.current_turn = Symbol.X
            room.winner = None
            room.winning_line = None

        player.room_code = None
        player.symbol = None
        return vacancy
