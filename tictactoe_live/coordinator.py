"""Session coordination: drives rooms through waiting -> playing -> finished.

Every inbound action for a room runs its read-validate-commit-broadcast
sequence under that room's lock, so two moves against one room can never
both pass the turn check.
"""

from __future__ import annotations

import logging
import random
import string
from collections.abc import Callable

from tictactoe_live.api.models import (
    ClientMessage,
    CreateRoomMessage,
    ErrorMessage,
    JoinRoomMessage,
    JoinRoomResponse,
    LeaveRoomMessage,
    MakeMoveMessage,
    PlayerRecord,
    ResetGameMessage,
    Room,
    RoomCreated,
    RoomStatus,
    Symbol,
)
from tictactoe_live.board import Evaluation, apply_move, empty_board, evaluate, is_valid_move, next_turn
from tictactoe_live.broadcast import BroadcastGateway
from tictactoe_live.config import ServerSettings
from tictactoe_live.errors import (
    GameError,
    GameNotFinished,
    GameNotInProgress,
    InvalidMove,
    NotInRoom,
    NotYourTurn,
    RoomCreationFailed,
    RoomExists,
    RoomNotFound,
)
from tictactoe_live.fsm import RoomFSM
from tictactoe_live.room_store import RoomStore, Vacancy

logger = logging.getLogger(__name__)

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
ROOM_CODE_LENGTH = 6


def generate_room_code(rng: random.Random) -> str:
    return "".join(rng.choices(ROOM_CODE_ALPHABET, k=ROOM_CODE_LENGTH))


class SessionCoordinator:
    def __init__(
        self,
        *,
        store: RoomStore,
        gateway: BroadcastGateway,
        settings: ServerSettings | None = None,
        code_factory: Callable[[], str] | None = None,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._settings = settings or ServerSettings()
        if code_factory is None:
            rng = random.SystemRandom()
            code_factory = lambda: generate_room_code(rng)  # noqa: E731
        self._next_code = code_factory

    # -------------------- Connection lifecycle -------------------- #

    async def connect(self, identity: str) -> None:
        self._store.register_connection(identity)
        logger.info("Player connected: %s", identity)

    async def disconnect(self, identity: str) -> None:
        await self._leave_current_room(identity)
        self._store.unregister_connection(identity)
        logger.info("Player disconnected: %s", identity)

    # -------------------- Inbound messages -------------------- #

    async def handle(self, identity: str, message: ClientMessage) -> None:
        """Apply one validated client message; rejections go back to `identity` only."""

        try:
            if isinstance(message, CreateRoomMessage):
                await self.create_room(identity)
            elif isinstance(message, JoinRoomMessage):
                try:
                    await self.join_room(identity, message.payload.room_code)
                except GameError as e:
                    logger.info("Join rejected for %s: %s", identity, e)
                    await self._gateway.send(identity, JoinRoomResponse(success=False, error=e.message))
            elif isinstance(message, MakeMoveMessage):
                await self.make_move(identity, message.payload.room_code, message.payload.cell_index)
            elif isinstance(message, ResetGameMessage):
                await self.reset_game(identity, message.payload.room_code)
            elif isinstance(message, LeaveRoomMessage):
                await self.leave_room(identity)
        except GameError as e:
            logger.info("Rejected %s from %s: %s", type(message).__name__, identity, e)
            await self._gateway.send(identity, ErrorMessage(message=e.message, code=e.code))

    async def create_room(self, identity: str) -> RoomCreated:
        await self._leave_current_room(identity)

        code: str | None = None
        for _ in range(self._settings.room_code_attempts):
            candidate = self._next_code()
            try:
                self._store.create_room(candidate)
            except RoomExists:
                logger.debug("Room code collision on %s; retrying", candidate)
                continue
            code = candidate
            break

        if code is None:
            logger.warning("Room creation failed after %d attempts", self._settings.room_code_attempts)
            raise RoomCreationFailed()

        async with self._store.lock(code):
            symbol = self._store.join_room(identity, code)

        created = RoomCreated(room_code=code, symbol=symbol)
        await self._gateway.send(identity, created)
        logger.info("Room created: %s by player %s", code, identity)
        return created

    async def join_room(self, identity: str, code: str) -> Symbol:
        async with self._store.lock(code):
            room = self._store.get_room(code)
            if room is None:
                raise RoomNotFound()

            current = room.symbol_of(identity)
            if current is not None:
                # Already seated here; the seat is stable, just confirm it.
                await self._gateway.send(identity, JoinRoomResponse(success=True, symbol=current))
                return current

            # The store checks capacity before it gives up the current seat,
            # so a rejected join leaves the previous room untouched.
            previous = self._store.get_player(identity)
            symbol = self._store.join_room(identity, code)
            await self._gateway.send(identity, JoinRoomResponse(success=True, symbol=symbol))
            await self._gateway.broadcast_state(code)

        if previous is not None and previous.room_code is not None and previous.symbol is not None:
            await self._announce_vacancy(Vacancy(room_code=previous.room_code, symbol=previous.symbol), identity)

        logger.info("Player %s joined room %s as %s", identity, code, symbol.value)
        return symbol

    async def make_move(self, identity: str, code: str, cell_index: int) -> Evaluation:
        async with self._store.lock(code):
            room, player = self._require_seat(identity, code)

            if room.status != RoomStatus.playing:
                raise GameNotInProgress()
            if player.symbol != room.current_turn:
                raise NotYourTurn()
            if not is_valid_move(room.board, cell_index):
                raise InvalidMove()

            board = apply_move(room.board, cell_index, room.current_turn)
            result = evaluate(board)

            if result.is_terminal:
                fsm = RoomFSM(room)
                fsm.game_over()
                fsm.sync_status_to_model()
                self._store.update_room(
                    code,
                    board=board,
                    current_turn=next_turn(room.current_turn),
                    status=room.status,
                    winner=result.winner,
                    winning_line=result.winning_line,
                )
            else:
                self._store.update_room(code, board=board, current_turn=next_turn(room.current_turn))

            logger.info("Move made in room %s: player %s at position %d", code, room.current_turn.value, cell_index)
            if result.is_terminal:
                logger.info("Game over in room %s: %s", code, result.winner)

            await self._gateway.broadcast_state(code)

        return result

    async def reset_game(self, identity: str, code: str) -> None:
        async with self._store.lock(code):
            room, _ = self._require_seat(identity, code)

            if room.status != RoomStatus.finished:
                raise GameNotFinished()

            fsm = RoomFSM(room)
            fsm.rematch()
            fsm.sync_status_to_model()
            self._store.update_room(
                code,
                board=empty_board(),
                current_turn=Symbol.X,
                status=room.status,
                winner=None,
                winning_line=None,
            )
            logger.info("Game reset in room %s", code)

            await self._gateway.broadcast_state(code)

    async def leave_room(self, identity: str) -> Vacancy | None:
        return await self._leave_current_room(identity)

    # -------------------- Helpers -------------------- #

    def _require_seat(self, identity: str, code: str) -> tuple[Room, PlayerRecord]:
        room = self._store.get_room(code)
        player = self._store.get_player(identity)
        if room is None or player is None or player.room_code != code or player.symbol is None:
            raise NotInRoom()
        return room, player

    async def _leave_current_room(self, identity: str) -> Vacancy | None:
        player = self._store.get_player(identity)
        if player is None or player.room_code is None:
            return None

        code = player.room_code
        async with self._store.lock(code):
            # Re-read under the lock; a concurrent leave may have won.
            player = self._store.get_player(identity)
            if player is None or player.room_code != code or player.symbol is None:
                return None

            # Tell the opponent before the seat is cleared.
            await self._gateway.notify_disconnect(code, player.symbol, exclude_identity=identity)
            vacancy = self._store.leave_room(identity)
            await self._gateway.broadcast_state(code)

        logger.info("Player %s left room %s", identity, code)
        return vacancy

    async def _announce_vacancy(self, vacancy: Vacancy, identity: str) -> None:
        """Tell a room about a seat its occupant already gave up elsewhere."""

        async with self._store.lock(vacancy.room_code):
            await self._gateway.notify_disconnect(vacancy.room_code, vacancy.symbol, exclude_identity=identity)
            await self._gateway.broadcast_state(vacancy.room_code)
        logger.info("Player %s left room %s", identity, vacancy.room_code)
