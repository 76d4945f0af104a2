from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel


class Symbol(StrEnum):
    X = "X"
    O = "O"


class RoomStatus(StrEnum):
    waiting = "waiting"
    playing = "playing"
    finished = "finished"


DRAW: Literal["draw"] = "draw"

Cell = Symbol | None
Outcome = Symbol | Literal["draw"]
WinningLine = tuple[int, int, int]

ROOM_CODE_PATTERN = r"^[A-Z0-9]{6}$"
RoomCode = Annotated[str, StringConstraints(pattern=ROOM_CODE_PATTERN)]


class Room(BaseModel):
    code: str
    board: list[Cell] = Field(default_factory=lambda: [None] * 9)
    current_turn: Symbol = Symbol.X
    status: RoomStatus = RoomStatus.waiting
    winner: Outcome | None = None
    winning_line: WinningLine | None = None

    # symbol -> connection identity. Never serialized to clients.
    players: dict[Symbol, str] = Field(default_factory=dict)

    created_at: datetime

    def symbol_of(self, identity: str) -> Symbol | None:
        for symbol, occupant in self.players.items():
            if occupant == identity:
                return symbol
        return None

    @property
    def is_full(self) -> bool:
        return Symbol.X in self.players and Symbol.O in self.players


class PlayerRecord(BaseModel):
    identity: str
    room_code: str | None = None
    symbol: Symbol | None = None


# ---------------------------------------------------------------------------
# Wire format. Everything on the wire is `{"type": ..., "payload": {...}}`
# with camelCase payload keys.
# ---------------------------------------------------------------------------


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ServerPayload(_WireModel):
    message_type: ClassVar[str]
    omit_none: ClassVar[bool] = False

    def to_message(self) -> dict[str, Any]:
        return {
            "type": self.message_type,
            "payload": self.model_dump(mode="json", by_alias=True, exclude_none=self.omit_none),
        }


class RoomCreated(ServerPayload):
    message_type: ClassVar[str] = "roomCreated"

    room_code: str
    symbol: Symbol


class JoinRoomResponse(ServerPayload):
    message_type: ClassVar[str] = "joinRoomResponse"
    omit_none: ClassVar[bool] = True

    success: bool
    symbol: Symbol | None = None
    error: str | None = None


class GameStateUpdate(ServerPayload):
    message_type: ClassVar[str] = "gameStateUpdate"

    board: list[Cell]
    current_turn: Symbol
    status: RoomStatus
    winner: Outcome | None = None
    winning_line: WinningLine | None = None
    # Occupancy only; identities stay server-side.
    players: dict[Symbol, bool]

    @classmethod
    def from_room(cls, room: Room) -> "GameStateUpdate":
        return cls(
            board=list(room.board),
            current_turn=room.current_turn,
            status=room.status,
            winner=room.winner,
            winning_line=room.winning_line,
            players={symbol: symbol in room.players for symbol in Symbol},
        )


class PlayerDisconnected(ServerPayload):
    message_type: ClassVar[str] = "playerDisconnected"

    disconnected_player: Symbol


class ErrorMessage(ServerPayload):
    message_type: ClassVar[str] = "error"

    message: str
    code: str


# ---------------------------------------------------------------------------
# Client -> server messages (tagged by `type`).
# ---------------------------------------------------------------------------


class _RoomCodePayload(_WireModel):
    room_code: RoomCode

    @field_validator("room_code", mode="before")
    @classmethod
    def _normalize_room_code(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class EmptyPayload(_WireModel):
    pass


class JoinRoomPayload(_RoomCodePayload):
    pass


class MakeMovePayload(_RoomCodePayload):
    cell_index: int = Field(..., ge=0, le=8)


class ResetGamePayload(_RoomCodePayload):
    pass


class CreateRoomMessage(BaseModel):
    type: Literal["createRoom"]
    payload: EmptyPayload = Field(default_factory=EmptyPayload)


class JoinRoomMessage(BaseModel):
    type: Literal["joinRoom"]
    payload: JoinRoomPayload


class MakeMoveMessage(BaseModel):
    type: Literal["makeMove"]
    payload: MakeMovePayload


class ResetGameMessage(BaseModel):
    type: Literal["resetGame"]
    payload: ResetGamePayload


class LeaveRoomMessage(BaseModel):
    type: Literal["leaveRoom"]
    payload: EmptyPayload = Field(default_factory=EmptyPayload)


ClientMessage = Annotated[
    Union[CreateRoomMessage, JoinRoomMessage, MakeMoveMessage, ResetGameMessage, LeaveRoomMessage],
    Field(discriminator="type"),
]


class RoomView(BaseModel):
    """Debug/inspection view of a room; identities are redacted."""

    code: str
    created_at: datetime
    state: GameStateUpdate

    @classmethod
    def from_room(cls, room: Room) -> "RoomView":
        return cls(code=room.code, created_at=room.created_at, state=GameStateUpdate.from_room(room))


class RoomListResponse(BaseModel):
    rooms: list[RoomView]
