from __future__ import annotations


class GameError(ValueError):
    """A rejected request scoped to the single connection that made it.

    `code` is stable and machine-readable; the message is for humans.
    """

    code: str = "GAME_ERROR"
    default_message: str = "Request rejected"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class RoomExists(GameError):
    code = "ROOM_EXISTS"
    default_message = "Room already exists"


class RoomNotFound(GameError):
    code = "ROOM_NOT_FOUND"
    default_message = "Room not found"


class RoomFull(GameError):
    code = "ROOM_FULL"
    default_message = "Room is full"


class NotInRoom(GameError):
    code = "NOT_IN_ROOM"
    default_message = "Invalid room or player"


class NotYourTurn(GameError):
    code = "NOT_YOUR_TURN"
    default_message = "Not your turn"


class InvalidMove(GameError):
    code = "INVALID_MOVE"
    default_message = "Invalid move"


class GameNotInProgress(GameError):
    code = "GAME_NOT_IN_PROGRESS"
    default_message = "Game is not in progress"


class GameNotFinished(GameError):
    code = "GAME_NOT_FINISHED"
    default_message = "Game is not finished"


class RoomCreationFailed(GameError):
    code = "ROOM_CREATION_FAILED"
    default_message = "Unable to create room. Please try again."


class ConnectionNotRegistered(GameError):
    code = "CONNECTION_NOT_REGISTERED"
    default_message = "Connection is not registered"


class ProtocolError(ValueError):
    """Raised at the message boundary for payloads the coordinator never sees."""

    def __init__(self, message: str, *, message_type: str | None = None) -> None:
        super().__init__(message)
        self.message_type = message_type
