"""Boundary parsing for inbound WebSocket frames.

Only well-formed, known messages get past `parse_client_message`; the
coordinator never sees anything else.
"""

from __future__ import annotations

import json

from pydantic import TypeAdapter, ValidationError

from tictactoe_live.api.models import ClientMessage, ErrorMessage, JoinRoomResponse, ServerPayload
from tictactoe_live.errors import ProtocolError

CLIENT_MESSAGE_ADAPTER: TypeAdapter[ClientMessage] = TypeAdapter(ClientMessage)

CLIENT_MESSAGE_TYPES = frozenset({"createRoom", "joinRoom", "makeMove", "resetGame", "leaveRoom"})

PROTOCOL_ERROR_CODE = "PROTOCOL_ERROR"


def parse_client_message(raw: str | bytes) -> ClientMessage:
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ProtocolError("Invalid message format") from e

    if not isinstance(data, dict):
        raise ProtocolError("Invalid message format")

    msg_type = data.get("type")
    if not isinstance(msg_type, str) or msg_type not in CLIENT_MESSAGE_TYPES:
        raise ProtocolError("Unknown message type")

    # Clients may omit the payload for messages that carry none.
    if data.get("payload") is None:
        data = {**data, "payload": {}}

    try:
        return CLIENT_MESSAGE_ADAPTER.validate_python(data)
    except ValidationError as e:
        if msg_type == "joinRoom":
            raise ProtocolError("Invalid room code", message_type=msg_type) from e
        raise ProtocolError("Invalid message format", message_type=msg_type) from e


def rejection_for(error: ProtocolError) -> ServerPayload:
    """The reply a client gets for a frame the boundary refused."""

    if error.message_type == "joinRoom":
        return JoinRoomResponse(success=False, error=str(error))
    return ErrorMessage(message=str(error), code=PROTOCOL_ERROR_CODE)
