from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status

from tictactoe_live.api.deps import GameServices, get_services
from tictactoe_live.api.models import RoomListResponse, RoomView
from tictactoe_live.errors import ProtocolError
from tictactoe_live.protocol import parse_client_message, rejection_for

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def game_ws(websocket: WebSocket, services: GameServices = Depends(get_services)) -> None:
    hub = services.hub
    coordinator = services.coordinator

    identity = await hub.connect(websocket)
    await coordinator.connect(identity)

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", status.WS_1000_NORMAL_CLOSURE))
            # Text and binary frames carry the same JSON.
            raw = frame.get("text")
            if raw is None:
                raw = frame.get("bytes") or b""
            try:
                message = parse_client_message(raw)
            except ProtocolError as e:
                logger.warning("Rejected frame from %s: %s", identity, e)
                await hub.send(identity, rejection_for(e).to_message())
                continue
            await coordinator.handle(identity, message)
    except WebSocketDisconnect:
        await hub.disconnect(identity)
        await coordinator.disconnect(identity)
    except Exception:
        logger.exception("WebSocket error for %s", identity)
        await hub.disconnect(identity)
        await coordinator.disconnect(identity)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/rooms", response_model=RoomListResponse)
async def list_rooms_route(services: GameServices = Depends(get_services)) -> RoomListResponse:
    """Debug endpoint: every room the server knows about, identities redacted."""

    return RoomListResponse(rooms=[RoomView.from_room(room) for room in services.store.list_rooms()])


@router.get("/rooms/{room_code}", response_model=RoomView)
async def get_room_route(room_code: str, services: GameServices = Depends(get_services)) -> RoomView:
    room = services.store.get_room(room_code.strip().upper())
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return RoomView.from_room(room)
