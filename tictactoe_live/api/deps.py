from __future__ import annotations

from dataclasses import dataclass

from fastapi.requests import HTTPConnection

from tictactoe_live.broadcast import BroadcastGateway
from tictactoe_live.config import ServerSettings
from tictactoe_live.coordinator import SessionCoordinator
from tictactoe_live.room_store import RoomStore
from tictactoe_live.websocket_hub import ConnectionHub


@dataclass(frozen=True, slots=True)
class GameServices:
    store: RoomStore
    hub: ConnectionHub
    coordinator: SessionCoordinator


def build_services(*, settings: ServerSettings | None = None) -> GameServices:
    store = RoomStore()
    hub = ConnectionHub()
    gateway = BroadcastGateway(store=store, sender=hub)
    coordinator = SessionCoordinator(store=store, gateway=gateway, settings=settings)
    return GameServices(store=store, hub=hub, coordinator=coordinator)


def get_services(conn: HTTPConnection) -> GameServices:
    services = getattr(conn.app.state, "services", None)
    if services is None:
        raise RuntimeError("Game services not initialized. Is the app started?")
    return services
