from __future__ import annotations

from collections import defaultdict
from collections.abc import Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from tictactoe_live.api.deps import build_services, get_services
from tictactoe_live.broadcast import BroadcastGateway
from tictactoe_live.coordinator import SessionCoordinator
from tictactoe_live.room_store import RoomStore


class RecordingSender:
    """MessageSender that keeps every delivered message per identity.

    Identities in `closed` behave like dropped sockets: sends return False.
    """

    def __init__(self) -> None:
        self.sent: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.closed: set[str] = set()

    async def send(self, identity: str, message: dict[str, Any]) -> bool:
        if identity in self.closed:
            return False
        self.sent[identity].append(message)
        return True

    def types(self, identity: str) -> list[str]:
        return [m["type"] for m in self.sent.get(identity, [])]

    def payloads(self, identity: str, message_type: str) -> list[dict[str, Any]]:
        return [m["payload"] for m in self.sent.get(identity, []) if m["type"] == message_type]

    def last(self, identity: str) -> dict[str, Any]:
        return self.sent[identity][-1]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture()
def store() -> RoomStore:
    return RoomStore()


@pytest.fixture()
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture()
def coordinator(store: RoomStore, sender: RecordingSender) -> SessionCoordinator:
    return SessionCoordinator(store=store, gateway=BroadcastGateway(store=store, sender=sender))


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    """TestClient wired to a fresh, isolated set of game services."""

    from tictactoe_live.main import app

    services = build_services()

    def _override() -> Any:
        return services

    app.dependency_overrides[get_services] = _override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
