import random
from collections import defaultdict

import pytest

from api.config import Settings
from api.hub import GameHub
from api.room_store import RoomStore
from game.engine import create_room, resolve_or_create_player
from game.phases import start_night_cycle
from game.rules import Delay, Role
from game.state import Room


class FakeSio:
    """Stands in for socketio.AsyncServer: records who each emit would reach."""

    def __init__(self):
        self.rooms: dict[str, set[str]] = defaultdict(set)
        self.sent: list[tuple[str, dict, set[str]]] = []

    async def emit(self, event, data=None, to=None, room=None, skip_sid=None, namespace=None):
        target = to or room
        recipients = set(self.rooms[target]) if target in self.rooms else {target}
        self.sent.append((event, data, recipients))

    async def enter_room(self, sid, room, namespace=None):
        self.rooms[room].add(sid)

    async def leave_room(self, sid, room, namespace=None):
        self.rooms[room].discard(sid)

    def received(self, sid: str, event: str | None = None) -> list[tuple[str, dict]]:
        return [(e, d) for e, d, r in self.sent if sid in r and (event is None or e == event)]

    def names(self, sid: str) -> list[str]:
        return [e for e, _ in self.received(sid)]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture()
def fake_sio():
    return FakeSio()


@pytest.fixture()
def hub(fake_sio):
    settings = Settings(delays=dict.fromkeys(Delay, 0.0))
    return GameHub(fake_sio, RoomStore(rng=random.Random(7)), settings, rng=random.Random(7))


def make_room(names=("Host", "P1", "P2", "P3")) -> Room:
    """Lobby with players id-0.. / sid-0.., the first one hosting."""
    room = create_room("TEST", names[0], "id-0", sid="sid-0", rng=random.Random(1))
    for i, name in enumerate(names[1:], start=1):
        resolve_or_create_player(room, f"id-{i}", name, f"sid-{i}")
    return room


def start_with_roles(room: Room, roles: list[Role]) -> Room:
    """Deal fixed roles in join order and enter the first night."""
    for player, role in zip(room.players, roles):
        player.role = role
        player.alive = True
        player.self_heal_used = False
    start_night_cycle(room)
    return room
