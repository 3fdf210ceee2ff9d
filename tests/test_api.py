"""API route tests."""

import random

from fastapi.testclient import TestClient

from api.main import app, store
from game.engine import resolve_or_create_player, start_game
from game.phases import finish_game
from game.rules import Winner

client = TestClient(app)


def _room_with_players(n=4):
    room = store.create("Host", "api-host", sid="api-sid-0")
    for i in range(1, n):
        resolve_or_create_player(room, f"api-{i}", f"P{i}", f"api-sid-{i}")
    return room


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_list_rooms():
    room = _room_with_players(1)
    r = client.get("/rooms")
    assert r.status_code == 200
    assert room.code in r.json()


def test_get_room_lobby():
    room = _room_with_players()
    r = client.get(f"/rooms/{room.code.lower()}")
    assert r.status_code == 200
    data = r.json()
    assert data["code"] == room.code
    assert data["phase"] == "LOBBY"
    assert data["host_id"] == "api-host"
    assert [p["name"] for p in data["players"]] == ["Host", "P1", "P2", "P3"]
    assert all(p["connected"] for p in data["players"])


def test_get_room_hides_living_roles():
    room = _room_with_players()
    start_game(room, "api-host", rng=random.Random(2))
    victim = room.players[1]
    victim.alive = False

    data = client.get(f"/rooms/{room.code}").json()
    by_id = {p["id"]: p for p in data["players"]}
    assert by_id[victim.id]["role"] == victim.role.value
    assert all(p["role"] is None for p in data["players"] if p["alive"])
    assert data["phase"] == "NIGHT_SLEEP"


def test_get_room_reveals_roles_after_game():
    room = _room_with_players()
    start_game(room, "api-host", rng=random.Random(2))
    finish_game(room, Winner.CITIZENS)

    data = client.get(f"/rooms/{room.code}").json()
    assert data["winner"] == "CITIZENS"
    assert all(p["role"] for p in data["players"])


def test_get_room_omits_night_picks():
    room = _room_with_players()
    start_game(room, "api-host", rng=random.Random(2))
    data = client.get(f"/rooms/{room.code}").json()
    kinds = [e["kind"] for e in data["events"]]
    assert kinds[:2] == ["game_start", "phase_change"]
    assert "night_pick" not in kinds


def test_get_room_not_found():
    r = client.get("/rooms/NOPE")
    assert r.status_code == 404
    assert r.json()["detail"] == "Room not found"
