"""Room store tests."""

import random

import pytest

from api.room_store import RoomStore, normalize_code
from game.errors import InvalidInput
from game.rules import ROOM_CODE_ALPHABET, ROOM_CODE_LENGTH


def test_create_assigns_short_code():
    store = RoomStore(rng=random.Random(0))
    room = store.create("Host", "h1", sid="s1")
    assert len(room.code) == ROOM_CODE_LENGTH
    assert set(room.code) <= set(ROOM_CODE_ALPHABET)
    assert room.code in store
    assert store.get(room.code) is room


def test_codes_are_unique():
    store = RoomStore(rng=random.Random(0))
    codes = {store.create(f"H{i}", f"h{i}").code for i in range(200)}
    assert len(codes) == 200
    assert sorted(store.list_codes()) == sorted(codes)


def test_get_is_case_insensitive():
    store = RoomStore(rng=random.Random(1))
    room = store.create("Host", "h1")
    assert store.get(f"  {room.code.lower()} ") is room
    assert store.get("nope") is None
    assert store.get(None) is None


def test_create_validates_host():
    store = RoomStore()
    with pytest.raises(InvalidInput):
        store.create("", "h1")
    assert len(store) == 0


def test_delete():
    store = RoomStore()
    room = store.create("Host", "h1")
    store.delete(room.code.lower())
    assert room.code not in store


@pytest.mark.parametrize("raw,expected", [("ab12", "AB12"), (" Xy9z ", "XY9Z"), (None, "")])
def test_normalize_code(raw, expected):
    assert normalize_code(raw) == expected


def test_reap_idle_only_takes_quiet_disconnected_rooms():
    store = RoomStore(idle_ttl_sec=100)
    busy = store.create("A", "a", sid="sid-a")
    quiet = store.create("B", "b", sid=None)
    fresh = store.create("C", "c", sid=None)
    busy.last_active = quiet.last_active = 0.0
    fresh.last_active = 950.0

    assert store.reap_idle(now=1000.0) == [quiet.code]
    assert busy.code in store
    assert fresh.code in store
    assert quiet.code not in store
    assert len(store) == 2
