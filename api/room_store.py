"""In-memory room store. Rooms live until reaped; nothing survives a restart."""

import logging
import random
import time
from typing import Optional

from game.engine import create_room
from game.rules import ROOM_CODE_ALPHABET, ROOM_CODE_LENGTH
from game.state import Room

logger = logging.getLogger(__name__)


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


class RoomStore:
    """Room code -> Room, owned by one event loop."""

    def __init__(self, idle_ttl_sec: float = 1800.0, rng: Optional[random.Random] = None):
        self._rooms: dict[str, Room] = {}
        self.idle_ttl_sec = idle_ttl_sec
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, code: str) -> bool:
        return normalize_code(code) in self._rooms

    def _new_code(self) -> str:
        """Generate a short code not used by any live room."""
        while True:
            code = "".join(self._rng.choices(ROOM_CODE_ALPHABET, k=ROOM_CODE_LENGTH))
            if code not in self._rooms:
                return code

    def create(self, host_name: str, host_id: str, sid: Optional[str] = None) -> Room:
        room = create_room(self._new_code(), host_name, host_id, sid=sid, rng=self._rng)
        self._rooms[room.code] = room
        logger.info("room=%s created by %s", room.code, room.host_id)
        return room

    def get(self, code: Optional[str]) -> Optional[Room]:
        return self._rooms.get(normalize_code(code))

    def delete(self, code: str) -> None:
        self._rooms.pop(normalize_code(code), None)

    def list_codes(self) -> list[str]:
        return list(self._rooms.keys())

    def reap_idle(self, now: Optional[float] = None) -> list[str]:
        """Drop rooms nobody is connected to that have been quiet longer than the TTL."""
        now = time.monotonic() if now is None else now
        stale = [
            code
            for code, room in self._rooms.items()
            if not room.is_connected() and now - room.last_active >= self.idle_ttl_sec
        ]
        for code in stale:
            self.delete(code)
            logger.info("room=%s reaped after %.0fs idle", code, self.idle_ttl_sec)
        return stale
