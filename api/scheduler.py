"""Per-room timers for auto-advancing phases.

- One asyncio task per scheduled transition
- A transition is scheduled at most once per (phase_version, name)
- A timer whose room changed phase meanwhile does nothing
"""

import asyncio
import logging
from typing import Awaitable, Callable

from game.state import Room

logger = logging.getLogger(__name__)

TimerCallback = Callable[[Room], Awaitable[None]]


class RoomTimers:
    def __init__(self) -> None:
        self._tasks: dict[str, set[asyncio.Task]] = {}
        self._keys: dict[str, set[tuple[int, str]]] = {}

    def schedule(self, room: Room, name: str, delay: float, callback: TimerCallback) -> bool:
        """Run callback(room) after delay unless room changes phase first. False if already scheduled."""
        key = (room.phase_version, name)
        keys = self._keys.setdefault(room.code, set())
        if key in keys:
            logger.debug("[timer-skip] room=%s %s already scheduled", room.code, name)
            return False
        keys.add(key)
        logger.info(
            "[timer-set] room=%s %s phase=%s version=%d delay=%.1fs",
            room.code, name, room.phase.value, room.phase_version, delay,
        )
        task = asyncio.create_task(self._run(room, key, delay, callback))
        tasks = self._tasks.setdefault(room.code, set())
        tasks.add(task)
        task.add_done_callback(tasks.discard)
        return True

    async def _run(self, room: Room, key: tuple[int, str], delay: float, callback: TimerCallback) -> None:
        version, name = key
        await asyncio.sleep(delay)
        self._keys.get(room.code, set()).discard(key)
        if room.phase_version != version:
            logger.info(
                "[timer-abort] room=%s %s expected version=%d actual=%d",
                room.code, name, version, room.phase_version,
            )
            return
        logger.info("[timer-fire] room=%s %s phase=%s", room.code, name, room.phase.value)
        try:
            await callback(room)
        except Exception:
            logger.exception("[timer-error] room=%s %s", room.code, name)

    def pending(self, code: str) -> int:
        return sum(1 for t in self._tasks.get(code, ()) if not t.done())

    def cancel(self, code: str) -> None:
        """Cancel every timer of a room (used when the room goes away)."""
        for task in self._tasks.pop(code, set()):
            task.cancel()
        self._keys.pop(code, None)

    async def settle(self) -> None:
        """Wait until no timer is pending in any room, including timers scheduled by timers."""
        while True:
            pending = [t for tasks in self._tasks.values() for t in tasks if not t.done()]
            if not pending:
                return
            await asyncio.wait(pending)
