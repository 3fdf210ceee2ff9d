"""GameHub: runs socket events through the engine and drives room timers.

Transport concerns (which connection is which player, who receives what,
when a timed phase change fires) live here. Rules live in game.engine.
"""

import logging
import random
from functools import partial
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel, ValidationError

from api.config import Settings
from api.models import (
    AdminKickPayload,
    CreateRoomPayload,
    HostDayActionPayload,
    JoinRoomPayload,
    PlayerActionPayload,
    StartGamePayload,
)
from api.room_store import RoomStore
from api.scheduler import RoomTimers
from game import engine, notices
from game.errors import GameError, InvalidInput, NotFound, Unauthorized
from game.notices import Notice
from game.state import Player, Room

logger = logging.getLogger(__name__)

Handler = Callable[[str, dict], Awaitable[None]]


def _parse(model: type[BaseModel], data: Any) -> Any:
    try:
        return model.model_validate(data if isinstance(data, dict) else {})
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "payload"
        raise InvalidInput(f"Invalid {field}: {first.get('msg', 'bad value')}")


class GameHub:
    """Owns the room store, the timers, and the sid -> (room, player) sessions."""

    def __init__(
        self,
        sio: Any,
        store: RoomStore,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.sio = sio
        self.store = store
        self.settings = settings or Settings()
        self.timers = RoomTimers()
        self._rng = rng or random.Random()
        # sid -> (room code, player id)
        self._sessions: dict[str, tuple[str, str]] = {}
        self._handlers: dict[str, Handler] = {
            "create_room": self.create_room,
            "join_room": self.join_room,
            "reconnect_user": self.join_room,
            "start_game": self.start_game,
            "player_action": self.player_action,
            "host_action_day": self.host_action_day,
            "admin_kick_player": self.admin_kick_player,
        }

    @property
    def events(self) -> list[str]:
        return list(self._handlers)

    async def handle(self, event: str, sid: str, data: Any = None) -> None:
        """Entry point for every client event. Errors go back to the sender only."""
        handler = self._handlers.get(event)
        if handler is None:
            logger.debug("Unknown event %s from %s", event, sid)
            return
        try:
            await handler(sid, data)
        except Unauthorized as exc:
            logger.debug("Ignored %s from %s: %s", event, sid, exc)
        except GameError as exc:
            logger.info("Rejected %s from %s: %s", event, sid, exc)
            await self.sio.emit("error", {"message": str(exc)}, to=sid)

    # ---- sessions ----

    def _bind(self, sid: str, room: Room, player: Player) -> Optional[tuple[str, str]]:
        """Point sid at player's seat. Returns the session sid held before, if any."""
        for other_sid, (code, pid) in list(self._sessions.items()):
            if other_sid != sid and code == room.code and pid == player.id:
                del self._sessions[other_sid]
        previous = self._sessions.get(sid)
        self._sessions[sid] = (room.code, player.id)
        return previous

    async def _release(self, sid: str, previous: Optional[tuple[str, str]], room: Room, player: Player) -> None:
        """
        A connection holds one seat at a time: free the seat it held before.

        The old seat only loses sid if it still points at this connection, and
        the old room hears that the seat went offline.
        """
        if previous is None:
            return
        code, pid = previous
        if code != room.code:
            await self.sio.leave_room(sid, code)
        old_room = self.store.get(code)
        old = old_room.get_player(pid) if old_room else None
        if old is None or old is player or old.sid != sid:
            return
        old.sid = None
        old_room.touch()
        logger.info("room=%s player=%s released by %s", old_room.code, old.id, sid)
        await self._publish(old_room, [notices.update_players(old_room)])

    def _room(self, code: str) -> Room:
        room = self.store.get(code)
        if room is None:
            raise NotFound("Room not found")
        return room

    def _actor(self, sid: str, code: str) -> tuple[Room, Player]:
        """Resolve the acting player from this connection's session, never from the payload."""
        room = self._room(code)
        session = self._sessions.get(sid)
        if session is None or session[0] != room.code:
            raise Unauthorized("Connection is not part of this room")
        player = room.get_player(session[1])
        if player is None or player.sid != sid:
            raise Unauthorized("Connection no longer owns this player")
        room.touch()
        return room, player

    # ---- publishing and timers ----

    async def _publish(self, room: Room, out: list[Notice]) -> None:
        for notice in out:
            await self.sio.emit(notice.event, notice.payload, to=notice.sid if notice.is_private else room.code)

    def _schedule_next(self, room: Room) -> None:
        transition = engine.pending_transition(room)
        if transition is None:
            return
        self.timers.schedule(
            room,
            transition.name,
            self.settings.delay(transition.delay),
            partial(self._fire, transition),
        )

    async def _fire(self, transition: engine.Transition, room: Room) -> None:
        if self.store.get(room.code) is not room:
            return
        await self._publish(room, transition.run(room))
        self._schedule_next(room)

    async def _commit(self, room: Room, out: list[Notice]) -> None:
        await self._publish(room, out)
        self._schedule_next(room)

    # ---- event handlers ----

    async def create_room(self, sid: str, data: Any) -> None:
        payload = _parse(CreateRoomPayload, data)
        room = self.store.create(payload.player_name, payload.player_id, sid=sid)
        host = room.get_host()
        previous = self._bind(sid, room, host)
        await self.sio.enter_room(sid, room.code)
        await self._publish(room, [notices.room_joined(room, sid)])
        await self._release(sid, previous, room, host)

    async def join_room(self, sid: str, data: Any) -> None:
        """join_room and reconnect_user: both resolve the seat the same way."""
        payload = _parse(JoinRoomPayload, data)
        room = self._room(payload.room_id)
        player, out = engine.resolve_or_create_player(
            room, payload.player_id, payload.player_name, sid, rng=self._rng
        )
        room.touch()
        previous = self._bind(sid, room, player)
        await self.sio.enter_room(sid, room.code)
        await self._publish(room, out)
        await self._release(sid, previous, room, player)

    async def start_game(self, sid: str, data: Any) -> None:
        payload = _parse(StartGamePayload, data)
        room, actor = self._actor(sid, payload.room_id)
        out = engine.start_game(room, actor.id, rng=self._rng, min_players=self.settings.min_players)
        await self._commit(room, out)

    async def player_action(self, sid: str, data: Any) -> None:
        payload = _parse(PlayerActionPayload, data)
        room, actor = self._actor(sid, payload.room_id)
        out = engine.submit_action(room, actor.id, payload.target_id)
        logger.debug("room=%s %s action=%s accepted", room.code, actor.id, payload.action)
        await self._commit(room, out)

    async def host_action_day(self, sid: str, data: Any) -> None:
        payload = _parse(HostDayActionPayload, data)
        room, actor = self._actor(sid, payload.room_id)
        out = engine.host_day_action(room, actor.id, payload.action, payload.target_id)
        await self._commit(room, out)

    async def admin_kick_player(self, sid: str, data: Any) -> None:
        payload = _parse(AdminKickPayload, data)
        room, actor = self._actor(sid, payload.room_id)
        ejected, out = engine.admin_kick_player(room, actor.id, payload.target_id)
        if ejected.sid is not None and self._sessions.get(ejected.sid) == (room.code, ejected.id):
            del self._sessions[ejected.sid]
            await self.sio.leave_room(ejected.sid, room.code)
        await self._commit(room, out)

    async def disconnect(self, sid: str, reason: Any = None) -> None:
        """A dropped connection keeps its seat; only the sid is cleared."""
        session = self._sessions.pop(sid, None)
        if session is None:
            return
        room = self.store.get(session[0])
        player = room.get_player(session[1]) if room else None
        if player is None or player.sid != sid:
            return
        player.sid = None
        room.touch()
        logger.info("room=%s player=%s disconnected (%s)", room.code, player.id, reason)
        await self._publish(room, [notices.update_players(room)])

    # ---- housekeeping ----

    def reap(self) -> list[str]:
        """Forget idle rooms and cancel their timers."""
        reaped = self.store.reap_idle()
        for code in reaped:
            self.timers.cancel(code)
            for sid, (room_code, _) in list(self._sessions.items()):
                if room_code == code:
                    del self._sessions[sid]
        return reaped
