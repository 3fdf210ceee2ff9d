"""Game engine: room mutations and rule checks, no transport.

Every public function mutates the room in place and returns the notices to
deliver, in order. Timing is not handled here; pending_transition tells the
caller which timed step the room is waiting on.
"""

import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional

from game import notices
from game.errors import (
    GameAlreadyStarted,
    InvalidInput,
    SelfHealExhausted,
    Unauthorized,
)
from game.notices import Notice
from game.phases import (
    advance_night,
    finish_game,
    open_discussion,
    set_phase,
    start_night_cycle,
    wake_town,
)
from game.rules import (
    AVATARS,
    IN_GAME_PHASES,
    MIN_PLAYERS,
    NIGHT_STEP_ROLES,
    Cue,
    DayAction,
    Delay,
    Phase,
    Role,
    Winner,
    role_quota,
)
from game.state import Event, EventKind, Player, Room

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _require_host(room: Room, actor_id: str) -> Player:
    """Return the host if actor_id is the room's host, per the room's own record."""
    actor = room.get_player(actor_id)
    if actor is None or not actor.is_host or actor.id != room.host_id:
        raise Unauthorized("Only the host can do that")
    return actor


def _living_target(room: Room, target_id: Optional[str]) -> Player:
    target = room.get_player(target_id)
    if target is None or not target.alive:
        raise InvalidInput("Pick a living player")
    return target


# ---- Room lifecycle and identity ----


def create_room(
    code: str,
    host_name: str,
    host_id: str,
    sid: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> Room:
    """Create a lobby with the creator as its host."""
    host_name, host_id = _clean(host_name), _clean(host_id)
    if not host_name or not host_id:
        raise InvalidInput("Name and player id are required")
    rng = rng or random.Random()
    host = Player(id=host_id, name=host_name, sid=sid, is_host=True, avatar=rng.choice(AVATARS))
    return Room(code=code, host_id=host_id, players=[host])


def resolve_or_create_player(
    room: Room,
    player_id: str,
    name: str,
    sid: Optional[str],
    rng: Optional[random.Random] = None,
) -> tuple[Player, list[Notice]]:
    """
    Find the player for this connection, or add a new one.

    Lookup is by stable id first, then by display name (a client that lost its
    stored id adopts the existing seat, host rights included). New players are
    only accepted in the lobby.
    """
    player_id, name = _clean(player_id), _clean(name)
    if not player_id or not name:
        raise InvalidInput("Name and player id are required")

    player = room.get_player(player_id)
    if player is not None:
        if name != player.name and room.find_by_name(name) is None:
            player.name = name
        player.sid = sid
        logger.info("room=%s player=%s reconnected", room.code, player.id)
    else:
        player = room.find_by_name(name)
        if player is not None:
            old_id = player.id
            player.id = player_id
            player.sid = sid
            if room.host_id == old_id:
                room.host_id = player_id
            room.night.rebind(old_id, player_id)
            logger.warning(
                "room=%s name %r adopted by new id %s (was %s)", room.code, name, player_id, old_id
            )
        else:
            if room.phase != Phase.LOBBY:
                raise GameAlreadyStarted("Game already started")
            rng = rng or random.Random()
            player = Player(id=player_id, name=name, sid=sid, avatar=rng.choice(AVATARS))
            room.players.append(player)
            logger.info("room=%s player=%s joined as %r", room.code, player.id, name)

    return player, [notices.room_joined(room, sid), notices.update_players(room)]


# ---- Role assignment ----


def assign_roles(players: list[Player], rng: Optional[random.Random] = None) -> None:
    """Deal the quota for len(players) in shuffled order, in join order. Resets per-game flags."""
    roles = role_quota(len(players))
    (rng or random.Random()).shuffle(roles)
    for player, role in zip(players, roles):
        player.role = role
        player.alive = True
        player.self_heal_used = False


def start_game(
    room: Room,
    actor_id: str,
    rng: Optional[random.Random] = None,
    min_players: int = MIN_PLAYERS,
) -> list[Notice]:
    """Host starts the game from the lobby: deal roles and begin the first night."""
    _require_host(room, actor_id)
    if room.phase != Phase.LOBBY:
        raise Unauthorized("Game already started")
    if len(room.players) < min_players:
        raise InvalidInput(f"At least {min_players} players are needed to start")

    assign_roles(room.players, rng)
    room.winner = None
    room.record(
        Event(
            kind=EventKind.GAME_START,
            round_index=0,
            phase=room.phase,
            message=f"Game started with {len(room.players)} players.",
        ),
    )
    logger.info("room=%s game started with %d players", room.code, len(room.players))
    return [notices.game_started(room)] + start_night_cycle(room)


# ---- Night actions ----


def submit_action(room: Room, actor_id: str, target_id: Optional[str]) -> list[Notice]:
    """
    Record the acting player's pick for the current night step.

    The first valid pick of a step is kept; later picks in the same step (a
    second mafia member, a double click) are ignored.
    """
    actor = room.get_player(actor_id)
    if actor is None or not actor.alive:
        raise Unauthorized("Dead or unknown players cannot act")
    required = NIGHT_STEP_ROLES.get(room.phase)
    if required is None or actor.role != required:
        raise Unauthorized("Not your turn")
    if room.night.acted(room.phase):
        raise Unauthorized("Already chosen this night")
    target = _living_target(room, target_id)

    out: list[Notice] = []
    if room.phase == Phase.NIGHT_MAFIA:
        room.night.mafia_target_id = target.id
        kind, message = EventKind.NIGHT_PICK, f"Mafia chose {target.name}."
    elif room.phase == Phase.NIGHT_NURSE:
        if target.id == actor.id:
            if actor.self_heal_used:
                raise SelfHealExhausted("You can only heal yourself once per game")
            actor.self_heal_used = True
        room.night.nurse_target_id = target.id
        kind, message = EventKind.NIGHT_PICK, f"Doctor protected {target.name}."
    else:
        room.night.investigated_id = target.id
        is_mafia = target.role == Role.MAFIA
        kind, message = EventKind.NIGHT_CHECK, f"Detective checked {target.name}."
        if actor.sid is not None:
            out.append(notices.investigation_result(actor.sid, target.id, is_mafia))

    room.record(
        Event(
            kind=kind,
            round_index=room.round_index,
            phase=room.phase,
            message=message,
            player_id=actor.id,
            target_id=target.id,
            private=True,
        ),
    )
    return out


def resolve_night(room: Room) -> list[Notice]:
    """
    Apply the night: the mafia target dies unless the doctor protected them.

    Runs once per night, from NIGHT_DETECTIVE only; any other call is a no-op.
    """
    if room.phase != Phase.NIGHT_DETECTIVE or room.night.resolved:
        return []
    room.night.resolved = True
    night = room.night

    victim: Optional[Player] = None
    if night.mafia_target_id and night.mafia_target_id != night.nurse_target_id:
        victim = room.get_player(night.mafia_target_id)
        if victim is not None and not victim.alive:
            victim = None

    out = set_phase(room, Phase.DAY_WAKE)
    if victim is not None:
        victim.alive = False
        msg = f"{victim.name} was killed during the night."
        cue, kind = Cue.KILL_SUCCESS, EventKind.NIGHT_KILL
    else:
        msg = "Everyone survived the night."
        cue, kind = Cue.KILL_FAIL, EventKind.NIGHT_SAVED
    room.record(
        Event(
            kind=kind,
            round_index=room.round_index,
            phase=Phase.DAY_WAKE,
            message=msg,
            target_id=victim.id if victim else None,
        ),
    )
    out.append(notices.play_audio(cue))
    out.append(notices.day_result(room, msg))
    return out + settle_win(room)


# ---- Win evaluation ----


def check_win(room: Room) -> Optional[Winner]:
    """CITIZENS when no mafia is alive, MAFIA at parity or majority, else None."""
    alive = room.get_alive_players()
    mafia_alive = sum(1 for p in alive if p.role == Role.MAFIA)
    others_alive = len(alive) - mafia_alive
    if mafia_alive == 0:
        return Winner.CITIZENS
    if mafia_alive >= others_alive:
        return Winner.MAFIA
    return None


def settle_win(room: Room) -> list[Notice]:
    """End the game if a faction has won. Only meaningful while a game runs."""
    if room.phase not in IN_GAME_PHASES:
        return []
    winner = check_win(room)
    if winner is None:
        return []
    return finish_game(room, winner)


# ---- Host arbitration ----


def host_day_action(
    room: Room,
    actor_id: str,
    action: str,
    target_id: Optional[str] = None,
) -> list[Notice]:
    """Host closes the day: SKIP straight into night, or KICK one living player."""
    _require_host(room, actor_id)
    if room.phase != Phase.DAY_DISCUSSION or room.day_decision is not None:
        raise Unauthorized("No day decision is pending")
    try:
        decision = DayAction(action)
    except ValueError:
        raise InvalidInput(f"Unknown day action {action!r}")

    if decision == DayAction.SKIP:
        room.day_decision = decision
        text = "The town decided not to eliminate anyone."
        room.record(Event(kind=EventKind.SKIPPED, round_index=room.round_index, phase=room.phase, message=text))
        return [notices.game_message(text), notices.update_players(room)] + start_night_cycle(room)

    target = _living_target(room, target_id)
    room.day_decision = decision
    target.alive = False
    text = f"{target.name} was eliminated by the town."
    room.record(
        Event(
            kind=EventKind.ELIMINATED,
            round_index=room.round_index,
            phase=room.phase,
            message=text,
            target_id=target.id,
        ),
    )
    return [notices.game_message(text), notices.update_players(room)] + settle_win(room)


def admin_kick_player(room: Room, actor_id: str, target_id: Optional[str]) -> tuple[Player, list[Notice]]:
    """
    Host removes a player from the room entirely (ejection, not elimination).

    Works in any phase. The removed player's connection is told to leave. If
    a game is running, the win check runs again since faction counts changed.
    """
    host = _require_host(room, actor_id)
    target = room.get_player(target_id)
    if target is None:
        raise InvalidInput("Player not found")
    if target.id == host.id:
        raise InvalidInput("The host cannot remove themselves")

    room.players.remove(target)
    text = f"{target.name} was removed from the room by the host."
    room.record(
        Event(
            kind=EventKind.EJECTED,
            round_index=room.round_index,
            phase=room.phase,
            message=text,
            target_id=target.id,
        ),
    )
    logger.info("room=%s player=%s ejected by host", room.code, target.id)

    out: list[Notice] = []
    if target.sid is not None:
        out.append(notices.force_disconnect(target.sid, "You were removed from the room by the host."))
    out += [notices.game_message(text), notices.update_players(room)]
    return target, out + settle_win(room)


# ---- Timed transitions ----


@dataclass(frozen=True)
class Transition:
    """A timed step the room is waiting on."""

    name: str
    delay: Delay
    run: Callable[[Room], list[Notice]]


def pending_transition(room: Room) -> Optional[Transition]:
    """
    The next server-driven step for room, or None when it waits on a player.

    Night steps advance after their role acts, or after a longer pause when no
    living player holds that role, so the table cannot tell who is dead.
    """
    phase = room.phase
    if phase == Phase.NIGHT_SLEEP:
        return Transition("wake_mafia", Delay.SLEEP, advance_night)
    if phase in NIGHT_STEP_ROLES:
        step = resolve_night if phase == Phase.NIGHT_DETECTIVE else advance_night
        if room.night.acted(phase):
            return Transition(f"after_{phase.value.lower()}", Delay.ACTION, step)
        if not room.get_players_by_role(NIGHT_STEP_ROLES[phase]):
            return Transition(f"skip_{phase.value.lower()}", Delay.ABSENT_ROLE, step)
        return None
    if phase == Phase.DAY_WAKE:
        if not room.night.town_woken:
            return Transition("wake_town", Delay.WAKE, wake_town)
        return Transition("open_discussion", Delay.RESULT, open_discussion)
    if phase == Phase.DAY_DISCUSSION and room.day_decision == DayAction.KICK:
        return Transition("next_night", Delay.KICK, start_night_cycle)
    return None
