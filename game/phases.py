"""Phase changes: every transition goes through set_phase so the broadcast and
audio cue always accompany it."""

import logging

from game import notices
from game.notices import Notice
from game.rules import Cue, Phase, PHASE_CUES, NIGHT_STEPS, Winner
from game.state import Event, EventKind, NightState, Room

logger = logging.getLogger(__name__)


def set_phase(room: Room, phase: Phase) -> list[Notice]:
    """Move room to phase. Returns phase_change plus the matching cue, if any."""
    room.phase = phase
    room.phase_version += 1
    room.record(
        Event(
            kind=EventKind.PHASE_CHANGE,
            round_index=room.round_index,
            phase=phase,
            message=f"Phase changed to {phase.value}.",
        ),
    )
    logger.debug("room=%s phase=%s version=%d", room.code, phase.value, room.phase_version)
    out = [notices.phase_change(phase)]
    cue = PHASE_CUES.get(phase)
    if cue is not None:
        out.append(notices.play_audio(cue))
    return out


def start_night_cycle(room: Room) -> list[Notice]:
    """Clear last night's picks and put everyone to sleep."""
    if room.phase == Phase.GAME_OVER:
        return []
    room.night = NightState()
    room.day_decision = None
    room.round_index += 1
    return set_phase(room, Phase.NIGHT_SLEEP)


def advance_night(room: Room) -> list[Notice]:
    """NIGHT_SLEEP -> NIGHT_MAFIA -> NIGHT_NURSE -> NIGHT_DETECTIVE. No-op elsewhere."""
    order = (Phase.NIGHT_SLEEP,) + NIGHT_STEPS
    if room.phase not in order[:-1]:
        return []
    return set_phase(room, order[order.index(room.phase) + 1])


def wake_town(room: Room) -> list[Notice]:
    """First stage of DAY_WAKE: the morning cue, once."""
    if room.phase != Phase.DAY_WAKE or room.night.town_woken:
        return []
    room.night.town_woken = True
    return [notices.play_audio(Cue.EVERYONE_WAKE)]


def open_discussion(room: Room) -> list[Notice]:
    """Second stage of DAY_WAKE: hand the floor to the host."""
    if room.phase != Phase.DAY_WAKE:
        return []
    return set_phase(room, Phase.DAY_DISCUSSION)


def finish_game(room: Room, winner: Winner) -> list[Notice]:
    """Enter the terminal phase and announce the winner."""
    room.winner = winner
    out = set_phase(room, Phase.GAME_OVER)
    room.record(
        Event(
            kind=EventKind.GAME_OVER,
            round_index=room.round_index,
            phase=Phase.GAME_OVER,
            message=f"{winner.value} win.",
        ),
    )
    logger.info("room=%s game over, winner=%s", room.code, winner.value)
    out.append(notices.game_over(winner))
    return out
