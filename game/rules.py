"""Game rules and constants for Mafia Night."""

from enum import Enum


class Role(str, Enum):
    """Player roles in the game."""

    MAFIA = "MAFIA"
    DOCTOR = "DOCTOR"
    DETECTIVE = "DETECTIVE"
    CITIZEN = "CITIZEN"
    PENDING = "PENDING"  # before the host starts the game


class Phase(str, Enum):
    """Current room phase."""

    LOBBY = "LOBBY"
    NIGHT_SLEEP = "NIGHT_SLEEP"
    NIGHT_MAFIA = "NIGHT_MAFIA"
    NIGHT_NURSE = "NIGHT_NURSE"
    NIGHT_DETECTIVE = "NIGHT_DETECTIVE"
    DAY_WAKE = "DAY_WAKE"
    DAY_DISCUSSION = "DAY_DISCUSSION"
    GAME_OVER = "GAME_OVER"


class Winner(str, Enum):
    MAFIA = "MAFIA"
    CITIZENS = "CITIZENS"


class DayAction(str, Enum):
    """Host decisions at the end of day discussion."""

    SKIP = "SKIP"
    KICK = "KICK"


class Cue(str, Enum):
    """Audio cue keys played by clients."""

    EVERYONE_SLEEP = "everyone_sleep"
    MAFIA_WAKE = "mafia_wake"
    NURSE_WAKE = "nurse_wake"
    DETECTIVE_WAKE = "detective_wake"
    EVERYONE_WAKE = "everyone_wake"
    KILL_SUCCESS = "kill_success"
    KILL_FAIL = "kill_fail"


class Delay(str, Enum):
    """Kinds of server-scheduled pauses between phases."""

    SLEEP = "sleep"
    ACTION = "action"
    ABSENT_ROLE = "absent_role"
    WAKE = "wake"
    RESULT = "result"
    KICK = "kick"


# Night steps in resolution order, with the role that acts in each
NIGHT_STEPS = (Phase.NIGHT_MAFIA, Phase.NIGHT_NURSE, Phase.NIGHT_DETECTIVE)
NIGHT_STEP_ROLES = {
    Phase.NIGHT_MAFIA: Role.MAFIA,
    Phase.NIGHT_NURSE: Role.DOCTOR,
    Phase.NIGHT_DETECTIVE: Role.DETECTIVE,
}

# Cue that must accompany each of these phase changes
PHASE_CUES = {
    Phase.NIGHT_SLEEP: Cue.EVERYONE_SLEEP,
    Phase.NIGHT_MAFIA: Cue.MAFIA_WAKE,
    Phase.NIGHT_NURSE: Cue.NURSE_WAKE,
    Phase.NIGHT_DETECTIVE: Cue.DETECTIVE_WAKE,
}

# Phases during which a game is running (roles assigned, not finished)
IN_GAME_PHASES = frozenset(Phase) - {Phase.LOBBY, Phase.GAME_OVER}

# Default pauses in seconds; overridable through api.config
DEFAULT_DELAYS = {
    Delay.SLEEP: 4.5,
    Delay.ACTION: 2.0,
    Delay.ABSENT_ROLE: 6.0,
    Delay.WAKE: 4.5,
    Delay.RESULT: 5.0,
    Delay.KICK: 3.0,
}

# Minimum players to start (one mafia, one doctor, one detective)
MIN_PLAYERS = 3

# Rooms at or above this size get a second mafia
LARGE_ROOM_SIZE = 8

ROOM_CODE_LENGTH = 4
ROOM_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

MAX_PLAYER_NAME_LENGTH = 24

AVATARS = ("👨", "👩", "🕵️", "🤠", "🧙", "🧛", "🤖", "👽", "🤡", "👹", "👮", "👑")


def role_quota(num_players: int) -> list[Role]:
    """
    Roles to deal for a room of num_players, before shuffling.

    Special roles come first and are truncated for tiny rooms, so a two-player
    room gets [MAFIA, DOCTOR] and no detective.
    """
    num_mafia = 2 if num_players >= LARGE_ROOM_SIZE else 1
    roles = [Role.MAFIA] * num_mafia + [Role.DOCTOR, Role.DETECTIVE]
    roles = roles[:num_players]
    while len(roles) < num_players:
        roles.append(Role.CITIZEN)
    return roles
