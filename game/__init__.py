"""Game engine for Mafia Night."""

from game.engine import (
    create_room,
    resolve_or_create_player,
    assign_roles,
    start_game,
    submit_action,
    resolve_night,
    check_win,
    settle_win,
    host_day_action,
    admin_kick_player,
    pending_transition,
    Transition,
)
from game.errors import (
    GameError,
    InvalidInput,
    NotFound,
    GameAlreadyStarted,
    Unauthorized,
    RuleViolation,
    SelfHealExhausted,
)
from game.notices import Notice
from game.phases import start_night_cycle
from game.rules import Role, Phase, Winner, DayAction, Cue, Delay, role_quota
from game.state import Room, Player, NightState, Event, EventKind

__all__ = [
    "create_room",
    "resolve_or_create_player",
    "assign_roles",
    "start_game",
    "submit_action",
    "resolve_night",
    "check_win",
    "settle_win",
    "host_day_action",
    "admin_kick_player",
    "pending_transition",
    "start_night_cycle",
    "Transition",
    "GameError",
    "InvalidInput",
    "NotFound",
    "GameAlreadyStarted",
    "Unauthorized",
    "RuleViolation",
    "SelfHealExhausted",
    "Notice",
    "Role",
    "Phase",
    "Winner",
    "DayAction",
    "Cue",
    "Delay",
    "role_quota",
    "Room",
    "Player",
    "NightState",
    "Event",
    "EventKind",
]
