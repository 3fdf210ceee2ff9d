"""Room state types for Mafia Night."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from game.rules import Phase, Role, DayAction, Winner


@dataclass
class Player:
    """A player in a room. Identity is the client-supplied stable id."""

    id: str
    name: str
    sid: Optional[str] = None  # current connection; None while disconnected
    is_host: bool = False
    role: Role = Role.PENDING
    alive: bool = True
    avatar: str = ""
    self_heal_used: bool = False

    def to_public(self) -> dict:
        """Wire representation used in every player list sent to clients."""
        return {
            "id": self.id,
            "name": self.name,
            "isHost": self.is_host,
            "role": self.role.value,
            "isAlive": self.alive,
            "avatar": self.avatar,
            "connected": self.sid is not None,
        }


class EventKind(str, Enum):
    """Type of room history event."""

    GAME_START = "game_start"
    PHASE_CHANGE = "phase_change"
    NIGHT_PICK = "night_pick"
    NIGHT_CHECK = "night_check"
    NIGHT_KILL = "night_kill"
    NIGHT_SAVED = "night_saved"
    ELIMINATED = "eliminated"
    SKIPPED = "skipped"
    EJECTED = "ejected"
    GAME_OVER = "game_over"


@dataclass
class Event:
    """A single room event for history."""

    kind: EventKind
    round_index: int
    phase: Phase
    message: str
    player_id: Optional[str] = None
    target_id: Optional[str] = None
    private: bool = False  # night picks and checks never leave the server


@dataclass
class NightState:
    """Choices collected during one night cycle (before resolution)."""

    mafia_target_id: Optional[str] = None
    nurse_target_id: Optional[str] = None
    investigated_id: Optional[str] = None
    resolved: bool = False
    town_woken: bool = False

    def acted(self, phase: Phase) -> bool:
        """True once the role for this night step has made its pick."""
        if phase == Phase.NIGHT_MAFIA:
            return self.mafia_target_id is not None
        if phase == Phase.NIGHT_NURSE:
            return self.nurse_target_id is not None
        if phase == Phase.NIGHT_DETECTIVE:
            return self.investigated_id is not None
        return False

    def rebind(self, old_id: str, new_id: str) -> None:
        """Follow a player whose stable id changed."""
        if self.mafia_target_id == old_id:
            self.mafia_target_id = new_id
        if self.nurse_target_id == old_id:
            self.nurse_target_id = new_id
        if self.investigated_id == old_id:
            self.investigated_id = new_id


@dataclass
class Room:
    """Full state of one game room."""

    code: str
    host_id: str
    players: list[Player] = field(default_factory=list)
    phase: Phase = Phase.LOBBY
    night: NightState = field(default_factory=NightState)
    round_index: int = 0
    phase_version: int = 0  # bumped on every phase change; stale timers compare against it
    winner: Optional[Winner] = None
    day_decision: Optional[DayAction] = None
    events: list[Event] = field(default_factory=list)
    last_active: float = field(default_factory=time.monotonic)

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        """Return player by id or None."""
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def find_by_name(self, name: str) -> Optional[Player]:
        for p in self.players:
            if p.name == name:
                return p
        return None

    def get_alive_players(self) -> list[Player]:
        """Return list of alive players."""
        return [p for p in self.players if p.alive]

    def get_players_by_role(self, role: Role) -> list[Player]:
        """Return alive players with the given role."""
        return [p for p in self.players if p.alive and p.role == role]

    def get_host(self) -> Optional[Player]:
        return self.get_player(self.host_id)

    def is_connected(self) -> bool:
        """True while at least one player holds a live connection."""
        return any(p.sid is not None for p in self.players)

    def record(self, event: Event) -> None:
        """Append event to room history."""
        self.events.append(event)

    def public_players(self) -> list[dict]:
        return [p.to_public() for p in self.players]

    def touch(self) -> None:
        self.last_active = time.monotonic()
