"""Outbound notices: what the engine asks the transport to send.

Engine functions return lists of Notice in the order they must be delivered.
A notice without a sid goes to every connection in the room; a notice with a
sid goes to that connection only.
"""

from dataclasses import dataclass
from typing import Optional

from game.rules import Cue, Phase, Winner
from game.state import Room


@dataclass(frozen=True)
class Notice:
    event: str
    payload: dict
    sid: Optional[str] = None

    @property
    def is_private(self) -> bool:
        return self.sid is not None


def room_joined(room: Room, sid: Optional[str]) -> Notice:
    return Notice(
        "room_joined",
        {"roomId": room.code, "players": room.public_players(), "phase": room.phase.value},
        sid=sid,
    )


def update_players(room: Room) -> Notice:
    return Notice("update_players", {"players": room.public_players()})


def game_started(room: Room) -> Notice:
    return Notice("game_started", {"players": room.public_players()})


def phase_change(phase: Phase) -> Notice:
    return Notice("phase_change", {"phase": phase.value})


def play_audio(cue: Cue) -> Notice:
    return Notice("play_audio", {"cueKey": cue.value})


def day_result(room: Room, msg: str) -> Notice:
    return Notice("day_result", {"msg": msg, "players": room.public_players()})


def game_message(text: str) -> Notice:
    return Notice("game_message", {"text": text})


def game_over(winner: Winner) -> Notice:
    return Notice("game_over", {"winner": winner.value})


def investigation_result(sid: str, target_id: str, is_mafia: bool) -> Notice:
    return Notice("investigation_result", {"result": is_mafia, "targetId": target_id}, sid=sid)


def force_disconnect(sid: str, reason: str) -> Notice:
    return Notice("force_disconnect", {"reason": reason}, sid=sid)
