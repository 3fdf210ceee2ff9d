"""Pydantic models: inbound socket payloads and public HTTP responses."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from game.rules import MAX_PLAYER_NAME_LENGTH, DayAction, Phase
from game.state import Room


class _Payload(BaseModel):
    """Socket payloads use camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


class _RoomPayload(_Payload):
    room_id: str = Field(..., min_length=1)

    @field_validator("room_id")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return v.upper()


class CreateRoomPayload(_Payload):
    """create_room {playerName, playerId}. Emptiness is checked by the engine."""

    player_name: str = Field(default="", max_length=MAX_PLAYER_NAME_LENGTH)
    player_id: str = Field(default="", max_length=128)


class JoinRoomPayload(_RoomPayload):
    """join_room / reconnect_user {roomId, playerName, playerId}."""

    player_name: str = Field(default="", max_length=MAX_PLAYER_NAME_LENGTH)
    player_id: str = Field(default="", max_length=128)


class StartGamePayload(_RoomPayload):
    pass


class PlayerActionPayload(_RoomPayload):
    """player_action {roomId, action, targetId}. The phase decides what the action means."""

    action: str | None = None
    target_id: str = Field(..., min_length=1)


class HostDayActionPayload(_RoomPayload):
    action: DayAction
    target_id: str | None = None


class AdminKickPayload(_RoomPayload):
    target_id: str = Field(..., min_length=1)


class PlayerPublic(BaseModel):
    """Player as shown over HTTP: role only revealed when dead or after the game."""

    id: str
    name: str
    is_host: bool
    alive: bool
    avatar: str
    connected: bool
    role: str | None = Field(default=None, description="Only set when not alive or game over")


class EventPublic(BaseModel):
    kind: str
    round_index: int
    phase: str
    message: str
    target_id: str | None = None


class RoomStateResponse(BaseModel):
    """Public room state for GET /rooms/{code}."""

    code: str
    phase: str
    round_index: int
    host_id: str
    players: list[PlayerPublic]
    winner: str | None = Field(default=None, description="MAFIA or CITIZENS when game over")
    events: list[EventPublic] = Field(default_factory=list, description="Public history; night picks omitted")


def room_state_to_public(room: Room) -> RoomStateResponse:
    """Build public response from Room; hide roles of living players until the game ends."""
    reveal_all = room.phase == Phase.GAME_OVER
    players_public = [
        PlayerPublic(
            id=p.id,
            name=p.name,
            is_host=p.is_host,
            alive=p.alive,
            avatar=p.avatar,
            connected=p.sid is not None,
            role=p.role.value if (reveal_all or not p.alive) else None,
        )
        for p in room.players
    ]
    events_public = [
        EventPublic(
            kind=e.kind.value,
            round_index=e.round_index,
            phase=e.phase.value,
            message=e.message,
            target_id=e.target_id,
        )
        for e in room.events
        if not e.private
    ]
    return RoomStateResponse(
        code=room.code,
        phase=room.phase.value,
        round_index=room.round_index,
        host_id=room.host_id,
        players=players_public,
        winner=room.winner.value if room.winner else None,
        events=events_public,
    )
