"""Server configuration from environment variables."""

import os
from dataclasses import dataclass, field

from game.rules import DEFAULT_DELAYS, MIN_PLAYERS, Delay

# Env var names
ENV_ALLOWED_ORIGINS = "ALLOWED_ORIGINS"
ENV_MIN_PLAYERS = "MIN_PLAYERS"
ENV_ROOM_IDLE_TTL_SEC = "ROOM_IDLE_TTL_SEC"
ENV_REAP_INTERVAL_SEC = "REAP_INTERVAL_SEC"
ENV_LOG_LEVEL = "LOG_LEVEL"
# One override per delay kind, e.g. DELAY_SLEEP_SEC, DELAY_ABSENT_ROLE_SEC
ENV_DELAY_TEMPLATE = "DELAY_{}_SEC"


@dataclass(frozen=True)
class Settings:
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    delays: dict[Delay, float] = field(default_factory=lambda: dict(DEFAULT_DELAYS))
    min_players: int = MIN_PLAYERS
    room_idle_ttl_sec: float = 1800.0
    reap_interval_sec: float = 60.0
    log_level: str = "INFO"

    def delay(self, kind: Delay) -> float:
        return self.delays.get(kind, DEFAULT_DELAYS[kind])


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    return float(raw) if raw else default


def load_settings() -> Settings:
    """Build Settings from the environment, falling back to defaults."""
    origins = os.environ.get(ENV_ALLOWED_ORIGINS, "*")
    delays = {
        kind: _env_float(ENV_DELAY_TEMPLATE.format(kind.name), seconds)
        for kind, seconds in DEFAULT_DELAYS.items()
    }
    return Settings(
        allowed_origins=[o.strip() for o in origins.split(",") if o.strip()] or ["*"],
        delays=delays,
        min_players=int(os.environ.get(ENV_MIN_PLAYERS, str(MIN_PLAYERS))),
        room_idle_ttl_sec=_env_float(ENV_ROOM_IDLE_TTL_SEC, 1800.0),
        reap_interval_sec=_env_float(ENV_REAP_INTERVAL_SEC, 60.0),
        log_level=os.environ.get(ENV_LOG_LEVEL, "INFO").upper(),
    )
