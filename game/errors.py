"""Errors raised by the game engine.

Each error is scoped to a single connection or action. The transport layer
reports the message back to the requesting client, except for Unauthorized,
which is dropped silently so a client learns nothing about phases or targets
it is not entitled to act on.
"""


class GameError(Exception):
    """Base class for rule and input errors. str(exc) is user-facing."""


class InvalidInput(GameError):
    """Missing or malformed name, id, or target."""


class NotFound(GameError):
    """Unknown room code."""


class GameAlreadyStarted(GameError):
    """A new player tried to join a room that has left the lobby."""


class Unauthorized(GameError):
    """Actor may not perform this action now (not host, dead, wrong role or phase)."""


class RuleViolation(GameError):
    """Action is well-formed but breaks a game rule; it is discarded."""


class SelfHealExhausted(RuleViolation):
    """The doctor already used their one self-heal this game."""
