"""Simulation core: actors, controllers and the game session."""

from .actors import Actor, Emitter, FallingObject, MotionState, Player, Variant
from .bonus import SYMBOLS, BonusPhase, BonusRound, Countdown
from .intent import IDLE, InputState
from .session import GameSession, validate_username
from .snapshot import SessionSnapshot

__all__ = [
    "Actor",
    "Emitter",
    "FallingObject",
    "MotionState",
    "Player",
    "Variant",
    "SYMBOLS",
    "BonusPhase",
    "BonusRound",
    "Countdown",
    "IDLE",
    "InputState",
    "GameSession",
    "validate_username",
    "SessionSnapshot",
]
