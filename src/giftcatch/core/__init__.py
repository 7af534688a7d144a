"""Core framework components for Grinch's Gift Catch."""

from .state import State, StateMachine
from .events import EventBus, Event, EventType
from .clock import FrameClock, clamp_delta
from .loop import GameLoop
from .errors import (
    GiftCatchError,
    InvalidTransitionError,
    InvalidUsernameError,
    LeaderboardError,
)

__all__ = [
    "State",
    "StateMachine",
    "EventBus",
    "Event",
    "EventType",
    "FrameClock",
    "clamp_delta",
    "GameLoop",
    "GiftCatchError",
    "InvalidTransitionError",
    "InvalidUsernameError",
    "LeaderboardError",
]
