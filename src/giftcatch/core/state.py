"""
State machine for a game session.

States:
    AWAITING_NAME: No session yet, the player is entering a name
    PLAYING: Gameplay ticks are running
    SUSPENDED: Still playing, but gated by the bonus round or its countdown
    GAME_OVER: Session frozen, waiting for restart
"""

from enum import Enum, auto
from typing import Callable
import logging

from giftcatch.core.errors import InvalidTransitionError

logger = logging.getLogger(__name__)


class State(Enum):
    """Session states."""
    AWAITING_NAME = auto()
    PLAYING = auto()
    SUSPENDED = auto()
    GAME_OVER = auto()


StateListener = Callable[[State, State], None]


class StateMachine:
    """
    Manages session state and transitions.

    SUSPENDED is a sub-state of playing: the session is live but the
    gameplay update phase is skipped while it is active.
    """

    VALID_TRANSITIONS: list[tuple[State, State]] = [
        (State.AWAITING_NAME, State.PLAYING),

        (State.PLAYING, State.SUSPENDED),
        (State.PLAYING, State.GAME_OVER),

        (State.SUSPENDED, State.PLAYING),

        # Restart and change-player
        (State.GAME_OVER, State.PLAYING),
        (State.GAME_OVER, State.AWAITING_NAME),
    ]

    def __init__(self, initial_state: State = State.AWAITING_NAME) -> None:
        self._state = initial_state
        self._listeners: list[StateListener] = []
        self._valid_transitions = set(self.VALID_TRANSITIONS)
        logger.debug(f"StateMachine initialized with state: {initial_state.name}")

    @property
    def state(self) -> State:
        """Get current state."""
        return self._state

    @property
    def is_live(self) -> bool:
        """True while a session is in progress (running or suspended)."""
        return self._state in (State.PLAYING, State.SUSPENDED)

    def can_transition(self, to_state: State) -> bool:
        """Check if transition to given state is valid."""
        return (self._state, to_state) in self._valid_transitions

    def transition(self, to_state: State) -> None:
        """
        Transition to a new state.

        Raises:
            InvalidTransitionError: If the transition is not allowed
        """
        if not self.can_transition(to_state):
            raise InvalidTransitionError(self._state.name, to_state.name)

        old_state = self._state
        self._state = to_state
        logger.info(f"State transition: {old_state.name} -> {to_state.name}")

        for listener in self._listeners:
            try:
                listener(old_state, to_state)
            except Exception as e:
                logger.error(f"Error in state listener: {e}")

    def add_listener(self, callback: StateListener) -> None:
        """Add a state change listener."""
        self._listeners.append(callback)

    def remove_listener(self, callback: StateListener) -> None:
        """Remove a state change listener."""
        if callback in self._listeners:
            self._listeners.remove(callback)
