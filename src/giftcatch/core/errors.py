"""Exception types for Grinch's Gift Catch."""


class GiftCatchError(Exception):
    """Base class for all game errors."""


class InvalidTransitionError(GiftCatchError):
    """Raised when a session state change is not allowed."""

    def __init__(self, from_state: str, to_state: str):
        super().__init__(f"Invalid transition: {from_state} -> {to_state}")
        self.from_state = from_state
        self.to_state = to_state


class InvalidUsernameError(GiftCatchError):
    """Raised when a player name fails validation."""


class LeaderboardError(GiftCatchError):
    """Raised when the score store cannot be read or written."""
