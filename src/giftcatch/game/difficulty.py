"""Difficulty progression: stepped tiers derived from play time."""

import math

from giftcatch.config.settings import DifficultySettings


def difficulty_level(elapsed: float, tier_seconds: float = 10.0) -> int:
    """Difficulty tier for a play time in seconds: floor(elapsed / tier)."""
    if elapsed <= 0:
        return 0
    return int(math.floor(elapsed / tier_seconds))


class DifficultyTracker:
    """Keeps the session's difficulty level monotonic."""

    def __init__(self, settings: DifficultySettings | None = None):
        self.settings = settings or DifficultySettings()
        self.level = 0

    def update(self, elapsed: float) -> bool:
        """Raise the level for the given play time.

        Returns:
            True if the level went up
        """
        level = difficulty_level(elapsed, self.settings.tier_seconds)
        if level > self.level:
            self.level = level
            return True
        return False

    def reset(self) -> None:
        self.level = 0
