"""Score persistence collaborators."""

from giftcatch.config.settings import LeaderboardSettings
from .client import LeaderboardClient
from .reporter import ScoreReporter
from .store import (
    LeaderboardEntry,
    LeaderboardStore,
    SaveResult,
    ScoreSink,
    best_per_player,
    clamp_limit,
)


def create_sink(settings: LeaderboardSettings) -> ScoreSink:
    """Build the configured score backend."""
    if settings.backend == "http":
        return LeaderboardClient(settings.base_url, timeout=settings.timeout)
    return LeaderboardStore(settings.file_path)


__all__ = [
    "LeaderboardClient",
    "LeaderboardEntry",
    "LeaderboardStore",
    "SaveResult",
    "ScoreReporter",
    "ScoreSink",
    "best_per_player",
    "clamp_limit",
    "create_sink",
]
