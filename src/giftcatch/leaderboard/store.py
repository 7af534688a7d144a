"""
Local leaderboard stored as a JSON file.

Every game over appends an entry; nothing is ever overwritten. Queries
rank players by their best score, one row per username.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol

from giftcatch.core.errors import LeaderboardError

logger = logging.getLogger(__name__)

MIN_LIMIT = 1
MAX_LIMIT = 100


@dataclass
class LeaderboardEntry:
    """One saved score."""
    id: int
    username: str
    score: int
    created_at: str


@dataclass
class SaveResult:
    """Result of saving a score."""
    success: bool
    entry: Optional[LeaderboardEntry] = None
    error: Optional[str] = None


class ScoreSink(Protocol):
    """Anything that can persist a finished game."""

    async def save_score(self, username: str, score: int) -> SaveResult:
        ...


def clamp_limit(limit: int) -> int:
    """Clamp a query limit to [1, 100]."""
    return max(MIN_LIMIT, min(MAX_LIMIT, int(limit)))


def best_per_player(entries: list[LeaderboardEntry], limit: int = 10) -> list[LeaderboardEntry]:
    """
    Each username's highest score, best first.

    Ties between a player's equal scores keep the earliest entry; ties
    between players are ordered by who got there first.
    """
    best: dict[str, LeaderboardEntry] = {}
    for entry in sorted(entries, key=lambda e: e.id):
        current = best.get(entry.username)
        if current is None or entry.score > current.score:
            best[entry.username] = entry

    ranked = sorted(best.values(), key=lambda e: (-e.score, e.id))
    return ranked[:clamp_limit(limit)]


class LeaderboardStore:
    """
    JSON-file score store.

    Usage:
        store = LeaderboardStore(Path("data/leaderboard.json"))
        result = await store.save_score("Cindy Lou", 42)
        top = store.top_scores(10)
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._entries: list[LeaderboardEntry] = []
        self._next_id = 1
        self._lock = asyncio.Lock()
        self._load()

    def _load(self) -> None:
        """Load entries from disk. A broken file yields an empty board."""
        if not self.path.exists():
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._entries = [LeaderboardEntry(**item) for item in data]
            logger.info(f"Loaded {len(self._entries)} leaderboard entries")
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Failed to load leaderboard {self.path}: {e}")
            self._entries = []

        if self._entries:
            self._next_id = max(e.id for e in self._entries) + 1

    def _write(self) -> None:
        """Persist all entries.

        Raises:
            LeaderboardError: If the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump([asdict(e) for e in self._entries], f, indent=2, ensure_ascii=False)
            tmp.replace(self.path)
        except OSError as e:
            raise LeaderboardError(f"Failed to save leaderboard: {e}") from e

    def add(self, username: str, score: int) -> LeaderboardEntry:
        """Append an entry and persist it synchronously."""
        entry = LeaderboardEntry(
            id=self._next_id,
            username=username,
            score=int(score),
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self._entries.append(entry)
        try:
            self._write()
        except LeaderboardError:
            self._entries.pop()
            raise
        self._next_id += 1
        logger.info(f"Saved score {entry.score} for {entry.username} (#{entry.id})")
        return entry

    async def save_score(self, username: str, score: int) -> SaveResult:
        """Append an entry without blocking the event loop."""
        async with self._lock:
            try:
                entry = await asyncio.to_thread(self.add, username, score)
            except LeaderboardError as e:
                logger.error(str(e))
                return SaveResult(success=False, error=str(e))
        return SaveResult(success=True, entry=entry)

    def top_scores(self, limit: int = 10) -> list[LeaderboardEntry]:
        """Top players by their best score, limit clamped to [1, 100]."""
        return best_per_player(self._entries, limit)

    def all_scores(self) -> list[LeaderboardEntry]:
        """Every entry, highest score first."""
        return sorted(self._entries, key=lambda e: (-e.score, e.id))

    def __len__(self) -> int:
        return len(self._entries)
