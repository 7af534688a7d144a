"""HTTP client for a remote leaderboard service.

Talks to a server exposing:
    POST /api/leaderboard   {"username": str, "score": int} -> entry
    GET  /api/leaderboard?limit=N                          -> [entry, ...]
"""

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from giftcatch.leaderboard.store import LeaderboardEntry, SaveResult, clamp_limit

logger = logging.getLogger(__name__)


def _entry_from_json(data: dict[str, Any]) -> LeaderboardEntry:
    return LeaderboardEntry(
        id=int(data.get("id", 0)),
        username=str(data.get("username", "")),
        score=int(data.get("score", 0)),
        created_at=str(data.get("created_at") or data.get("createdAt") or ""),
    )


class LeaderboardClient:
    """Async leaderboard API client. Failures come back as results, never raise."""

    def __init__(self, base_url: str, timeout: float = 10.0):
        """Initialize the client.

        Args:
            base_url: Server root, e.g. http://127.0.0.1:5000
            timeout: Total request timeout in seconds
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def url(self) -> str:
        return f"{self._base_url}/api/leaderboard"

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers={"Content-Type": "application/json"},
            )
        return self._session

    async def save_score(self, username: str, score: int) -> SaveResult:
        """Submit a finished game.

        Args:
            username: Player name
            score: Final score

        Returns:
            SaveResult with the stored entry or an error code
        """
        try:
            session = await self._get_session()
            payload = {"username": username, "score": score}

            async with session.post(self.url, json=payload) as response:
                if response.status not in (200, 201):
                    error = f"HTTP {response.status}"
                    logger.error(f"Failed to save score: {error}")
                    return SaveResult(success=False, error=error)

                data = await response.json()
                entry = _entry_from_json(data)
                logger.info(f"Score saved remotely: {username} {score} (#{entry.id})")
                return SaveResult(success=True, entry=entry)

        except asyncio.TimeoutError:
            logger.error("Timeout saving score")
            return SaveResult(success=False, error="TIMEOUT")
        except aiohttp.ClientError as e:
            logger.error(f"Network error saving score: {e}")
            return SaveResult(success=False, error="NETWORK_ERROR")
        except (ValueError, TypeError) as e:
            logger.error(f"Malformed leaderboard response: {e}")
            return SaveResult(success=False, error="BAD_RESPONSE")

    async def top_scores(self, limit: int = 10) -> list[LeaderboardEntry]:
        """Fetch the leaderboard. Returns an empty list on any failure."""
        try:
            session = await self._get_session()
            params = {"limit": str(clamp_limit(limit))}

            async with session.get(self.url, params=params) as response:
                if response.status != 200:
                    logger.error(f"Failed to fetch leaderboard: HTTP {response.status}")
                    return []
                data = await response.json()
                return [_entry_from_json(item) for item in data]

        except asyncio.TimeoutError:
            logger.error("Timeout fetching leaderboard")
        except aiohttp.ClientError as e:
            logger.error(f"Network error fetching leaderboard: {e}")
        except (ValueError, TypeError) as e:
            logger.error(f"Malformed leaderboard response: {e}")
        return []

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
