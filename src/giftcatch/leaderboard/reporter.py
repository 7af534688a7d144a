"""
Saves finished games without blocking the frame loop.

On GAME_OVER the reporter schedules an asyncio task that hands the score
to a ScoreSink, then publishes SCORE_SAVED or SCORE_SAVE_FAILED carrying
the session id, so a UI that has already restarted can ignore it.
"""

import asyncio
import logging
from typing import Optional

from giftcatch.core.events import Event, EventBus, EventType
from giftcatch.leaderboard.store import SaveResult, ScoreSink

logger = logging.getLogger(__name__)


class ScoreReporter:
    """Bridges game-over events to a score sink."""

    def __init__(self, event_bus: EventBus, sink: ScoreSink):
        self.event_bus = event_bus
        self.sink = sink
        self._tasks: set[asyncio.Task] = set()
        self._unsubscribe = event_bus.subscribe(EventType.GAME_OVER, self._on_game_over)
        self.last_result: Optional[SaveResult] = None

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def _on_game_over(self, event: Event) -> None:
        username = event.data.get("username", "")
        score = int(event.data.get("score", 0))
        session_id = event.data.get("session_id")

        if not username or score <= 0:
            logger.debug(f"Not saving score {score} for {username!r}")
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop, score not saved")
            return

        task = loop.create_task(self._save(username, score, session_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _save(self, username: str, score: int, session_id: Optional[int]) -> None:
        try:
            result = await self.sink.save_score(username, score)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"Score sink failed: {e}")
            result = SaveResult(success=False, error=str(e))

        self.last_result = result
        event_type = EventType.SCORE_SAVED if result.success else EventType.SCORE_SAVE_FAILED
        if not result.success:
            logger.warning(f"Score for {username} not saved: {result.error}")

        self.event_bus.emit(Event(
            event_type,
            data={
                "session_id": session_id,
                "username": username,
                "score": score,
                "error": result.error,
            },
            source="leaderboard",
        ))

    async def flush(self) -> None:
        """Wait for every pending save."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        """Stop listening and cancel saves still in flight."""
        self._unsubscribe()
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
