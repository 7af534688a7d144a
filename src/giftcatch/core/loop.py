"""
Cooperative frame loop on top of asyncio.

One frame callback runs to completion per iteration, then the loop yields
back to the event loop until the next frame is due.
"""

import asyncio
import logging
from typing import Callable, Optional

from giftcatch.core.clock import FrameClock

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float, float], None]


class GameLoop:
    """Drives a frame callback at a fixed target rate.

    Usage:
        loop = GameLoop(FrameClock(), session_frame, fps=60)
        loop.start()
        ...
        loop.stop()  # safe to call any number of times
    """

    def __init__(self, clock: FrameClock, on_frame: FrameCallback, fps: int = 60):
        self.clock = clock
        self._on_frame = on_frame
        self._frame_interval = 1.0 / fps if fps > 0 else 0.0
        self._task: Optional[asyncio.Task] = None
        self._stopping = False

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done() and not self._stopping

    def start(self) -> asyncio.Task:
        """Schedule the loop on the running event loop."""
        if self.is_running:
            return self._task

        self._stopping = False
        self.clock.reset()
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Game loop started")
        return self._task

    def stop(self) -> None:
        """Cancel the pending frame. Idempotent."""
        task = self._task
        if task is not None and not task.done() and not self._stopping:
            self._stopping = True
            task.cancel()
            logger.info("Game loop stopped")

    async def wait(self) -> None:
        """Wait until the loop finishes or is cancelled."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            now, delta = self.clock.tick()
            try:
                self._on_frame(now, delta)
            except Exception as e:
                logger.exception(f"Frame callback failed, stopping loop: {e}")
                return
            await asyncio.sleep(self._frame_interval)
