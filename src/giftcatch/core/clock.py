"""Frame clock producing bounded per-tick deltas."""

from typing import Callable, Optional
import time

DEFAULT_MAX_DELTA = 1.0 / 30.0


def clamp_delta(delta: float, max_delta: float = DEFAULT_MAX_DELTA) -> float:
    """Clamp a frame delta to [0, max_delta].

    Negative deltas (clock went backwards) become 0, huge ones (window was
    backgrounded) are capped so nothing jumps across the playfield.
    """
    if delta != delta or delta <= 0.0:  # NaN or negative
        return 0.0
    return min(delta, max_delta)


class FrameClock:
    """Monotonic frame clock.

    Usage:
        clock = FrameClock()
        now, delta = clock.tick()  # first tick has delta 0
    """

    def __init__(
        self,
        max_delta: float = DEFAULT_MAX_DELTA,
        time_source: Callable[[], float] = time.monotonic,
    ):
        self.max_delta = max_delta
        self._time_source = time_source
        self._last: Optional[float] = None
        self._frame = 0

    @property
    def frame(self) -> int:
        """Number of ticks produced so far."""
        return self._frame

    def tick(self) -> tuple[float, float]:
        """Advance the clock.

        Returns:
            (now, delta) with delta already clamped
        """
        now = self._time_source()
        if self._last is None:
            delta = 0.0
        else:
            delta = clamp_delta(now - self._last, self.max_delta)
        self._last = now
        self._frame += 1
        return now, delta

    def reset(self) -> None:
        """Forget the previous timestamp so the next delta is 0."""
        self._last = None
