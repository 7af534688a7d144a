"""
Santa's patrol AI.

Santa eases toward a target speed and flips direction at the playfield
edges or when the current segment runs out. Each flip draws a new
segment length and target speed, so the patrol never settles into a
readable rhythm. A short cooldown stops edge proximity from flipping
him back and forth.
"""

import logging
import math
import random

from giftcatch.config.settings import EmitterSettings
from giftcatch.game.actors import Emitter

logger = logging.getLogger(__name__)


class EmitterController:
    """Moves the emitter one tick at a time."""

    def __init__(
        self,
        settings: EmitterSettings | None = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings or EmitterSettings()
        self.rng = rng or random.Random()

    def create(self) -> Emitter:
        """New emitter at its starting post."""
        s = self.settings
        emitter = Emitter(x=s.start_x, y=s.start_y, width=s.width, height=s.height)
        emitter.motion.target_velocity = s.initial_target_velocity
        emitter.motion.segment_duration = s.initial_segment_duration
        return emitter

    def extents(self, emitter: Emitter) -> tuple[float, float]:
        """(left, right) space the convoy needs, depending on facing."""
        s = self.settings
        if emitter.motion.facing_left:
            return s.convoy_leading, s.convoy_trailing
        return s.convoy_trailing, s.convoy_leading

    def segment_ranges(self, difficulty: int) -> tuple[tuple[float, float], tuple[float, float]]:
        """Duration and target speed ranges for a new segment.

        Higher difficulty means shorter segments and faster speeds.
        """
        s = self.settings
        min_dur = max(s.duration_min_floor, s.duration_min_base - difficulty * s.duration_min_decay)
        max_dur = max(s.duration_max_floor, s.duration_max_base - difficulty * s.duration_max_decay)
        min_speed = s.speed_min_base + difficulty * s.speed_min_scale
        max_speed = s.speed_max_base + difficulty * s.speed_max_scale
        return (min_dur, max_dur), (min_speed, max_speed)

    def update(
        self,
        emitter: Emitter,
        delta: float,
        elapsed: float,
        difficulty: int,
        playfield_width: float,
    ) -> bool:
        """
        Advance the patrol by one tick.

        Args:
            emitter: Emitter to move in place
            delta: Clamped tick duration in seconds
            elapsed: Session play time, drives the jitter term
            difficulty: Current difficulty level
            playfield_width: Playfield width in pixels

        Returns:
            True if the emitter flipped direction this tick
        """
        s = self.settings
        motion = emitter.motion
        left_extent, right_extent = self.extents(emitter)

        motion.segment_elapsed += delta
        motion.flip_cooldown = max(0.0, motion.flip_cooldown - delta)

        motion.velocity += (motion.target_velocity - motion.velocity) * s.ease_rate * delta

        near_left = emitter.x <= left_extent + s.edge_margin
        near_right = emitter.x >= playfield_width - right_extent - s.edge_margin
        segment_expired = motion.segment_elapsed >= motion.segment_duration

        flipped = False
        if (near_left or near_right or segment_expired) and motion.flip_cooldown <= 0:
            # Clamp bounds stay those of the pre-flip facing until next tick
            self._flip(emitter, difficulty)
            flipped = True

        jitter = math.sin(
            elapsed * s.jitter_time_rate + motion.segment_elapsed * s.jitter_segment_rate
        ) * s.jitter_amplitude
        x = emitter.x + motion.direction * motion.velocity * delta + jitter * delta

        emitter.x = max(left_extent, min(playfield_width - right_extent, x))
        return flipped

    def _flip(self, emitter: Emitter, difficulty: int) -> None:
        motion = emitter.motion
        motion.direction *= -1
        motion.facing_left = not motion.facing_left

        (min_dur, max_dur), (min_speed, max_speed) = self.segment_ranges(difficulty)
        motion.segment_duration = self.rng.uniform(min_dur, max_dur)
        motion.target_velocity = self.rng.uniform(min_speed, max_speed)

        motion.segment_elapsed = 0.0
        motion.flip_cooldown = self.settings.flip_cooldown

        logger.debug(
            f"Emitter flipped: dir={motion.direction} "
            f"speed={motion.target_velocity:.1f} duration={motion.segment_duration:.1f}"
        )
