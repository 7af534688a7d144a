"""
Gift spawning.

Spawns are randomized-periodic: each drop schedules the next one at
`interval * U(jitter_min, jitter_max)` so players cannot learn a rhythm.
Interval, variant odds, horizontal spread and fall speed all scale with
difficulty, with caps on the rates that would otherwise make the game
unplayable.
"""

import logging
import random
from typing import Optional

from giftcatch.config.settings import SpawnSettings
from giftcatch.game.actors import Emitter, FallingObject, Variant

logger = logging.getLogger(__name__)


class Spawner:
    """Decides when to drop a gift and what kind it is."""

    def __init__(
        self,
        settings: SpawnSettings | None = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings or SpawnSettings()
        self.rng = rng or random.Random()
        self.next_spawn_at: Optional[float] = None
        self._next_id = 1

    def reset(self) -> None:
        self.next_spawn_at = None
        self._next_id = 1

    # Difficulty curves

    def spawn_interval(self, difficulty: int) -> float:
        s = self.settings
        return max(s.min_interval, s.base_interval - difficulty * s.interval_decay)

    def hazard_chance(self, difficulty: int) -> float:
        s = self.settings
        return min(s.hazard_base + difficulty * s.hazard_scale, s.hazard_max)

    def impairer_chance(self, difficulty: int) -> float:
        s = self.settings
        return min(s.impairer_base + difficulty * s.impairer_scale, s.impairer_max)

    def offset_range(self, difficulty: int) -> float:
        s = self.settings
        return min(s.offset_base + difficulty * s.offset_scale, s.offset_max)

    def fall_speed(self, difficulty: int) -> float:
        s = self.settings
        return s.fall_speed_base + difficulty * s.fall_speed_scale

    # Decisions

    def schedule(self, now: float, difficulty: int) -> float:
        """Pick the next spawn instant after `now`."""
        s = self.settings
        jitter = self.rng.uniform(s.jitter_min, s.jitter_max)
        self.next_spawn_at = now + self.spawn_interval(difficulty) * jitter
        return self.next_spawn_at

    def choose_variant(self, difficulty: int) -> Variant:
        roll = self.rng.random()
        p_hazard = self.hazard_chance(difficulty)
        if roll < p_hazard:
            return Variant.HAZARD
        if roll < p_hazard + self.impairer_chance(difficulty):
            return Variant.IMPAIRER
        return Variant.REWARD

    def spawn(self, emitter: Emitter, difficulty: int) -> FallingObject:
        """Create one object under the emitter."""
        s = self.settings
        variant = self.choose_variant(difficulty)
        spread = (self.rng.random() - 0.5) * self.offset_range(difficulty)

        obj = FallingObject(
            id=self._next_id,
            x=emitter.center_x + spread,
            y=emitter.y + s.drop_offset,
            width=s.object_size,
            height=s.object_size,
            fall_speed=self.fall_speed(difficulty),
            variant=variant,
        )
        self._next_id += 1

        logger.debug(f"Spawned {variant.value} #{obj.id} at x={obj.x:.0f} speed={obj.fall_speed:.0f}")
        return obj

    def update(
        self,
        objects: list[FallingObject],
        emitter: Emitter,
        now: float,
        difficulty: int,
    ) -> Optional[FallingObject]:
        """
        Spawn at most one object if it is due.

        The first call of a session only schedules the first drop.

        Returns:
            The new object (already appended to `objects`), or None
        """
        if self.next_spawn_at is None:
            self.schedule(now, difficulty)

        if now < self.next_spawn_at:
            return None

        obj = self.spawn(emitter, difficulty)
        objects.append(obj)
        self.schedule(now, difficulty)
        return obj
