"""Grinch movement, freeze status and walk cycle."""

import logging
import math

from giftcatch.config.settings import PlayerSettings
from giftcatch.game.actors import Player
from giftcatch.game.intent import InputState

logger = logging.getLogger(__name__)

TWO_PI = math.pi * 2


class PlayerController:
    """Applies input to the player and tracks the impaired status."""

    def __init__(self, settings: PlayerSettings | None = None):
        self.settings = settings or PlayerSettings()

    def create(self) -> Player:
        s = self.settings
        return Player(x=s.start_x, y=s.start_y, width=s.width, height=s.height, prev_x=s.start_x)

    def update(
        self,
        player: Player,
        intent: InputState,
        now: float,
        delta: float,
        playfield_width: float,
    ) -> None:
        """
        Move the player for one tick.

        Args:
            player: Player to update in place
            intent: Held directions this tick
            now: Session play time in seconds
            delta: Clamped tick duration in seconds
            playfield_width: Playfield width in pixels
        """
        if player.impaired and now >= player.impaired_until:
            player.impaired = False
            logger.info("Grinch unfrozen")

        if not player.impaired:
            x = player.x + intent.direction * self.settings.speed * delta
            player.x = max(0.0, min(playfield_width - player.width, x))

        self._advance_walk_cycle(player)

    def impair(self, player: Player, now: float) -> None:
        """Freeze the player for the configured duration from `now`."""
        player.impaired = True
        player.impaired_until = now + self.settings.impair_duration
        logger.info(f"Grinch frozen for {self.settings.impair_duration:.1f}s")

    def _advance_walk_cycle(self, player: Player) -> None:
        moved = abs(player.x - player.prev_x)
        if moved > self.settings.walk_threshold:
            player.leg_phase = (player.leg_phase + moved * self.settings.walk_phase_rate) % TWO_PI
        else:
            player.leg_phase = 0.0
        player.prev_x = player.x
