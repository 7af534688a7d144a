"""
Bonus reel round.

Phases:
    CLOSED: No round open
    IDLE: Round offered, waiting for the player to spin (or decline)
    SPINNING: Reels shuffle for a fixed time
    WIN / LOSE: Result on display

After the result display the round closes and a countdown runs before
gameplay resumes. While a round is open or the countdown is running the
session skips its gameplay update; only the timers here advance.

A round opens once per score tier (score // tier_size). It can be spun
once; further spins are ignored.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
import logging
import random

from giftcatch.config.settings import BonusSettings
from giftcatch.core.events import Event, EventType

logger = logging.getLogger(__name__)

# Fixed cyclic order, also used to de-duplicate losing reels
SYMBOLS: tuple[str, ...] = ("gift", "tree", "star", "bell", "candy", "snowman")

REEL_COUNT = 3


class BonusPhase(Enum):
    CLOSED = auto()
    IDLE = auto()
    SPINNING = auto()
    WIN = auto()
    LOSE = auto()


@dataclass
class Countdown:
    """Whole-second countdown before gameplay resumes."""
    remaining_seconds: int = 0
    counting_down: bool = False
    _elapsed: float = field(default=0.0, init=False, repr=False)

    def start(self, seconds: int) -> None:
        self.remaining_seconds = seconds
        self.counting_down = seconds > 0
        self._elapsed = 0.0

    def stop(self) -> None:
        self.remaining_seconds = 0
        self.counting_down = False
        self._elapsed = 0.0

    def update(self, delta: float) -> list[int]:
        """
        Advance the countdown.

        Returns:
            Each value the countdown stepped to during this update
        """
        if not self.counting_down:
            return []

        steps = []
        self._elapsed += delta
        while self._elapsed >= 1.0 and self.remaining_seconds > 0:
            self._elapsed -= 1.0
            self.remaining_seconds -= 1
            steps.append(self.remaining_seconds)

        if self.remaining_seconds <= 0:
            self.stop()
        return steps


def distinct_reels(reels: list[str]) -> list[str]:
    """Make reels pairwise distinct by stepping collisions through SYMBOLS."""
    result: list[str] = []
    for symbol in reels:
        index = SYMBOLS.index(symbol)
        while symbol in result:
            index = (index + 1) % len(SYMBOLS)
            symbol = SYMBOLS[index]
        result.append(symbol)
    return result


@dataclass
class BonusRound:
    """Bonus round state and timers. One per session."""
    settings: BonusSettings = field(default_factory=BonusSettings)
    rng: random.Random = field(default_factory=random.Random)

    phase: BonusPhase = BonusPhase.CLOSED
    reels: list[str] = field(default_factory=lambda: [SYMBOLS[0]] * REEL_COUNT)
    used_this_trigger: bool = False
    trigger_tier: int = 0
    countdown: Countdown = field(default_factory=Countdown)

    _phase_elapsed: float = field(default=0.0, init=False, repr=False)
    _shuffle_elapsed: float = field(default=0.0, init=False, repr=False)
    _cancelled: bool = field(default=False, init=False, repr=False)

    @property
    def is_open(self) -> bool:
        return self.phase is not BonusPhase.CLOSED

    @property
    def is_active(self) -> bool:
        """True while gameplay must stay suspended."""
        return self.is_open or self.countdown.counting_down

    def reset(self) -> None:
        """Back to a fresh round for a new session."""
        self.phase = BonusPhase.CLOSED
        self.reels = [SYMBOLS[0]] * REEL_COUNT
        self.used_this_trigger = False
        self.trigger_tier = 0
        self.countdown.stop()
        self._phase_elapsed = 0.0
        self._shuffle_elapsed = 0.0
        self._cancelled = False

    def cancel(self) -> None:
        """Stop every timer. Further updates are ignored until reset()."""
        if self.is_active:
            logger.info("Bonus round cancelled")
        self.phase = BonusPhase.CLOSED
        self.countdown.stop()
        self._cancelled = True

    def tier_for(self, score: int) -> int:
        return score // self.settings.tier_size

    def check_trigger(self, score: int) -> Event | None:
        """Open a round if the score reached a tier not yet consumed."""
        if self._cancelled or self.is_active:
            return None

        tier = self.tier_for(score)
        if tier <= self.trigger_tier:
            return None

        self.trigger_tier = tier
        self.phase = BonusPhase.IDLE
        self.used_this_trigger = False
        self._phase_elapsed = 0.0
        logger.info(f"Bonus round opened at score {score} (tier {tier})")
        return Event(EventType.BONUS_OPENED, data={"score": score, "tier": tier}, source="bonus")

    def spin(self) -> Event | None:
        """Start spinning. A no-op unless the round is idle and unused."""
        if self.phase is not BonusPhase.IDLE or self.used_this_trigger:
            logger.debug(f"Spin ignored in phase {self.phase.name}")
            return None

        self.used_this_trigger = True
        self.phase = BonusPhase.SPINNING
        self._phase_elapsed = 0.0
        self._shuffle_elapsed = 0.0
        self._shuffle()
        logger.info("Bonus reels spinning")
        return Event(EventType.BONUS_SPIN_STARTED, source="bonus")

    def decline(self) -> Event | None:
        """Close an idle round without spinning and start the countdown."""
        if self.phase is not BonusPhase.IDLE:
            return None

        self.used_this_trigger = True
        self._close()
        logger.info("Bonus round declined")
        return Event(
            EventType.COUNTDOWN_TICK,
            data={"remaining": self.countdown.remaining_seconds},
            source="bonus",
        )

    def resolve(self, win: bool | None = None) -> Event:
        """
        Settle the reels.

        Args:
            win: Force the outcome; drawn from win_probability when None
        """
        if win is None:
            win = self.rng.random() < self.settings.win_probability

        if win:
            symbol = self.rng.choice(SYMBOLS)
            self.reels = [symbol] * REEL_COUNT
            self.phase = BonusPhase.WIN
        else:
            self.reels = distinct_reels([self.rng.choice(SYMBOLS) for _ in range(REEL_COUNT)])
            self.phase = BonusPhase.LOSE

        self._phase_elapsed = 0.0
        logger.info(f"Bonus resolved: {self.phase.name} {self.reels}")
        return Event(
            EventType.BONUS_RESOLVED,
            data={"win": win, "reels": list(self.reels), "multiplier": self.settings.multiplier if win else 1},
            source="bonus",
        )

    def update(self, delta: float) -> list[Event]:
        """Advance the bonus timers by one tick."""
        if self._cancelled:
            return []

        events: list[Event] = []

        if self.phase is BonusPhase.SPINNING:
            self._phase_elapsed += delta
            self._shuffle_elapsed += delta
            while self._shuffle_elapsed >= self.settings.shuffle_interval:
                self._shuffle_elapsed -= self.settings.shuffle_interval
                self._shuffle()
            if self._phase_elapsed >= self.settings.spin_duration:
                events.append(self.resolve())

        elif self.phase in (BonusPhase.WIN, BonusPhase.LOSE):
            self._phase_elapsed += delta
            if self._phase_elapsed >= self.settings.result_display:
                self._close()
                events.append(Event(
                    EventType.COUNTDOWN_TICK,
                    data={"remaining": self.countdown.remaining_seconds},
                    source="bonus",
                ))

        elif self.countdown.counting_down:
            for remaining in self.countdown.update(delta):
                events.append(Event(
                    EventType.COUNTDOWN_TICK,
                    data={"remaining": remaining},
                    source="bonus",
                ))

        return events

    def _close(self) -> None:
        self.phase = BonusPhase.CLOSED
        self._phase_elapsed = 0.0
        self.countdown.start(self.settings.countdown_seconds)

    def _shuffle(self) -> None:
        self.reels = [self.rng.choice(SYMBOLS) for _ in range(REEL_COUNT)]
