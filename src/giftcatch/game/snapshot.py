"""
Read-only views of a session for renderers and UIs.

Snapshots are plain frozen dataclasses copied out of the session, so a
collaborator holding one can never mutate the simulation.
"""

from dataclasses import dataclass

from giftcatch.core.state import State
from giftcatch.game.actors import Emitter, FallingObject, Player, Variant
from giftcatch.game.bonus import BonusPhase, BonusRound


@dataclass(frozen=True)
class PlayerView:
    x: float
    y: float
    width: float
    height: float
    impaired: bool
    leg_phase: float

    @classmethod
    def of(cls, player: Player) -> "PlayerView":
        return cls(player.x, player.y, player.width, player.height, player.impaired, player.leg_phase)


@dataclass(frozen=True)
class EmitterView:
    x: float
    y: float
    width: float
    height: float
    facing_left: bool

    @classmethod
    def of(cls, emitter: Emitter) -> "EmitterView":
        return cls(emitter.x, emitter.y, emitter.width, emitter.height, emitter.motion.facing_left)


@dataclass(frozen=True)
class ObjectView:
    id: int
    x: float
    y: float
    width: float
    height: float
    variant: Variant

    @classmethod
    def of(cls, obj: FallingObject) -> "ObjectView":
        return cls(obj.id, obj.x, obj.y, obj.width, obj.height, obj.variant)


@dataclass(frozen=True)
class BonusView:
    phase: BonusPhase
    reels: tuple[str, ...]
    used_this_trigger: bool
    countdown: int
    counting_down: bool

    @classmethod
    def of(cls, bonus: BonusRound) -> "BonusView":
        return cls(
            phase=bonus.phase,
            reels=tuple(bonus.reels),
            used_this_trigger=bonus.used_this_trigger,
            countdown=bonus.countdown.remaining_seconds,
            counting_down=bonus.countdown.counting_down,
        )


@dataclass(frozen=True)
class SessionSnapshot:
    """Everything needed to draw one frame."""
    session_id: int
    state: State
    username: str
    score: int
    difficulty: int
    elapsed: float
    player: PlayerView
    emitter: EmitterView
    objects: tuple[ObjectView, ...]
    bonus: BonusView
    game_over_reason: str | None = None
