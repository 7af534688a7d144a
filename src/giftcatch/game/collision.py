"""
Collision and outcome resolution.

Every falling object that overlaps the Grinch is caught exactly once and
leaves the active list, whatever its variant. Objects are checked in
spawn order; a bomb stops the scan, so objects after it are neither
caught nor removed on that tick.
"""

from dataclasses import dataclass, field
from typing import Optional

from giftcatch.game.actors import Actor, FallingObject, Variant


@dataclass
class CollisionOutcome:
    """What the Grinch caught during one tick."""
    rewards: list[FallingObject] = field(default_factory=list)
    impairers: list[FallingObject] = field(default_factory=list)
    hazard: Optional[FallingObject] = None

    @property
    def score_gained(self) -> int:
        return len(self.rewards)

    @property
    def impaired(self) -> bool:
        return bool(self.impairers)

    @property
    def hazard_hit(self) -> bool:
        return self.hazard is not None

    @property
    def caught(self) -> list[FallingObject]:
        """All caught objects in spawn order."""
        caught = self.rewards + self.impairers
        if self.hazard is not None:
            caught.append(self.hazard)
        return sorted(caught, key=lambda obj: obj.id)


def resolve_collisions(objects: list[FallingObject], player: Actor) -> CollisionOutcome:
    """
    Catch everything overlapping the player, in place.

    Caught objects are removed from `objects`. Effects (score, freeze,
    game over) are applied by the caller from the returned outcome.
    """
    outcome = CollisionOutcome()
    kept: list[FallingObject] = []

    for index, obj in enumerate(objects):
        if not player.overlaps(obj):
            kept.append(obj)
            continue

        if obj.variant is Variant.HAZARD:
            outcome.hazard = obj
            kept.extend(objects[index + 1:])
            break
        elif obj.variant is Variant.IMPAIRER:
            outcome.impairers.append(obj)
        else:
            outcome.rewards.append(obj)

    objects[:] = kept
    return outcome


def check_ground_loss(objects: list[FallingObject], ground_y: float) -> Optional[FallingObject]:
    """
    First gift that fell past the ground line, if any.

    Bombs and snowballs never end the game by reaching the ground.
    """
    for obj in objects:
        if obj.variant is Variant.REWARD and obj.y > ground_y:
            return obj
    return None
