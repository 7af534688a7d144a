"""
Falling object trajectories.

Gifts and bombs drop straight down. Snowballs home in on the Grinch, but
the homing component is a fraction of the fall speed and a dominant
downward term is always added, so they bend toward him without becoming
unavoidable.
"""

import math

from giftcatch.config.settings import MotionSettings, PlayfieldSettings
from giftcatch.game.actors import Actor, FallingObject, Variant


def step_straight(obj: FallingObject, delta: float) -> None:
    obj.y += obj.fall_speed * delta


def step_homing(
    obj: FallingObject,
    target: Actor,
    delta: float,
    homing_fraction: float = 0.35,
    fall_fraction: float = 0.8,
) -> None:
    """Move a homing object toward the target's center."""
    dx = target.center_x - obj.center_x
    dy = target.center_y - obj.center_y
    distance = math.hypot(dx, dy)
    if distance > 0:
        nx, ny = dx / distance, dy / distance
    else:
        nx = ny = 0.0

    homing = obj.fall_speed * homing_fraction
    obj.x += nx * homing * delta
    obj.y += (obj.fall_speed * fall_fraction + ny * homing) * delta


def is_off_playfield(obj: FallingObject, playfield: PlayfieldSettings) -> bool:
    margin = playfield.removal_margin
    return (
        obj.y > playfield.height + margin or
        obj.x < -margin or
        obj.x > playfield.width + margin
    )


class ObjectMover:
    """Advances every falling object and drops the ones that left the field."""

    def __init__(
        self,
        playfield: PlayfieldSettings | None = None,
        settings: MotionSettings | None = None,
    ):
        self.playfield = playfield or PlayfieldSettings()
        self.settings = settings or MotionSettings()

    def update(self, objects: list[FallingObject], target: Actor, delta: float) -> list[FallingObject]:
        """
        Move all objects one tick, in place.

        Returns:
            Objects removed for leaving the playfield
        """
        for obj in objects:
            if obj.variant is Variant.IMPAIRER:
                step_homing(
                    obj, target, delta,
                    self.settings.homing_fraction,
                    self.settings.fall_fraction,
                )
            else:
                step_straight(obj, delta)

        kept: list[FallingObject] = []
        removed: list[FallingObject] = []
        for obj in objects:
            (removed if is_off_playfield(obj, self.playfield) else kept).append(obj)
        objects[:] = kept
        return removed
