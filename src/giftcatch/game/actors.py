"""Game objects: the Grinch, Santa's sleigh and the gifts it drops."""

from dataclasses import dataclass, field
from enum import Enum


class Variant(Enum):
    """Kinds of falling objects."""
    REWARD = "gift"       # +1 score when caught, game over on the ground
    HAZARD = "bomb"       # game over when caught
    IMPAIRER = "snowball"  # freezes the Grinch, homes in on him


@dataclass
class Actor:
    """Axis-aligned box, (x, y) is the top-left corner."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    def overlaps(self, other: "Actor") -> bool:
        """Strict AABB intersection (touching edges do not count)."""
        return (
            self.x < other.x + other.width and
            self.x + self.width > other.x and
            self.y < other.y + other.height and
            self.y + self.height > other.y
        )


@dataclass
class Player(Actor):
    """The Grinch."""
    impaired: bool = False
    impaired_until: float = 0.0

    # Walk cycle (cosmetic)
    leg_phase: float = 0.0
    prev_x: float = 0.0


@dataclass
class MotionState:
    """Santa's patrol state between direction flips."""
    direction: int = 1  # 1 = right, -1 = left
    velocity: float = 0.0
    target_velocity: float = 100.0
    segment_elapsed: float = 0.0
    segment_duration: float = 1.5
    flip_cooldown: float = 0.0
    facing_left: bool = False


@dataclass
class Emitter(Actor):
    """Santa's sleigh, dropping gifts."""
    motion: MotionState = field(default_factory=MotionState)


@dataclass
class FallingObject(Actor):
    """A gift, bomb or snowball on its way down."""
    id: int = 0
    fall_speed: float = 0.0
    variant: Variant = Variant.REWARD
