"""
Player intent for one tick.

Kept free of any windowing library so the simulation core can be driven
headless. Input sources that read pygame events live in game.input.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class InputState:
    """Held directions for one tick."""
    left: bool = False
    right: bool = False

    @property
    def direction(self) -> int:
        """-1, 0 or +1. Holding both directions cancels out."""
        return int(self.right) - int(self.left)


IDLE = InputState()
