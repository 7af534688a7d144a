"""Graphics module: numpy frame buffers and the snapshot renderer."""

from giftcatch.graphics.renderer import Renderer, Palette
from giftcatch.graphics.primitives import (
    draw_rect,
    draw_circle,
    draw_line,
    fill,
    new_buffer,
    vertical_gradient,
)

__all__ = [
    "Renderer",
    "Palette",
    "draw_rect",
    "draw_circle",
    "draw_line",
    "fill",
    "new_buffer",
    "vertical_gradient",
]
