"""Basic drawing primitives on numpy frame buffers."""

from typing import Tuple
import numpy as np
from numpy.typing import NDArray

# Type aliases
Color = Tuple[int, int, int]
Buffer = NDArray[np.uint8]


def new_buffer(width: int, height: int, color: Color = (0, 0, 0)) -> Buffer:
    """Create an (height, width, 3) frame buffer."""
    buffer = np.zeros((height, width, 3), dtype=np.uint8)
    buffer[:, :] = color
    return buffer


def fill(buffer: Buffer, color: Color) -> None:
    """Fill entire buffer with color."""
    buffer[:, :] = color


def vertical_gradient(buffer: Buffer, top: Color, bottom: Color) -> None:
    """Fill the buffer with a top-to-bottom gradient."""
    h = buffer.shape[0]
    t = np.linspace(0.0, 1.0, h, dtype=np.float32)[:, None]
    start = np.array(top, dtype=np.float32)
    end = np.array(bottom, dtype=np.float32)
    rows = (start + (end - start) * t).astype(np.uint8)
    buffer[:, :] = rows[:, None, :]


def draw_rect(
    buffer: Buffer,
    x: int,
    y: int,
    width: int,
    height: int,
    color: Color,
    filled: bool = True,
    thickness: int = 1,
) -> None:
    """Draw a rectangle on the buffer.

    Args:
        buffer: Target numpy array (height, width, 3)
        x: Left edge x coordinate
        y: Top edge y coordinate
        width: Rectangle width
        height: Rectangle height
        color: RGB color tuple
        filled: If True, fill rectangle; if False, draw outline only
        thickness: Line thickness for outline (when filled=False)
    """
    h, w = buffer.shape[:2]

    # Clamp to buffer bounds
    x1 = max(0, min(int(x), w))
    y1 = max(0, min(int(y), h))
    x2 = max(0, min(int(x + width), w))
    y2 = max(0, min(int(y + height), h))
    if x1 >= x2 or y1 >= y2:
        return

    if filled:
        buffer[y1:y2, x1:x2] = color
        return

    t = max(1, thickness)
    buffer[y1:min(y1 + t, y2), x1:x2] = color
    buffer[max(y2 - t, y1):y2, x1:x2] = color
    buffer[y1:y2, x1:min(x1 + t, x2)] = color
    buffer[y1:y2, max(x2 - t, x1):x2] = color


def draw_circle(
    buffer: Buffer,
    cx: int,
    cy: int,
    radius: int,
    color: Color,
) -> None:
    """Draw a filled circle, touching only its bounding box."""
    h, w = buffer.shape[:2]
    cx, cy, radius = int(cx), int(cy), int(radius)

    x1, x2 = max(0, cx - radius), min(w, cx + radius + 1)
    y1, y2 = max(0, cy - radius), min(h, cy + radius + 1)
    if x1 >= x2 or y1 >= y2:
        return

    ys, xs = np.ogrid[y1:y2, x1:x2]
    mask = (xs - cx) ** 2 + (ys - cy) ** 2 <= radius ** 2
    buffer[y1:y2, x1:x2][mask] = color


def draw_line(
    buffer: Buffer,
    x1: int,
    y1: int,
    x2: int,
    y2: int,
    color: Color,
) -> None:
    """Draw a one pixel line using Bresenham's algorithm."""
    h, w = buffer.shape[:2]
    x1, y1, x2, y2 = int(x1), int(y1), int(x2), int(y2)

    dx = abs(x2 - x1)
    dy = abs(y2 - y1)
    sx = 1 if x1 < x2 else -1
    sy = 1 if y1 < y2 else -1
    err = dx - dy

    x, y = x1, y1
    while True:
        if 0 <= x < w and 0 <= y < h:
            buffer[y, x] = color

        if x == x2 and y == y2:
            break

        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x += sx
        if e2 < dx:
            err += dx
            y += sy
