"""Frame renderer: draws a session snapshot into a numpy buffer."""

from dataclasses import dataclass, field
import math
from typing import Optional
import numpy as np
from numpy.typing import NDArray

from giftcatch.game.actors import Variant
from giftcatch.game.bonus import SYMBOLS, BonusPhase
from giftcatch.game.snapshot import (
    BonusView,
    EmitterView,
    ObjectView,
    PlayerView,
    SessionSnapshot,
)
from giftcatch.graphics.primitives import (
    Color, draw_circle, draw_line, draw_rect, new_buffer, vertical_gradient
)


@dataclass
class Palette:
    """Colors used by the renderer."""
    sky_top: Color = (10, 14, 40)
    sky_bottom: Color = (40, 50, 100)
    ground: Color = (235, 240, 255)
    grinch: Color = (60, 170, 60)
    grinch_frozen: Color = (140, 200, 255)
    grinch_dark: Color = (30, 100, 30)
    sleigh: Color = (200, 30, 30)
    santa: Color = (240, 240, 240)
    reindeer: Color = (140, 90, 50)
    reins: Color = (220, 190, 80)
    gift: Color = (220, 40, 60)
    ribbon: Color = (255, 215, 0)
    bomb: Color = (30, 30, 30)
    fuse: Color = (255, 140, 0)
    snowball: Color = (245, 250, 255)
    overlay: Color = (0, 0, 0)
    reel_frame: Color = (255, 215, 0)
    reel_face: Color = (30, 30, 60)
    win: Color = (80, 220, 120)
    lose: Color = (220, 80, 80)
    symbols: dict[str, Color] = field(default_factory=lambda: {
        "gift": (220, 40, 60),
        "tree": (40, 160, 70),
        "star": (255, 215, 0),
        "bell": (230, 170, 40),
        "candy": (255, 120, 180),
        "snowman": (240, 245, 255),
    })


class Renderer:
    """
    Draws snapshots. Holds no game state and never mutates the session.

    Usage:
        renderer = Renderer(800, 600, ground_y=540)
        frame = renderer.render(session.snapshot())
    """

    def __init__(self, width: int, height: int, ground_y: float, palette: Palette | None = None):
        self.width = width
        self.height = height
        self.ground_y = ground_y
        self.palette = palette or Palette()
        self._background = new_buffer(width, height)
        self._draw_background(self._background)

    def new_frame(self) -> NDArray[np.uint8]:
        return new_buffer(self.width, self.height)

    def render(
        self,
        snapshot: SessionSnapshot,
        buffer: Optional[NDArray[np.uint8]] = None,
    ) -> NDArray[np.uint8]:
        """Draw one frame. Allocates a buffer when none is given."""
        if buffer is None:
            buffer = self.new_frame()

        buffer[:, :] = self._background
        self._draw_emitter(buffer, snapshot.emitter)
        for obj in snapshot.objects:
            self._draw_object(buffer, obj)
        self._draw_player(buffer, snapshot.player)

        if snapshot.bonus.phase is not BonusPhase.CLOSED:
            self._draw_bonus(buffer, snapshot.bonus)
        elif snapshot.bonus.counting_down:
            self._dim(buffer, 0.6)

        return buffer

    # Scene

    def _draw_background(self, buffer: NDArray[np.uint8]) -> None:
        p = self.palette
        vertical_gradient(buffer, p.sky_top, p.sky_bottom)
        draw_rect(buffer, 0, int(self.ground_y), self.width, self.height - int(self.ground_y), p.ground)

    def _draw_emitter(self, buffer: NDArray[np.uint8], emitter: EmitterView) -> None:
        p = self.palette
        x, y, w, h = int(emitter.x), int(emitter.y), int(emitter.width), int(emitter.height)

        # Reindeer run ahead of the sleigh
        lead = -1 if emitter.facing_left else 1
        anchor = x if emitter.facing_left else x + w
        for i in range(3):
            rx = anchor + lead * (30 + i * 85)
            rx_left = rx - 50 if emitter.facing_left else rx
            draw_line(buffer, anchor, y + h // 2, rx_left + 25, y + h // 2 + 5, p.reins)
            draw_rect(buffer, rx_left, y + h // 2 - 5, 50, 22, p.reindeer)
            head_x = rx_left + (0 if emitter.facing_left else 40)
            draw_rect(buffer, head_x, y + h // 2 - 18, 12, 14, p.reindeer)

        draw_rect(buffer, x, y + h // 2, w, h // 2, p.sleigh)
        draw_circle(buffer, x + w // 2, y + h // 3, h // 4, p.santa)
        draw_rect(buffer, x + w // 2 - 8, y, 16, h // 6, p.sleigh)

    def _draw_player(self, buffer: NDArray[np.uint8], player: PlayerView) -> None:
        p = self.palette
        body = p.grinch_frozen if player.impaired else p.grinch
        x, y, w, h = int(player.x), int(player.y), int(player.width), int(player.height)

        draw_rect(buffer, x, y + h // 4, w, h // 2, body)
        draw_circle(buffer, x + w // 2, y + h // 6, w // 3, body)

        # Legs swing with the walk cycle
        swing = int(math.sin(player.leg_phase) * 6)
        leg_y = y + 3 * h // 4
        draw_rect(buffer, x + w // 4 - 4 + swing, leg_y, 8, h // 4, p.grinch_dark)
        draw_rect(buffer, x + 3 * w // 4 - 4 - swing, leg_y, 8, h // 4, p.grinch_dark)

    def _draw_object(self, buffer: NDArray[np.uint8], obj: ObjectView) -> None:
        p = self.palette
        x, y, w, h = int(obj.x), int(obj.y), int(obj.width), int(obj.height)
        cx, cy = x + w // 2, y + h // 2

        if obj.variant is Variant.REWARD:
            draw_rect(buffer, x, y, w, h, p.gift)
            draw_rect(buffer, cx - 2, y, 4, h, p.ribbon)
            draw_rect(buffer, x, cy - 2, w, 4, p.ribbon)
        elif obj.variant is Variant.HAZARD:
            draw_circle(buffer, cx, cy, w // 2, p.bomb)
            draw_line(buffer, cx, y, cx + 5, y - 6, p.fuse)
        else:
            draw_circle(buffer, cx, cy, w // 2, p.snowball)

    # Bonus overlay

    def _dim(self, buffer: NDArray[np.uint8], factor: float) -> None:
        buffer[:, :] = (buffer.astype(np.float32) * factor).astype(np.uint8)

    def reel_rects(self) -> list[tuple[int, int, int, int]]:
        """(x, y, w, h) of each reel window, left to right."""
        size = 100
        gap = 30
        total = 3 * size + 2 * gap
        left = (self.width - total) // 2
        top = (self.height - size) // 2
        return [(left + i * (size + gap), top, size, size) for i in range(3)]

    def _draw_bonus(self, buffer: NDArray[np.uint8], bonus: BonusView) -> None:
        p = self.palette
        self._dim(buffer, 0.35)

        frame = p.reel_frame
        if bonus.phase is BonusPhase.WIN:
            frame = p.win
        elif bonus.phase is BonusPhase.LOSE:
            frame = p.lose

        for (x, y, w, h), symbol in zip(self.reel_rects(), bonus.reels):
            draw_rect(buffer, x - 6, y - 6, w + 12, h + 12, frame)
            draw_rect(buffer, x, y, w, h, p.reel_face)
            self._draw_symbol(buffer, symbol, x, y, w, h)

    def _draw_symbol(self, buffer: NDArray[np.uint8], symbol: str, x: int, y: int, w: int, h: int) -> None:
        color = self.palette.symbols.get(symbol, (255, 255, 255))
        cx, cy = x + w // 2, y + h // 2
        index = SYMBOLS.index(symbol) if symbol in SYMBOLS else 0

        # One simple glyph per symbol so reels differ at a glance
        if index % 3 == 0:
            draw_rect(buffer, cx - 25, cy - 25, 50, 50, color)
        elif index % 3 == 1:
            for row in range(40):
                half = row // 2
                draw_rect(buffer, cx - half, cy - 20 + row, 2 * half + 1, 1, color)
        else:
            draw_circle(buffer, cx, cy, 26, color)
