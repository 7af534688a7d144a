"""
Desktop game window using pygame.

Hosts one GameSession: routes keyboard/touch input to it, drives it from
the cooperative GameLoop, draws its snapshots and overlays the HUD, name
entry and leaderboard.
"""

import asyncio
import inspect
import logging
import random
from typing import Optional

import pygame

from giftcatch.animation.particles import ParticleEffects, ParticleSystem
from giftcatch.audio.engine import AudioEngine
from giftcatch.config.settings import Settings
from giftcatch.core.clock import FrameClock
from giftcatch.core.errors import InvalidUsernameError
from giftcatch.core.events import Event, EventBus, EventType
from giftcatch.core.loop import GameLoop
from giftcatch.core.state import State
from giftcatch.game.bonus import BonusPhase
from giftcatch.game.input import CombinedInput, KeyboardInput, TouchInput
from giftcatch.game.session import USERNAME_MAX_LENGTH, GameSession
from giftcatch.game.snapshot import SessionSnapshot
from giftcatch.graphics.renderer import Renderer
from giftcatch.leaderboard.store import LeaderboardEntry, ScoreSink

logger = logging.getLogger(__name__)

TEXT = (240, 240, 255)
MUTED = (160, 170, 200)
ACCENT = (255, 215, 0)
ERROR = (255, 110, 110)
OK = (120, 230, 140)


class GameWindow:
    """
    Main game window.

    Keyboard Mapping:
        LEFT ARROW / A: Move left
        RIGHT ARROW / D: Move right
        SPACE: Spin the bonus reels / restart after game over
        N: Decline the bonus round
        R: Restart
        C: Change player (after game over)
        M: Toggle mute
        ESC: Exit
    """

    def __init__(
        self,
        settings: Settings,
        session: GameSession,
        event_bus: EventBus,
        audio: AudioEngine | None = None,
        sink: ScoreSink | None = None,
    ) -> None:
        self.settings = settings
        self.session = session
        self.event_bus = event_bus
        self.audio = audio
        self.sink = sink

        playfield = settings.playfield
        self._scale = max(1, settings.display.scale)
        self._size = (playfield.width * self._scale, playfield.height * self._scale)

        self.renderer = Renderer(playfield.width, playfield.height, playfield.ground_y)
        self.effects = ParticleEffects(
            event_bus,
            ParticleSystem(rng=random.Random(settings.seed)),
            center=(playfield.width / 2, playfield.height / 2),
        )
        self.keyboard = KeyboardInput()
        self.touch = TouchInput(self._size[0])
        self.input = CombinedInput(self.keyboard, self.touch)

        self.loop = GameLoop(
            FrameClock(settings.display.max_delta),
            self._frame,
            fps=settings.display.fps,
        )

        self._screen: Optional[pygame.Surface] = None
        self._font: Optional[pygame.font.Font] = None
        self._big_font: Optional[pygame.font.Font] = None
        self._small_font: Optional[pygame.font.Font] = None
        self._frame_buffer = self.renderer.new_frame()

        # Name entry
        self._name_text = ""
        self._name_error: Optional[str] = None

        # Leaderboard and save status
        self._leaderboard: list[LeaderboardEntry] = []
        self._save_status: Optional[tuple[str, tuple[int, int, int]]] = None
        self._tasks: set[asyncio.Task] = set()

        self._unsubscribers = [
            event_bus.subscribe(EventType.GAME_OVER, self._on_game_over),
            event_bus.subscribe(EventType.SCORE_SAVED, self._on_save_result),
            event_bus.subscribe(EventType.SCORE_SAVE_FAILED, self._on_save_result),
        ]

        logger.info("GameWindow created")

    def _init_pygame(self) -> None:
        """Initialize pygame and create window."""
        pygame.init()
        pygame.display.set_caption(self.settings.display.title)

        flags = pygame.DOUBLEBUF
        if self.settings.display.fullscreen:
            flags |= pygame.FULLSCREEN
        self._screen = pygame.display.set_mode(self._size, flags)

        pygame.font.init()
        self._font = pygame.font.SysFont(None, 32)
        self._big_font = pygame.font.SysFont(None, 96)
        self._small_font = pygame.font.SysFont(None, 24)

        logger.info(f"Pygame initialized: {self._size[0]}x{self._size[1]}")

    # Events

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.stop()
            elif event.type == pygame.WINDOWFOCUSLOST:
                self.input.reset()
            elif self.session.state == State.AWAITING_NAME:
                self._handle_name_entry(event)
            elif event.type == pygame.KEYDOWN and self._handle_command(event.key):
                continue
            else:
                self.input.handle_event(event)

    def _handle_command(self, key: int) -> bool:
        """Game-level keys. Returns True if the key was consumed."""
        state = self.session.state

        if key == pygame.K_ESCAPE:
            self.stop()
        elif key == pygame.K_m:
            if self.audio:
                self.audio.toggle_mute()
        elif key == pygame.K_SPACE and state == State.SUSPENDED:
            self.session.spin_bonus()
        elif key == pygame.K_n and state == State.SUSPENDED:
            self.session.decline_bonus()
        elif key in (pygame.K_SPACE, pygame.K_RETURN, pygame.K_r) and state == State.GAME_OVER:
            self._restart()
        elif key == pygame.K_r and self.session.state_machine.is_live:
            self._restart()
        elif key == pygame.K_c and state == State.GAME_OVER:
            self.session.change_player()
            self._name_text = self.session.username
        else:
            return False
        return True

    def _handle_name_entry(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return

        if event.key == pygame.K_ESCAPE:
            self.stop()
        elif event.key == pygame.K_RETURN:
            try:
                self.session.start(self._name_text)
            except InvalidUsernameError as e:
                self._name_error = str(e)
                return
            self._name_error = None
            self._on_session_started()
        elif event.key == pygame.K_BACKSPACE:
            self._name_text = self._name_text[:-1]
        elif event.unicode and event.unicode.isprintable() and len(self._name_text) < USERNAME_MAX_LENGTH:
            self._name_text += event.unicode

    def _restart(self) -> None:
        self.session.restart()
        self._on_session_started()

    def _on_session_started(self) -> None:
        self.input.reset()
        self.loop.clock.reset()
        self._save_status = None

    def _on_game_over(self, event: Event) -> None:
        self.input.reset()
        self._schedule(self._refresh_leaderboard())

    def _on_save_result(self, event: Event) -> None:
        if event.data.get("session_id") != self.session.session_id:
            return
        if event.type == EventType.SCORE_SAVED:
            self._save_status = ("Score saved!", OK)
            self._schedule(self._refresh_leaderboard())
        else:
            self._save_status = ("Could not save score", ERROR)

    def _schedule(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _refresh_leaderboard(self) -> None:
        top_scores = getattr(self.sink, "top_scores", None)
        if top_scores is None:
            return
        result = top_scores(self.settings.leaderboard.default_limit)
        if inspect.isawaitable(result):
            result = await result
        self._leaderboard = list(result)

    # Frame

    def _frame(self, now: float, delta: float) -> None:
        self._handle_events()
        self.session.tick(delta, self.input.poll())
        self.effects.update(delta)
        self._render(self.session.snapshot())

    def _render(self, snapshot: SessionSnapshot) -> None:
        if not self._screen:
            return

        frame = self.renderer.render(snapshot, self._frame_buffer)
        self.effects.render(frame)

        surface = pygame.surfarray.make_surface(frame.swapaxes(0, 1))
        if self._scale > 1:
            surface = pygame.transform.scale(surface, self._size)
        self._screen.blit(surface, (0, 0))

        if snapshot.state == State.AWAITING_NAME:
            self._render_name_entry()
        else:
            self._render_hud(snapshot)
            if snapshot.bonus.phase is not BonusPhase.CLOSED:
                self._render_bonus(snapshot)
            elif snapshot.bonus.counting_down:
                self._center_text(str(snapshot.bonus.countdown), self._big_font, ACCENT)
            if snapshot.state == State.GAME_OVER:
                self._render_game_over(snapshot)

        pygame.display.flip()

    def _text(self, text: str, font: pygame.font.Font, color, pos: tuple[int, int], center: bool = False) -> None:
        surface = font.render(text, True, color)
        rect = surface.get_rect()
        if center:
            rect.center = pos
        else:
            rect.topleft = pos
        self._screen.blit(surface, rect)

    def _center_text(self, text: str, font: pygame.font.Font, color, dy: int = 0) -> None:
        w, h = self._size
        self._text(text, font, color, (w // 2, h // 2 + dy), center=True)

    def _render_hud(self, snapshot: SessionSnapshot) -> None:
        self._text(f"Score: {snapshot.score}", self._font, TEXT, (16, 12))
        self._text(f"Level: {snapshot.difficulty}", self._small_font, MUTED, (16, 44))
        self._text(snapshot.username, self._small_font, MUTED, (self._size[0] - 200, 12))
        if snapshot.player.impaired:
            self._text("FROZEN!", self._font, (140, 200, 255), (self._size[0] // 2, 24), center=True)

    def _render_name_entry(self) -> None:
        self._center_text("Grinch's Gift Catch", self._big_font, ACCENT, -120)
        self._center_text("Enter your name and press ENTER", self._font, TEXT, -30)
        self._center_text(self._name_text + "_", self._font, ACCENT, 20)
        if self._name_error:
            self._center_text(self._name_error, self._small_font, ERROR, 60)

    def _render_bonus(self, snapshot: SessionSnapshot) -> None:
        phase = snapshot.bonus.phase
        if phase is BonusPhase.IDLE:
            self._center_text("BONUS ROUND! SPACE to spin, N to skip", self._font, ACCENT, -110)
        elif phase is BonusPhase.SPINNING:
            self._center_text("Spinning...", self._font, TEXT, -110)
        elif phase is BonusPhase.WIN:
            self._center_text(f"JACKPOT! Score x2 = {snapshot.score}", self._font, OK, -110)
        elif phase is BonusPhase.LOSE:
            self._center_text("No luck this time", self._font, ERROR, -110)

        for (x, y, w, h), symbol in zip(self.renderer.reel_rects(), snapshot.bonus.reels):
            pos = ((x + w // 2) * self._scale, (y + h + 18) * self._scale)
            self._text(symbol, self._small_font, TEXT, pos, center=True)

    def _render_game_over(self, snapshot: SessionSnapshot) -> None:
        reason = "A gift hit the ground!" if snapshot.game_over_reason == "ground" else "BOOM! You caught a bomb!"
        self._center_text("GAME OVER", self._big_font, ERROR, -200)
        self._center_text(reason, self._font, TEXT, -140)
        self._center_text(f"Final score: {snapshot.score}", self._font, ACCENT, -100)
        if self._save_status:
            text, color = self._save_status
            self._center_text(text, self._small_font, color, -70)

        for i, entry in enumerate(self._leaderboard[:10]):
            line = f"{i + 1:>2}. {entry.username:<20} {entry.score:>5}"
            self._center_text(line, self._small_font, TEXT, -30 + i * 24)

        self._center_text("SPACE to play again, C to change player", self._small_font, MUTED, 230)

    # Lifecycle

    async def run(self) -> None:
        """Main window loop."""
        self._init_pygame()
        self.loop.start()
        logger.info("Game window started")

        await self.loop.wait()
        self._cleanup()

    def stop(self) -> None:
        """Stop the window. Safe to call more than once."""
        self.loop.stop()

    def _cleanup(self) -> None:
        """Clean up pygame resources."""
        self.session.teardown()
        self.effects.close()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        for task in list(self._tasks):
            task.cancel()
        pygame.quit()
        logger.info("Game window stopped")
