"""
Input state for the Grinch.

Input sources expose a polled snapshot of the current left/right intent.
Nothing is debounced: the session reads the raw held state once per tick.
"""

from abc import ABC, abstractmethod
import logging

import pygame

from giftcatch.game.intent import IDLE, InputState

logger = logging.getLogger(__name__)


class InputSource(ABC):
    """Abstract base class for anything that can steer the Grinch."""

    @abstractmethod
    def poll(self) -> InputState:
        """Current intent, read once per tick."""
        ...

    @abstractmethod
    def handle_event(self, event: pygame.event.Event) -> bool:
        """
        Feed a pygame event.

        Returns:
            True if the event changed the held state
        """
        ...

    def reset(self) -> None:
        """Release everything (window lost focus, session restarted)."""


class KeyboardInput(InputSource):
    """
    Tracks held keys from key down/up events.

    Keyboard Mapping:
        LEFT ARROW / A: move left
        RIGHT ARROW / D: move right
    """

    LEFT_KEYS = frozenset({pygame.K_LEFT, pygame.K_a})
    RIGHT_KEYS = frozenset({pygame.K_RIGHT, pygame.K_d})

    def __init__(self) -> None:
        self._held: set[int] = set()

    def poll(self) -> InputState:
        return InputState(
            left=bool(self._held & self.LEFT_KEYS),
            right=bool(self._held & self.RIGHT_KEYS),
        )

    def handle_event(self, event: pygame.event.Event) -> bool:
        if event.type not in (pygame.KEYDOWN, pygame.KEYUP):
            return False

        key = event.key
        if key not in self.LEFT_KEYS and key not in self.RIGHT_KEYS:
            return False

        if event.type == pygame.KEYDOWN:
            self._held.add(key)
        else:
            self._held.discard(key)
        return True

    def reset(self) -> None:
        self._held.clear()


class TouchInput(InputSource):
    """
    Maps a held pointer to the left or right half of the screen.

    Mouse buttons and finger events both count as touches. Finger
    coordinates are normalized by pygame, mouse ones are in pixels.
    """

    def __init__(self, screen_width: int) -> None:
        self.screen_width = screen_width
        self._pointer_x: float | None = None

    def poll(self) -> InputState:
        if self._pointer_x is None:
            return IDLE
        if self._pointer_x < self.screen_width / 2:
            return InputState(left=True)
        return InputState(right=True)

    def press_at(self, x: float) -> None:
        self._pointer_x = x

    def release(self) -> None:
        self._pointer_x = None

    def handle_event(self, event: pygame.event.Event) -> bool:
        if event.type == pygame.MOUSEBUTTONDOWN:
            self.press_at(event.pos[0])
        elif event.type == pygame.MOUSEMOTION and self._pointer_x is not None:
            self.press_at(event.pos[0])
        elif event.type == pygame.MOUSEBUTTONUP:
            self.release()
        elif event.type in (pygame.FINGERDOWN, pygame.FINGERMOTION):
            self.press_at(event.x * self.screen_width)
        elif event.type == pygame.FINGERUP:
            self.release()
        else:
            return False
        return True

    def reset(self) -> None:
        self.release()


class CombinedInput(InputSource):
    """Merges several sources; a direction is held if any source holds it."""

    def __init__(self, *sources: InputSource) -> None:
        self.sources = list(sources)

    def poll(self) -> InputState:
        left = right = False
        for source in self.sources:
            state = source.poll()
            left = left or state.left
            right = right or state.right
        return InputState(left=left, right=right)

    def handle_event(self, event: pygame.event.Event) -> bool:
        changed = False
        for source in self.sources:
            changed = source.handle_event(event) or changed
        return changed

    def reset(self) -> None:
        for source in self.sources:
            source.reset()
