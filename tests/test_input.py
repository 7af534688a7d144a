"""Keyboard and touch input sources."""
import subprocess
import sys

import pygame
import pytest

from giftcatch.game.input import CombinedInput, KeyboardInput, TouchInput
from giftcatch.game.intent import IDLE, InputState


def key(event_type, code):
    return pygame.event.Event(event_type, key=code)


class TestInputState:

    @pytest.mark.parametrize("left, right, direction", [
        (False, False, 0),
        (True, False, -1),
        (False, True, 1),
        (True, True, 0),
    ])
    def test_direction(self, left, right, direction):
        assert InputState(left=left, right=right).direction == direction

    def test_idle(self):
        assert IDLE.direction == 0

    def test_simulation_core_imports_without_pygame(self):
        code = "import sys, giftcatch.game; sys.exit(int('pygame' in sys.modules))"
        result = subprocess.run([sys.executable, "-c", code], capture_output=True, text=True)
        assert result.returncode == 0, result.stderr


class TestKeyboardInput:

    def test_arrow_keys(self):
        keyboard = KeyboardInput()
        assert keyboard.handle_event(key(pygame.KEYDOWN, pygame.K_LEFT))
        assert keyboard.poll() == InputState(left=True)

        keyboard.handle_event(key(pygame.KEYUP, pygame.K_LEFT))
        assert keyboard.poll() == IDLE

    def test_letter_keys(self):
        keyboard = KeyboardInput()
        keyboard.handle_event(key(pygame.KEYDOWN, pygame.K_d))
        assert keyboard.poll().direction == 1

    def test_held_state_survives_other_key_release(self):
        keyboard = KeyboardInput()
        keyboard.handle_event(key(pygame.KEYDOWN, pygame.K_LEFT))
        keyboard.handle_event(key(pygame.KEYDOWN, pygame.K_a))
        keyboard.handle_event(key(pygame.KEYUP, pygame.K_a))
        assert keyboard.poll().left

    def test_both_held_cancels(self):
        keyboard = KeyboardInput()
        keyboard.handle_event(key(pygame.KEYDOWN, pygame.K_LEFT))
        keyboard.handle_event(key(pygame.KEYDOWN, pygame.K_RIGHT))
        assert keyboard.poll().direction == 0

    def test_ignores_other_keys(self):
        keyboard = KeyboardInput()
        assert not keyboard.handle_event(key(pygame.KEYDOWN, pygame.K_SPACE))
        assert not keyboard.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=(0, 0), button=1))
        assert keyboard.poll() == IDLE

    def test_reset(self):
        keyboard = KeyboardInput()
        keyboard.handle_event(key(pygame.KEYDOWN, pygame.K_RIGHT))
        keyboard.reset()
        assert keyboard.poll() == IDLE


class TestTouchInput:

    def test_left_half(self):
        touch = TouchInput(800)
        touch.press_at(100)
        assert touch.poll() == InputState(left=True)

    def test_right_half(self):
        touch = TouchInput(800)
        touch.press_at(400)
        assert touch.poll() == InputState(right=True)

    def test_release(self):
        touch = TouchInput(800)
        touch.press_at(100)
        touch.release()
        assert touch.poll() == IDLE

    def test_mouse_events(self):
        touch = TouchInput(800)
        touch.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=(700, 300), button=1))
        assert touch.poll().right

        touch.handle_event(pygame.event.Event(pygame.MOUSEMOTION, pos=(50, 300), rel=(0, 0), buttons=(1, 0, 0)))
        assert touch.poll().left

        touch.handle_event(pygame.event.Event(pygame.MOUSEBUTTONUP, pos=(50, 300), button=1))
        assert touch.poll() == IDLE

    def test_motion_without_press_is_ignored(self):
        touch = TouchInput(800)
        touch.handle_event(pygame.event.Event(pygame.MOUSEMOTION, pos=(50, 300), rel=(0, 0), buttons=(0, 0, 0)))
        assert touch.poll() == IDLE

    def test_finger_coordinates_are_normalized(self):
        touch = TouchInput(800)
        touch.handle_event(pygame.event.Event(pygame.FINGERDOWN, x=0.9, y=0.5, finger_id=0, touch_id=0))
        assert touch.poll().right

        touch.handle_event(pygame.event.Event(pygame.FINGERUP, x=0.9, y=0.5, finger_id=0, touch_id=0))
        assert touch.poll() == IDLE


class TestCombinedInput:

    def test_merges_sources(self):
        keyboard = KeyboardInput()
        touch = TouchInput(800)
        combined = CombinedInput(keyboard, touch)

        keyboard.handle_event(key(pygame.KEYDOWN, pygame.K_LEFT))
        touch.press_at(700)

        assert combined.poll() == InputState(left=True, right=True)
        assert combined.poll().direction == 0

    def test_reset_all(self):
        keyboard = KeyboardInput()
        touch = TouchInput(800)
        combined = CombinedInput(keyboard, touch)
        keyboard.handle_event(key(pygame.KEYDOWN, pygame.K_LEFT))
        touch.press_at(700)

        combined.reset()
        assert combined.poll() == IDLE

    def test_event_fans_out(self):
        combined = CombinedInput(KeyboardInput(), KeyboardInput())
        assert combined.handle_event(key(pygame.KEYDOWN, pygame.K_RIGHT))
        assert combined.poll().right
