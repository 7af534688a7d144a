"""
Chiptune sound effects for Grinch's Gift Catch.

Sounds are synthesized at startup from simple oscillators, then played
through pygame.mixer in response to game events. A short Jingle Bells
loop plays while a game is running. If no audio device is
available the engine stays silent and the game runs unaffected.
"""

import array
import logging
import math
import random
from typing import Callable, Dict, Optional

import pygame

from giftcatch.core.events import Event, EventBus, EventType

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100
MUSIC_VOLUME = 0.4

# Cosmetic noise only. Never shares state with the game's random source.
_noise_rng = random.Random()


def square(t: float, freq: float) -> float:
    """Square wave oscillator."""
    return 1 if (t * freq) % 1 < 0.5 else -1


def triangle(t: float, freq: float) -> float:
    """Triangle wave oscillator."""
    p = (t * freq) % 1
    return 4 * abs(p - 0.5) - 1


def sine(t: float, freq: float) -> float:
    """Sine wave oscillator."""
    return math.sin(2 * math.pi * freq * t)


def noise() -> float:
    """White noise generator."""
    return _noise_rng.random() * 2 - 1


Voice = Callable[[float], float]


def render(duration: float, voice: Voice, volume: float = 1.0) -> array.array:
    """Sample a voice function into signed 16-bit mono PCM."""
    samples = array.array('h')
    for i in range(int(SAMPLE_RATE * duration)):
        val = max(-1.0, min(1.0, voice(i / SAMPLE_RATE) * volume))
        samples.append(int(val * 32767))
    return samples


def _catch(t: float) -> float:
    """Rising blip."""
    env = max(0, 1 - t * 12)
    return square(t, 700 + t * 3000) * 0.3 * env


def _hit(t: float) -> float:
    """Low buzz with a noisy crack."""
    env = max(0, 1 - t * 3)
    crack = noise() * max(0, 1 - t * 15)
    return (square(t, 110 - t * 60) * 0.35 + crack * 0.3) * env


def _freeze(t: float) -> float:
    """Icy falling shimmer."""
    env = max(0, 1 - t * 2.5)
    return (sine(t, 1800 - t * 1200) * 0.25 + triangle(t, 2400) * 0.1) * env


def _game_over(t: float) -> float:
    """Sad descending tone."""
    env = max(0, 1 - t * 1.4)
    return square(t, max(80, 400 - t * 250)) * 0.25 * env


def _countdown_tick(t: float) -> float:
    env = max(0, 1 - t * 25)
    return sine(t, 1000) * 0.25 * env


def _countdown_go(t: float) -> float:
    env = max(0, 1 - t * 2.5)
    chord = (square(t, 523) + square(t, 659) + square(t, 784)) * 0.12
    return (chord + sine(t, 300 + t * 1500) * 0.1) * env


def _spin(t: float) -> float:
    """Reel rattle."""
    env = 0.6 + 0.4 * (1 if (t * 12) % 1 < 0.3 else 0)
    return triangle(t, 300 + 200 * ((t * 12) % 1)) * 0.2 * env


def _jackpot(t: float) -> float:
    notes = [523, 659, 784, 1047, 784, 1047, 1319]
    note = notes[min(int(t * 8), len(notes) - 1)]
    return square(t, note) * 0.22 * max(0, 1 - t * 0.9)


def _lose(t: float) -> float:
    note = 392 if t < 0.15 else 311
    return triangle(t, note) * 0.3 * max(0, 1 - t * 2.5)


def _santa_laugh(t: float) -> float:
    """Ho ho ho: three low syllables, each a little deeper."""
    syllable = int(t / 0.25)
    local = t - syllable * 0.25
    if syllable > 2 or local > 0.18:
        return 0.0
    env = math.sin(math.pi * local / 0.18)
    freq = (190 - syllable * 20) * (1 - local * 0.6)
    return (square(t, freq) * 0.2 + sine(t, freq * 2) * 0.1) * env


# Jingle Bells, one eighth note per step
MUSIC_STEP = 0.25
MUSIC_MELODY = [659, 659, 659, 659, 659, 659, 659, 659,
                659, 784, 523, 587, 659, 659, 659, 659]
MUSIC_BASS = [131, 196, 131, 196]


def _music(t: float) -> float:
    """Looping chiptune backing track."""
    step = int(t / MUSIC_STEP) % len(MUSIC_MELODY)
    phase = (t % MUSIC_STEP) / MUSIC_STEP
    note = MUSIC_MELODY[step]

    lead = square(t, note) * 0.12 * max(0.25, 1 - phase * 1.5)
    bell = sine(t, note * 2) * 0.05 * max(0, 1 - phase * 4)
    bass = triangle(t, MUSIC_BASS[(step // 4) % len(MUSIC_BASS)]) * 0.15
    return lead + bell + bass


SOUND_BANK: Dict[str, tuple[float, Voice]] = {
    "catch": (0.08, _catch),
    "hit": (0.3, _hit),
    "freeze": (0.4, _freeze),
    "game_over": (0.7, _game_over),
    "countdown_tick": (0.05, _countdown_tick),
    "countdown_go": (0.4, _countdown_go),
    "spin": (1.6, _spin),
    "jackpot": (1.0, _jackpot),
    "lose": (0.4, _lose),
    "santa_laugh": (0.75, _santa_laugh),
}

MUSIC: tuple[float, Voice] = (MUSIC_STEP * len(MUSIC_MELODY), _music)


class AudioEngine:
    """Event-driven sound effects. Fire and forget."""

    def __init__(self, volume: float = 1.0):
        self._initialized = False
        self._sounds: Dict[str, pygame.mixer.Sound] = {}
        self._volume = max(0.0, min(1.0, volume))
        self._muted = False
        self._unsubscribers: list[Callable[[], None]] = []

        # Background loop
        self._music: Optional[pygame.mixer.Sound] = None
        self._music_channel: Optional[pygame.mixer.Channel] = None
        self._music_wanted = False

    @property
    def available(self) -> bool:
        return self._initialized

    def init(self) -> bool:
        """Open the mixer and synthesize all sounds. False when silent."""
        try:
            pygame.mixer.pre_init(SAMPLE_RATE, -16, 2, 1024)
            pygame.mixer.init()
            pygame.mixer.set_num_channels(16)
        except pygame.error as e:
            logger.warning(f"Audio unavailable, running silent: {e}")
            return False

        self._initialized = True
        for name, (duration, voice) in SOUND_BANK.items():
            self._sounds[name] = self._create_sound(render(duration, voice))
        self._music = self._create_sound(render(*MUSIC))
        logger.info(f"Audio engine initialized with {len(self._sounds)} sounds")
        return True

    def _create_sound(self, samples: array.array) -> pygame.mixer.Sound:
        """Create a pygame Sound from mono samples (auto-converted to stereo)."""
        stereo = array.array('h')
        for s in samples:
            stereo.append(s)
            stereo.append(s)
        return pygame.mixer.Sound(buffer=stereo)

    def attach(self, event_bus: EventBus) -> None:
        """Play sounds for gameplay events."""
        routes: Dict[EventType, Callable[[Event], None]] = {
            EventType.SCORE_INCREASED: lambda e: self.play("catch"),
            EventType.HAZARD_HIT: lambda e: self.play("hit"),
            EventType.IMPAIRER_HIT: lambda e: self.play("freeze"),
            EventType.GAME_STARTED: self._on_game_started,
            EventType.GAME_OVER: self._on_game_over,
            EventType.BONUS_SPIN_STARTED: lambda e: self.play("spin"),
            EventType.BONUS_RESOLVED: self._on_bonus_resolved,
            EventType.COUNTDOWN_TICK: self._on_countdown,
        }
        for event_type, handler in routes.items():
            self._unsubscribers.append(event_bus.subscribe(event_type, handler))

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def _on_game_started(self, event: Event) -> None:
        self.play("santa_laugh")
        self.play_music()

    def _on_game_over(self, event: Event) -> None:
        self.stop_music()
        self.play("game_over")

    def _on_bonus_resolved(self, event: Event) -> None:
        self.play("jackpot" if event.data.get("win") else "lose")

    def _on_countdown(self, event: Event) -> None:
        self.play("countdown_go" if event.data.get("remaining") == 0 else "countdown_tick")

    def play(self, sound_name: str, volume: float = 1.0) -> Optional[pygame.mixer.Channel]:
        """Play a sound effect."""
        if not self._initialized or self._muted:
            return None

        sound = self._sounds.get(sound_name)
        if not sound:
            logger.warning(f"Sound not found: {sound_name}")
            return None

        sound.set_volume(volume * self._volume)
        return sound.play()

    def play_music(self, fade_in_ms: int = 300) -> Optional[pygame.mixer.Channel]:
        """Loop the background track. Remembered while muted and resumed on unmute."""
        self._music_wanted = True
        if not self._initialized or self._muted or self._music is None:
            return None

        # Don't restart if already playing
        if self._music_channel is not None and self._music_channel.get_busy():
            return self._music_channel

        self._music.set_volume(MUSIC_VOLUME * self._volume)
        self._music_channel = self._music.play(loops=-1, fade_ms=fade_in_ms)
        logger.info("Background music started")
        return self._music_channel

    def stop_music(self, fade_out_ms: int = 300) -> None:
        """Stop the background track."""
        self._music_wanted = False
        self._halt_music(fade_out_ms)

    def _halt_music(self, fade_out_ms: int) -> None:
        if self._music_channel is None:
            return
        if fade_out_ms > 0:
            self._music_channel.fadeout(fade_out_ms)
        else:
            self._music_channel.stop()
        self._music_channel = None

    @property
    def music_on(self) -> bool:
        """Whether the background track should be playing (ignores mute)."""
        return self._music_wanted

    def toggle_mute(self) -> bool:
        """Flip mute. Returns the new muted state."""
        self._muted = not self._muted
        if self._muted:
            self._halt_music(0)
            if self._initialized:
                pygame.mixer.stop()
        elif self._music_wanted:
            self.play_music()
        logger.info(f"Audio {'muted' if self._muted else 'unmuted'}")
        return self._muted

    @property
    def muted(self) -> bool:
        return self._muted

    def cleanup(self) -> None:
        """Cleanup audio resources."""
        self.detach()
        self._halt_music(0)
        if self._initialized:
            pygame.mixer.quit()
            self._initialized = False
            logger.info("Audio engine cleaned up")
