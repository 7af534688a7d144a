"""Particle bursts for catch, bomb and freeze feedback."""

from typing import Optional, List, Tuple
from dataclasses import dataclass
import logging
import math
import random
import numpy as np
from numpy.typing import NDArray

from giftcatch.core.events import Event, EventBus, EventType

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]


def lerp_color(start: Color, end: Color, t: float) -> Color:
    t = max(0.0, min(1.0, t))
    return (
        int(start[0] + (end[0] - start[0]) * t),
        int(start[1] + (end[1] - start[1]) * t),
        int(start[2] + (end[2] - start[2]) * t),
    )


@dataclass
class Particle:
    """A single particle with physics properties."""

    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    ay: float = 0.0  # gravity
    friction: float = 0.0  # velocity decay per second
    size: float = 1.0
    size_end: float = 0.0
    color: Color = (255, 255, 255)
    color_end: Optional[Color] = None
    alpha: float = 1.0
    alpha_end: float = 0.0
    lifetime: float = 1.0  # seconds
    age: float = 0.0
    active: bool = True

    @property
    def progress(self) -> float:
        """Normalized lifetime progress (0.0 to 1.0)."""
        if self.lifetime <= 0:
            return 1.0
        return min(1.0, self.age / self.lifetime)

    def update(self, delta: float) -> None:
        if not self.active:
            return

        self.vy += self.ay * delta
        if self.friction > 0:
            damping = max(0.0, 1.0 - self.friction * delta)
            self.vx *= damping
            self.vy *= damping

        self.x += self.vx * delta
        self.y += self.vy * delta

        self.age += delta
        if self.age >= self.lifetime:
            self.active = False

    def current_size(self) -> float:
        return self.size + (self.size_end - self.size) * self.progress

    def current_alpha(self) -> float:
        return self.alpha + (self.alpha_end - self.alpha) * self.progress

    def current_color(self) -> Color:
        if self.color_end is None:
            return self.color
        return lerp_color(self.color, self.color_end, self.progress)


@dataclass
class BurstConfig:
    """Shape of a one-shot particle burst."""

    count: int = 20

    # Velocity
    speed_min: float = 50.0
    speed_max: float = 150.0
    angle_min: float = 0.0  # Degrees
    angle_max: float = 360.0

    # Physics
    gravity: float = 0.0  # Pixels per second squared
    friction: float = 0.0

    # Appearance
    size_min: float = 3.0
    size_max: float = 6.0
    size_end: float = 0.0
    color: Color = (255, 255, 255)
    color_end: Optional[Color] = None
    color_variance: float = 0.0  # 0-1

    # Lifetime in seconds
    lifetime_min: float = 0.4
    lifetime_max: float = 0.8


class ParticleSystem:
    """Owns live particles, spawns bursts and draws them additively."""

    def __init__(self, rng: random.Random | None = None, max_particles: int = 400):
        self.rng = rng or random.Random()
        self.max_particles = max_particles
        self.particles: List[Particle] = []

    def burst(self, x: float, y: float, config: BurstConfig) -> int:
        """
        Spawn a burst centred on (x, y).

        Returns:
            Number of particles actually spawned
        """
        room = self.max_particles - len(self.particles)
        count = max(0, min(config.count, room))
        for _ in range(count):
            particle = self._create_particle(x, y, config)
            self.particles.append(particle)
        return count

    def _create_particle(self, x: float, y: float, cfg: BurstConfig) -> Particle:
        rng = self.rng
        angle = math.radians(rng.uniform(cfg.angle_min, cfg.angle_max))
        speed = rng.uniform(cfg.speed_min, cfg.speed_max)
        color_end = self._vary_color(cfg.color_end, cfg.color_variance) if cfg.color_end else None

        return Particle(
            x=x,
            y=y,
            vx=math.cos(angle) * speed,
            vy=math.sin(angle) * speed,
            ay=cfg.gravity,
            friction=cfg.friction,
            size=rng.uniform(cfg.size_min, cfg.size_max),
            size_end=cfg.size_end,
            color=self._vary_color(cfg.color, cfg.color_variance),
            color_end=color_end,
            lifetime=rng.uniform(cfg.lifetime_min, cfg.lifetime_max),
        )

    def _vary_color(self, color: Color, variance: float) -> Color:
        if variance <= 0:
            return color

        def vary_channel(c: int) -> int:
            delta = int(c * variance * self.rng.uniform(-1, 1))
            return max(0, min(255, c + delta))

        return (vary_channel(color[0]), vary_channel(color[1]), vary_channel(color[2]))

    def update(self, delta: float) -> None:
        for particle in self.particles:
            particle.update(delta)

        alive = [p for p in self.particles if p.active]
        if len(alive) != len(self.particles):
            self.particles = alive

    def render(self, buffer: NDArray[np.uint8]) -> None:
        """Draw particles onto an (H, W, 3) buffer with additive blending."""
        h, w = buffer.shape[:2]

        for particle in self.particles:
            size = particle.current_size()
            alpha = particle.current_alpha()
            if alpha <= 0 or size <= 0:
                continue

            color = np.array(particle.current_color(), dtype=np.int16)
            blended = (color * alpha).astype(np.int16)

            cx, cy = int(particle.x), int(particle.y)
            radius = max(1, int(size / 2))
            x1, x2 = max(0, cx - radius), min(w, cx + radius + 1)
            y1, y2 = max(0, cy - radius), min(h, cy + radius + 1)
            if x1 >= x2 or y1 >= y2:
                continue

            ys, xs = np.ogrid[y1:y2, x1:x2]
            mask = (xs - cx) ** 2 + (ys - cy) ** 2 <= radius * radius
            region = buffer[y1:y2, x1:x2].astype(np.int16)
            region[mask] = np.minimum(255, region[mask] + blended)
            buffer[y1:y2, x1:x2] = region.astype(np.uint8)

    @property
    def active_count(self) -> int:
        return len(self.particles)

    def clear(self) -> None:
        self.particles.clear()


class ParticlePresets:
    """Burst shapes for gameplay events."""

    @staticmethod
    def sparkle() -> BurstConfig:
        """Golden sparkle when a gift is caught."""
        return BurstConfig(
            count=18,
            speed_min=40, speed_max=160,
            gravity=120,
            friction=1.5,
            size_min=3, size_max=6,
            color=(255, 255, 255),
            color_end=(255, 215, 0),
            color_variance=0.2,
            lifetime_min=0.3, lifetime_max=0.6,
        )

    @staticmethod
    def explosion() -> BurstConfig:
        """Fiery blast for a bomb."""
        return BurstConfig(
            count=40,
            speed_min=80, speed_max=260,
            gravity=60,
            friction=2.0,
            size_min=5, size_max=10,
            size_end=1,
            color=(255, 200, 50),
            color_end=(255, 50, 0),
            lifetime_min=0.4, lifetime_max=0.9,
        )

    @staticmethod
    def frost() -> BurstConfig:
        """Icy puff when a snowball hits."""
        return BurstConfig(
            count=24,
            speed_min=30, speed_max=120,
            gravity=40,
            friction=2.5,
            size_min=3, size_max=7,
            color=(230, 245, 255),
            color_end=(120, 180, 255),
            color_variance=0.1,
            lifetime_min=0.5, lifetime_max=1.0,
        )

    @staticmethod
    def confetti() -> BurstConfig:
        """Celebration for a bonus win."""
        return BurstConfig(
            count=120,
            speed_min=60, speed_max=220,
            angle_min=200, angle_max=340,
            gravity=160,
            friction=0.8,
            size_min=3, size_max=6,
            size_end=3,
            color=(255, 120, 180),
            color_variance=0.7,
            lifetime_min=1.5, lifetime_max=2.5,
        )


class ParticleEffects:
    """Turns gameplay events into bursts. Never feeds back into the game."""

    def __init__(self, event_bus: EventBus, system: ParticleSystem | None = None,
                 center: tuple[float, float] = (400.0, 300.0)):
        self.system = system or ParticleSystem()
        self.center = center
        self._unsubscribers = [
            event_bus.subscribe(EventType.SCORE_INCREASED, self._on_catch),
            event_bus.subscribe(EventType.HAZARD_HIT, self._on_hazard),
            event_bus.subscribe(EventType.IMPAIRER_HIT, self._on_impairer),
            event_bus.subscribe(EventType.BONUS_RESOLVED, self._on_bonus),
            event_bus.subscribe(EventType.GAME_STARTED, self._on_start),
        ]

    def _at(self, event: Event) -> tuple[float, float]:
        return event.data.get("x", self.center[0]), event.data.get("y", self.center[1])

    def _on_catch(self, event: Event) -> None:
        self.system.burst(*self._at(event), ParticlePresets.sparkle())

    def _on_hazard(self, event: Event) -> None:
        self.system.burst(*self._at(event), ParticlePresets.explosion())

    def _on_impairer(self, event: Event) -> None:
        self.system.burst(*self._at(event), ParticlePresets.frost())

    def _on_bonus(self, event: Event) -> None:
        if event.data.get("win"):
            self.system.burst(*self.center, ParticlePresets.confetti())

    def _on_start(self, event: Event) -> None:
        self.system.clear()

    def update(self, delta: float) -> None:
        self.system.update(delta)

    def render(self, buffer: NDArray[np.uint8]) -> None:
        self.system.render(buffer)

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        logger.debug("Particle effects detached")
