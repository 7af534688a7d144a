"""Animation module for Grinch's Gift Catch."""

from giftcatch.animation.particles import (
    Particle,
    ParticleSystem,
    ParticleEffects,
    BurstConfig,
    ParticlePresets,
)

__all__ = [
    "Particle",
    "ParticleSystem",
    "ParticleEffects",
    "BurstConfig",
    "ParticlePresets",
]
