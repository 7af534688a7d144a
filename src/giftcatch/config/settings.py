"""
Game settings using Pydantic.

Settings are loaded from environment variables with .env file support.
Balance constants (speeds, probabilities, durations) live here so they can
be tuned without touching the simulation code.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlayfieldSettings(BaseSettings):
    """Playfield geometry in pixels."""

    width: int = 800
    height: int = 600

    # Gifts below (height - ground_offset) have hit the ground
    ground_offset: float = 60.0

    # Objects further than this outside the playfield are discarded
    removal_margin: float = 50.0

    @property
    def ground_y(self) -> float:
        return self.height - self.ground_offset


class PlayerSettings(BaseSettings):
    """Grinch movement and freeze settings."""

    start_x: float = 375.0
    start_y: float = 520.0
    width: float = 50.0
    height: float = 60.0

    speed: float = 300.0  # pixels per second
    impair_duration: float = Field(default=2.0, ge=0.0)  # seconds

    # Walk cycle
    walk_threshold: float = 0.5  # min px per tick to count as walking
    walk_phase_rate: float = 0.1


class EmitterSettings(BaseSettings):
    """Santa sleigh motion settings."""

    start_x: float = 100.0
    start_y: float = 50.0
    width: float = 80.0
    height: float = 60.0

    # Convoy extents: reindeer run ahead of the sleigh on the leading side
    convoy_leading: float = 290.0
    convoy_trailing: float = 15.0
    edge_margin: float = 20.0

    ease_rate: float = 5.0
    flip_cooldown: float = 0.5

    initial_target_velocity: float = 100.0
    initial_segment_duration: float = 1.5

    # Segment duration range: [max(floor, base - d * decay), ...]
    duration_min_base: float = 1.5
    duration_min_decay: float = 0.1
    duration_min_floor: float = 0.5
    duration_max_base: float = 2.0
    duration_max_decay: float = 0.15
    duration_max_floor: float = 0.8

    # Target speed range: [base + d * scale, ...]
    speed_min_base: float = 50.0
    speed_min_scale: float = 20.0
    speed_max_base: float = 150.0
    speed_max_scale: float = 30.0

    # Secondary jitter term
    jitter_amplitude: float = 8.0
    jitter_time_rate: float = 5.0
    jitter_segment_rate: float = 3.0


class SpawnSettings(BaseSettings):
    """Gift spawning settings."""

    base_interval: float = 2.5  # seconds
    interval_decay: float = 0.3
    min_interval: float = 0.8
    jitter_min: float = 0.6
    jitter_max: float = 1.4

    hazard_base: float = 0.12
    hazard_scale: float = 0.03
    hazard_max: float = 0.25
    impairer_base: float = 0.10
    impairer_scale: float = 0.02
    impairer_max: float = 0.20

    offset_base: float = 60.0
    offset_scale: float = 10.0
    offset_max: float = 100.0
    drop_offset: float = 50.0

    object_size: float = 25.0
    fall_speed_base: float = 150.0
    fall_speed_scale: float = 50.0


class MotionSettings(BaseSettings):
    """Falling object trajectory settings."""

    homing_fraction: float = Field(default=0.35, gt=0.0, lt=1.0)
    fall_fraction: float = Field(default=0.8, gt=0.0)


class DifficultySettings(BaseSettings):
    """Difficulty progression settings."""

    tier_seconds: float = Field(default=10.0, gt=0.0)


class BonusSettings(BaseSettings):
    """Bonus reel round settings."""

    tier_size: int = Field(default=20, gt=0)
    win_probability: float = Field(default=0.02, ge=0.0, le=1.0)
    spin_duration: float = 1.6  # seconds
    shuffle_interval: float = 0.08
    result_display: float = 1.5
    countdown_seconds: int = 3
    multiplier: int = 2


class LeaderboardSettings(BaseSettings):
    """Score persistence settings."""

    backend: Literal["file", "http"] = "file"
    file_path: Path = Path("data") / "leaderboard.json"
    base_url: str = "http://127.0.0.1:5000"
    timeout: float = 10.0
    default_limit: int = 10


class DisplaySettings(BaseSettings):
    """Desktop window settings."""

    fps: int = 60
    max_delta: float = 1.0 / 30.0  # seconds
    scale: int = 1
    title: str = "Grinch's Gift Catch"
    fullscreen: bool = False


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="GIFTCATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    debug: bool = False
    seed: int | None = None

    # Nested settings
    playfield: PlayfieldSettings = Field(default_factory=PlayfieldSettings)
    player: PlayerSettings = Field(default_factory=PlayerSettings)
    emitter: EmitterSettings = Field(default_factory=EmitterSettings)
    spawn: SpawnSettings = Field(default_factory=SpawnSettings)
    motion: MotionSettings = Field(default_factory=MotionSettings)
    difficulty: DifficultySettings = Field(default_factory=DifficultySettings)
    bonus: BonusSettings = Field(default_factory=BonusSettings)
    leaderboard: LeaderboardSettings = Field(default_factory=LeaderboardSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
