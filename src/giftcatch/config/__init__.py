"""Configuration for Grinch's Gift Catch."""

from giftcatch.config.settings import (
    Settings,
    PlayfieldSettings,
    PlayerSettings,
    EmitterSettings,
    SpawnSettings,
    MotionSettings,
    DifficultySettings,
    BonusSettings,
    LeaderboardSettings,
    DisplaySettings,
    get_settings,
)

__all__ = [
    "Settings",
    "PlayfieldSettings",
    "PlayerSettings",
    "EmitterSettings",
    "SpawnSettings",
    "MotionSettings",
    "DifficultySettings",
    "BonusSettings",
    "LeaderboardSettings",
    "DisplaySettings",
    "get_settings",
]
