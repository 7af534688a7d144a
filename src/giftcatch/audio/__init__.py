"""
Grinch's Gift Catch audio - chiptune sound effects.
"""

from .engine import AudioEngine

__all__ = ["AudioEngine"]
