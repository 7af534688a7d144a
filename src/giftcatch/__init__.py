"""Grinch's Gift Catch - a single-screen arcade catching game."""

__version__ = "1.0.0"
