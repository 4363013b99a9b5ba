"""Foreground commands and background bash sessions for agents."""

__version__ = "0.1.0"
