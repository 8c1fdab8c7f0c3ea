"""Nyaya Live - real-time voice sessions for the Nyaya legal assistant."""

__version__ = "0.1.0"
