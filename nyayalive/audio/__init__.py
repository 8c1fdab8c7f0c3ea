"""Microphone capture, PCM conversion and gapless playback."""

from .capture import AudioCapture
from .output import AudioOutput, PlaybackSource, PyAudioOutput
from .playback import PlaybackPipeline

__all__ = ["AudioCapture", "AudioOutput", "PlaybackSource", "PyAudioOutput", "PlaybackPipeline"]
