"""Audio-related data models."""

import base64
from dataclasses import dataclass

import numpy as np


@dataclass
class CaptureStats:
    """Microphone capture statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    chunk_size: int
    total_chunks: int


@dataclass
class PlaybackStats:
    """Speaker playback statistics."""
    scheduled_chunks: int
    dropped_chunks: int
    interruptions: int
    active_sources: int
    next_start_time: float


@dataclass
class AudioFrame:
    """A fixed-size block of mono float samples in transit between stages."""
    samples: np.ndarray  # float32, nominally in [-1, 1]
    sequence_number: int
    sample_rate: int = 16000

    @property
    def duration_seconds(self) -> float:
        return len(self.samples) / self.sample_rate


@dataclass(frozen=True)
class PcmBlob:
    """Realtime-input payload: base64 pcm16le bytes tagged with their MIME type."""
    data: str
    mime_type: str = "audio/pcm;rate=16000"

    def raw_bytes(self) -> bytes:
        return base64.b64decode(self.data)
