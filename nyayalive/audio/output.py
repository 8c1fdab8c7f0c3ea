"""Clocked audio output devices that play scheduled buffers."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

import numpy as np
import pyaudio

logger = logging.getLogger(__name__)


class PlaybackSource:
    """A decoded buffer scheduled to start at a point on the output clock."""

    def __init__(self,
                 samples: np.ndarray,
                 start_time: float,
                 sample_rate: int,
                 on_ended: Optional[Callable[['PlaybackSource'], None]] = None):
        self.samples = samples
        self.start_time = start_time
        self.sample_rate = sample_rate
        self.on_ended = on_ended
        self.stopped = False
        self.ended = False

    @property
    def duration(self) -> float:
        return len(self.samples) / self.sample_rate

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    def stop(self) -> None:
        """Silence the source immediately. ``on_ended`` is not called."""
        self.stopped = True

    def finish(self) -> None:
        """Mark natural completion and notify the owner once."""
        if self.ended or self.stopped:
            return
        self.ended = True
        if self.on_ended:
            self.on_ended(self)


class AudioOutput(ABC):
    """An output device with a monotonic clock in seconds."""

    def __init__(self, sample_rate: int = 24000):
        self.sample_rate = sample_rate

    @property
    @abstractmethod
    def current_time(self) -> float:
        """Seconds of audio the device has rendered since it was opened."""

    @abstractmethod
    def open(self) -> None:
        """Prepare the device for playback."""

    @abstractmethod
    def schedule(self,
                 samples: np.ndarray,
                 start_time: float,
                 on_ended: Optional[Callable[[PlaybackSource], None]] = None) -> PlaybackSource:
        """Queue samples to start playing at ``start_time`` on the device clock."""

    @abstractmethod
    def close(self) -> None:
        """Stop everything and release the device."""


class PyAudioOutput(AudioOutput):
    """Speaker output mixing scheduled sources from a PortAudio callback.

    The clock advances by one block each time PortAudio asks for audio, so
    ``current_time`` is the start of the next block to be rendered.
    """

    def __init__(self, sample_rate: int = 24000, block_size: int = 1024, channels: int = 1):
        super().__init__(sample_rate)
        self.block_size = block_size
        self.channels = channels
        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None
        self.frames_rendered = 0
        self.sources: List[PlaybackSource] = []
        self.lock = threading.Lock()

    @property
    def current_time(self) -> float:
        with self.lock:
            return self.frames_rendered / self.sample_rate

    def open(self) -> None:
        if self.stream is not None:
            return
        self.pyaudio_instance = pyaudio.PyAudio()
        self.frames_rendered = 0
        self.stream = self.pyaudio_instance.open(
            format=pyaudio.paFloat32,
            channels=self.channels,
            rate=self.sample_rate,
            output=True,
            frames_per_buffer=self.block_size,
            stream_callback=self._render,
        )
        logger.info(f"Speaker opened: {self.sample_rate}Hz, {self.block_size} samples/block")

    def schedule(self, samples, start_time, on_ended=None) -> PlaybackSource:
        source = PlaybackSource(samples, start_time, self.sample_rate, on_ended)
        with self.lock:
            self.sources.append(source)
        return source

    def _render(self, in_data, frame_count, time_info, status):
        finished = []
        block = np.zeros(frame_count, dtype=np.float32)
        with self.lock:
            t0 = self.frames_rendered
            t1 = t0 + frame_count
            remaining = []
            for source in self.sources:
                if source.stopped:
                    continue
                start = int(round(source.start_time * self.sample_rate))
                end = start + len(source.samples)
                s0 = max(0, t0 - start)
                s1 = min(len(source.samples), t1 - start)
                if s1 > s0:
                    d0 = start + s0 - t0
                    block[d0:d0 + (s1 - s0)] += source.samples[s0:s1]
                if end <= t1:
                    finished.append(source)
                else:
                    remaining.append(source)
            self.sources = remaining
            self.frames_rendered = t1

        # Notify outside the lock; owners take their own locks.
        for source in finished:
            source.finish()

        out = np.clip(block, -1.0, 1.0)
        if self.channels > 1:
            out = np.repeat(out, self.channels)
        return out.astype(np.float32).tobytes(), pyaudio.paContinue

    def close(self) -> None:
        with self.lock:
            for source in self.sources:
                source.stop()
            self.sources = []
        stream, self.stream = self.stream, None
        if stream is not None:
            try:
                stream.stop_stream()
            finally:
                stream.close()
        if self.pyaudio_instance:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
        logger.info("Speaker closed")
