"""Microphone capture producing fixed-size float frames for the live session."""

import pyaudio
import logging
from threading import Thread, Event
from typing import Optional, Callable
from datetime import datetime

import numpy as np

from ..exceptions import PermissionDenied
from ..models.audio import AudioFrame, CaptureStats
from .pcm import resample


logger = logging.getLogger(__name__)


class AudioCapture:
    """Continuous microphone capture that hands each frame to a callback.

    The microphone is acquired with :meth:`open_stream` and released with
    :meth:`release`; :meth:`start_recording` and :meth:`stop_recording` only
    control the reader thread. The callback runs on the reader thread.
    """

    def __init__(
        self,
        callback: Callable[[AudioFrame], None],
        sample_rate: int = 16000,
        chunk_size: int = 4096,
        channels: int = 1,
        device_sample_rate: Optional[int] = None,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            callback: Receives every captured frame, already at ``sample_rate``
            sample_rate: Rate frames are delivered at (16kHz for the live API)
            chunk_size: Samples per delivered frame
            channels: Number of audio channels (1 for mono)
            device_sample_rate: Rate to open the microphone at, if it cannot
                                run at ``sample_rate`` natively
        """
        self.frame_callback = callback
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.device_sample_rate = device_sample_rate or sample_rate

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False

        # Statistics tracking
        self.start_time: Optional[datetime] = None
        self.total_chunks = 0

        # PyAudio instance and open microphone stream
        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    @property
    def device_chunk_size(self) -> int:
        """Samples to read from the device per delivered frame."""
        return int(round(self.chunk_size * self.device_sample_rate / self.sample_rate))

    def open_stream(self) -> None:
        """Acquire the microphone.

        Raises:
            PermissionDenied: If no input device exists or it cannot be opened
        """
        if self.stream is not None:
            return

        self.pyaudio_instance = pyaudio.PyAudio()
        try:
            self.stream = self.pyaudio_instance.open(
                format=pyaudio.paFloat32,
                channels=self.channels,
                rate=self.device_sample_rate,
                input=True,
                frames_per_buffer=self.device_chunk_size,
                stream_callback=None
            )
        except (OSError, IOError) as e:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
            raise PermissionDenied(f"Microphone unavailable: {e}") from e

        logger.info(f"Microphone opened: {self.device_sample_rate}Hz, "
                    f"{self.device_chunk_size} samples/read")

    def start_recording(self) -> None:
        """Start continuous recording in background thread."""
        if self.is_recording:
            logger.warning("Recording already in progress")
            return
        if self.stream is None:
            raise RuntimeError("Microphone stream is not open")

        logger.info("Starting audio capture")
        self.stop_event.clear()
        self.start_time = datetime.now()
        self.total_chunks = 0

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.recording_thread.start()
        self.is_recording = True

    def stop_recording(self) -> None:
        """Stop the reader thread; the microphone stays open."""
        if not self.is_recording:
            logger.debug("No capture in progress")
            return

        logger.info("Stopping audio capture")
        self.stop_event.set()

        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Capture thread did not stop cleanly")

        self.is_recording = False
        logger.info(f"Capture stopped. Total chunks: {self.total_chunks}")

    def release(self) -> None:
        """Stop the microphone stream and release PyAudio."""
        stream, self.stream = self.stream, None
        if stream is not None:
            try:
                stream.stop_stream()
            finally:
                stream.close()
        if self.pyaudio_instance:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None

    def __read_frame(self) -> np.ndarray:
        raw = self.stream.read(self.device_chunk_size, exception_on_overflow=False)
        samples = np.frombuffer(raw, dtype=np.float32)
        if self.channels > 1:
            samples = samples.reshape(-1, self.channels).mean(axis=1)
        return resample(samples, self.device_sample_rate, self.sample_rate)

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        try:
            while not self.stop_event.is_set():
                samples = self.__read_frame()
                if self.stop_event.is_set():
                    break
                self.total_chunks += 1
                self.frame_callback(AudioFrame(
                    samples=samples,
                    sequence_number=self.total_chunks,
                    sample_rate=self.sample_rate,
                ))
        except Exception as e:
            if not self.stop_event.is_set():
                logger.error(f"Audio capture failed: {e}", exc_info=True)

    def get_recording_stats(self) -> CaptureStats:
        """Get current recording statistics."""
        duration = 0.0
        if self.start_time:
            duration = (datetime.now() - self.start_time).total_seconds()

        return CaptureStats(
            is_recording=self.is_recording,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            total_chunks=self.total_chunks,
        )

    def __del__(self):
        """Ensure resources are cleaned up on deletion."""
        if self.is_recording:
            self.stop_recording()
