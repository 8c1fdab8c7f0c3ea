"""Gapless playback of model audio chunks."""

import binascii
import logging
import threading
from typing import Optional, Set, Union

from ..models.audio import PlaybackStats
from .output import AudioOutput, PlaybackSource
from .pcm import decode_chunk

logger = logging.getLogger(__name__)


class PlaybackPipeline:
    """Decodes inbound chunks and schedules them back-to-back on an output clock.

    Each chunk starts at ``max(next_start_time, output.current_time)`` and
    pushes ``next_start_time`` forward by its duration, so bursts queue up
    without overlap and late chunks start immediately instead of in the past.
    Every scheduled source stays in ``sources`` until it ends naturally or
    :meth:`interrupt` force-stops it.

    The output device may end sources from its own thread, so the source set
    and the scheduling offset are guarded by a lock.
    """

    def __init__(self, output: AudioOutput):
        self.output = output
        self.next_start_time = 0.0
        self.sources: Set[PlaybackSource] = set()
        self.lock = threading.RLock()

        # Statistics
        self.scheduled_chunks = 0
        self.dropped_chunks = 0
        self.interruptions = 0

    def open(self) -> None:
        """Prepare the output device and reset the scheduling clock."""
        with self.lock:
            self.next_start_time = 0.0
        self.output.open()

    def handle_chunk(self, data: Union[bytes, str]) -> Optional[PlaybackSource]:
        """Decode one inbound chunk and schedule it.

        A malformed chunk is logged and dropped; already-scheduled audio keeps
        playing.
        """
        try:
            samples = decode_chunk(data)
        except (ValueError, binascii.Error) as e:
            self.dropped_chunks += 1
            logger.error(f"Dropping malformed audio chunk: {e}")
            return None

        if samples.size == 0:
            return None

        with self.lock:
            start_time = max(self.next_start_time, self.output.current_time)
            source = self.output.schedule(samples, start_time, on_ended=self._on_source_ended)
            self.next_start_time = start_time + source.duration
            self.sources.add(source)
            self.scheduled_chunks += 1

        logger.debug(f"Scheduled {source.duration:.3f}s of audio at t={start_time:.3f}")
        return source

    def _on_source_ended(self, source: PlaybackSource) -> None:
        with self.lock:
            self.sources.discard(source)

    def interrupt(self) -> int:
        """Force-stop every outstanding source and reset the scheduling clock.

        Returns:
            Number of sources that were stopped
        """
        with self.lock:
            stopped = self._stop_all()
            self.next_start_time = 0.0
            self.interruptions += 1
        logger.info(f"Playback interrupted, stopped {stopped} sources")
        return stopped

    def _stop_all(self) -> int:
        count = 0
        for source in list(self.sources):
            try:
                source.stop()
                count += 1
            except Exception as e:
                logger.debug(f"Error stopping playback source: {e}")
        self.sources.clear()
        return count

    def close(self) -> None:
        """Stop all sources, then release the output device."""
        with self.lock:
            self._stop_all()
            self.next_start_time = 0.0
        self.output.close()

    def get_stats(self) -> PlaybackStats:
        with self.lock:
            return PlaybackStats(
                scheduled_chunks=self.scheduled_chunks,
                dropped_chunks=self.dropped_chunks,
                interruptions=self.interruptions,
                active_sources=len(self.sources),
                next_start_time=self.next_start_time,
            )
