"""Lifecycle of one live voice conversation."""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Optional

from .. import notices
from ..audio.capture import AudioCapture
from ..audio.pcm import encode_frame
from ..audio.playback import PlaybackPipeline
from ..exceptions import PermissionDenied
from ..models.audio import AudioFrame, PcmBlob
from ..models.events import (
    LiveEvent,
    SessionOpened,
    AudioChunkReceived,
    InputTranscriptDelta,
    OutputTranscriptDelta,
    Interrupted,
    TurnComplete,
    SessionError,
    SessionClosed,
)
from ..models.session import SessionInfo, SessionState
from .backend import LiveBackend, LiveConnection
from .conversation import ConversationLog
from .transcript import TranscriptAssembler

logger = logging.getLogger(__name__)


class LiveSessionController:
    """Owns one live voice conversation from start to stop.

    All session state (the pending connection, the outbound frame queue, the
    transcript buffers and the liveness flag) lives here and is only touched
    from the event loop. The capture thread hands frames over with
    ``call_soon_threadsafe`` and the backend delivers server events to
    :meth:`handle_event` in arrival order.

    ``is_active`` is the cancellation flag: :meth:`stop` clears it before
    anything else and every callback checks it on entry.
    """

    def __init__(self,
                 backend: LiveBackend,
                 capture: AudioCapture,
                 playback: PlaybackPipeline,
                 conversation: ConversationLog,
                 assembler: Optional[TranscriptAssembler] = None,
                 response_timeout: float = 0.0):
        """Initialize the controller.

        Args:
            backend: Opens the remote session
            capture: Microphone capture; its callback must be :meth:`on_captured_frame`
            playback: Gapless playback pipeline for model audio
            conversation: Log that finished turns and errors are appended to
            assembler: Transcript assembler (one is built on ``conversation`` if omitted)
            response_timeout: Seconds to wait for model audio after the user
                              finishes speaking; 0 disables the watchdog
        """
        self.backend = backend
        self.capture = capture
        self.playback = playback
        self.conversation = conversation
        self.assembler = assembler or TranscriptAssembler(conversation)
        self.response_timeout = response_timeout

        self.state = SessionState.IDLE
        self.is_active = False
        self.info: Optional[SessionInfo] = None

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._connect_task: Optional[asyncio.Task] = None
        self._sender_task: Optional[asyncio.Task] = None
        self._stop_task: Optional[asyncio.Task] = None
        self._outbox: Optional[asyncio.Queue] = None
        self._watchdog: Optional[asyncio.TimerHandle] = None

    # -- Lifecycle --

    async def start(self) -> None:
        """Acquire the microphone and begin opening the remote session.

        Returns as soon as the open is under way; frames captured before it
        completes wait for it in the outbound queue.

        Raises:
            PermissionDenied: If the microphone cannot be acquired
        """
        if self.state in (SessionState.OPENING, SessionState.ACTIVE):
            logger.debug("Live session already active, ignoring start()")
            return
        if self.state == SessionState.CLOSING:
            logger.warning("Live session is still closing, ignoring start()")
            return

        self._loop = asyncio.get_running_loop()
        self.assembler.reset()

        try:
            self.capture.open_stream()
        except PermissionDenied as e:
            logger.error(f"Error accessing microphone: {e}")
            self.conversation.add_system(notices.MIC_ACCESS_DENIED)
            raise

        self.info = SessionInfo(
            session_id=uuid.uuid4().hex[:12],
            start_time=datetime.now(),
            state=SessionState.OPENING,
        )
        self.state = SessionState.OPENING
        self.is_active = True
        logger.info(f"Starting live session {self.info.session_id}")

        try:
            self.playback.open()
        except Exception as e:
            logger.error(f"Error opening audio output: {e}")
            self._fail(notices.AUDIO_OUTPUT_ERROR)
            return

        self._outbox = asyncio.Queue()
        self._connect_task = asyncio.ensure_future(self.backend.connect(self.handle_event))
        self._connect_task.add_done_callback(self._on_connect_done)
        self._sender_task = asyncio.ensure_future(self._send_loop(self._connect_task, self._outbox))

    async def stop(self) -> None:
        """Tear the session down. Safe from any state and safe to repeat.

        Every resource is released in its own step so one failure does not
        leak the rest. Any residual model transcript is committed last.
        A call made while a teardown is already running waits for it, so
        everything is released once this returns.
        """
        if self._stop_task is None or self._stop_task.done():
            if self.state in (SessionState.IDLE, SessionState.CLOSED):
                return
            self._stop_task = asyncio.ensure_future(self._teardown())
        await asyncio.shield(self._stop_task)

    async def _teardown(self) -> None:
        if self.state in (SessionState.IDLE, SessionState.CLOSED):
            return

        self.state = SessionState.CLOSING
        self.is_active = False
        self._cancel_watchdog()
        logger.info("Stopping live session")

        steps = [
            ("outbound audio", self._stop_sender),
            ("remote session", self._close_remote),
            ("capture thread", lambda: asyncio.to_thread(self.capture.stop_recording)),
            ("microphone", self.capture.release),
            ("playback", self.playback.close),
            ("transcript", self.assembler.commit_turn),
        ]
        for name, step in steps:
            try:
                result = step()
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(f"Error tearing down {name}: {e}")

        self.state = SessionState.CLOSED
        if self.info:
            self.info.state = SessionState.CLOSED
            self.info.end_time = datetime.now()
            logger.info(f"Live session {self.info.session_id} stopped after "
                        f"{self.info.duration_seconds:.1f}s: sent={self.info.frames_sent} "
                        f"dropped={self.info.frames_dropped} "
                        f"received={self.info.audio_chunks_received}")

    def _fail(self, notice: str) -> None:
        """Report an error in the chat and tear the session down."""
        if not self.is_active:
            return
        self.conversation.add_system(notice)
        self._schedule_stop()

    def _schedule_stop(self) -> None:
        self.is_active = False
        if self._stop_task is None or self._stop_task.done():
            self._stop_task = asyncio.ensure_future(self._teardown())

    def _on_connect_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Failed to connect to live session: {error}")
            self._fail(notices.NETWORK_ERROR)

    async def _stop_sender(self) -> None:
        task, self._sender_task = self._sender_task, None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait([task])

    async def _close_remote(self) -> None:
        task, self._connect_task = self._connect_task, None
        if task is None:
            return
        if not task.done():
            task.cancel()
            await asyncio.wait([task])
        if task.cancelled() or task.exception() is not None:
            return
        connection: LiveConnection = task.result()
        await connection.close()

    # -- Capture --

    def on_captured_frame(self, frame: AudioFrame) -> None:
        """Capture-thread entry point."""
        if not self.is_active or self._loop is None:
            return
        try:
            self._loop.call_soon_threadsafe(self._enqueue_frame, frame)
        except RuntimeError:
            logger.debug("Event loop closed, dropping captured frame")

    def _enqueue_frame(self, frame: AudioFrame) -> None:
        if not self.is_active or self._outbox is None:
            if self.info:
                self.info.frames_dropped += 1
            return
        self.info.frames_captured += 1
        self._outbox.put_nowait(encode_frame(frame.samples, frame.sample_rate))

    async def _send_loop(self, connect_task: asyncio.Task, outbox: asyncio.Queue) -> None:
        """Send queued frames in capture order once the session is open."""
        while True:
            blob: PcmBlob = await outbox.get()
            try:
                connection = await asyncio.shield(connect_task)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # Reported by _on_connect_done
                logger.debug(f"Dropping audio frame, session failed to open: {e}")
                return

            if not self.is_active:
                self.info.frames_dropped += 1
                logger.debug("Dropping audio frame, session no longer active")
                continue

            try:
                await connection.send_audio(blob)
                self.info.frames_sent += 1
            except Exception as e:
                if self.is_active:
                    logger.warning(f"Send audio failed: {e}")
                else:
                    logger.debug(f"Send audio failed (session likely closed): {e}")

    # -- Server events --

    def handle_event(self, event: LiveEvent) -> None:
        """Dispatch one server event."""
        if not self.is_active:
            logger.debug(f"Ignoring {type(event).__name__} after stop")
            return

        if isinstance(event, SessionOpened):
            self._on_opened()
        elif isinstance(event, AudioChunkReceived):
            self.info.audio_chunks_received += 1
            self._cancel_watchdog()
            try:
                self.playback.handle_chunk(event.data)
            except Exception as e:
                logger.error(f"Error scheduling model audio: {e}")
                self._fail(notices.AUDIO_OUTPUT_ERROR)
        elif isinstance(event, Interrupted):
            self._handle_interruption()
        elif isinstance(event, InputTranscriptDelta):
            self.assembler.on_input_delta(event.text, event.final)
            if event.final:
                self._arm_watchdog()
        elif isinstance(event, OutputTranscriptDelta):
            self.assembler.on_output_delta(event.text, event.final)
        elif isinstance(event, TurnComplete):
            self._cancel_watchdog()
            self.assembler.commit_turn()
        elif isinstance(event, SessionError):
            logger.error(f"Live session error: {event.message}")
            self._fail(notices.CONNECTION_ERROR)
        elif isinstance(event, SessionClosed):
            logger.info(f"Session closed: {event.reason}")
            self._schedule_stop()
        else:
            logger.warning(f"Unknown live event: {event!r}")

    def _on_opened(self) -> None:
        self.state = SessionState.ACTIVE
        self.info.state = SessionState.ACTIVE
        try:
            self.capture.start_recording()
        except Exception as e:
            logger.error(f"Error starting audio capture: {e}")
            self._fail(notices.ERROR_OCCURRED)

    def _handle_interruption(self) -> None:
        """Barge-in: silence queued audio and forget the unheard transcript."""
        self._cancel_watchdog()
        self.playback.interrupt()
        self.assembler.discard_output()

    # -- Response watchdog --

    def _arm_watchdog(self) -> None:
        if self.response_timeout <= 0:
            return
        self._cancel_watchdog()
        self._watchdog = self._loop.call_later(self.response_timeout, self._on_response_timeout)

    def _cancel_watchdog(self) -> None:
        if self._watchdog is not None:
            self._watchdog.cancel()
            self._watchdog = None

    def _on_response_timeout(self) -> None:
        self._watchdog = None
        if not self.is_active:
            return
        logger.warning(f"No model audio {self.response_timeout:.1f}s after the user finished speaking")
        self.conversation.add_system(notices.NO_RESPONSE)
