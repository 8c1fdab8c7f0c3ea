"""Remote live session contract and its Gemini Live implementation."""

import asyncio
import contextlib
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from google import genai
from google.genai import types

from ..exceptions import LiveConnectionError
from ..models.audio import PcmBlob
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

logger = logging.getLogger(__name__)

EventHandler = Callable[[LiveEvent], None]


class LiveConnection(ABC):
    """An open bidirectional session."""

    @abstractmethod
    async def send_audio(self, blob: PcmBlob) -> None:
        """Send one realtime-input audio frame."""

    @abstractmethod
    async def close(self) -> None:
        """Close the session gracefully. Safe to call more than once."""


class LiveBackend(ABC):
    """Opens live sessions with a remote model."""

    @abstractmethod
    async def connect(self, on_event: EventHandler) -> LiveConnection:
        """Open a session.

        ``on_event`` receives :class:`SessionOpened` once the handshake is
        done and then every server event in arrival order.

        Raises:
            LiveConnectionError: If the session cannot be opened
        """


def translate_server_message(message: types.LiveServerMessage) -> List[LiveEvent]:
    """Map one Gemini Live server message to session events.

    Audio comes first, then the interruption flag, then transcripts, then
    turn completion, so a message that both interrupts and completes a turn
    discards the stale transcript before anything is committed.
    """
    events: List[LiveEvent] = []
    content = message.server_content
    if content is None:
        return events

    if content.model_turn and content.model_turn.parts:
        for part in content.model_turn.parts:
            if part.inline_data and part.inline_data.data:
                events.append(AudioChunkReceived(data=part.inline_data.data))

    if content.interrupted:
        events.append(Interrupted())

    if content.input_transcription and content.input_transcription.text is not None:
        tr = content.input_transcription
        events.append(InputTranscriptDelta(text=tr.text, final=bool(tr.finished)))

    if content.output_transcription and content.output_transcription.text is not None:
        tr = content.output_transcription
        events.append(OutputTranscriptDelta(text=tr.text, final=bool(tr.finished)))

    if content.turn_complete:
        events.append(TurnComplete())

    return events


class GeminiLiveConnection(LiveConnection):
    """A Gemini Live session plus the task that drains its server messages."""

    def __init__(self, ctxmgr, session, on_event: EventHandler):
        self._ctxmgr = ctxmgr
        self.session = session
        self.on_event = on_event
        self.closing = False
        self._receive_task: Optional[asyncio.Task] = None

    def start_receiving(self) -> None:
        self._receive_task = asyncio.ensure_future(self._receive_loop())

    async def _receive_loop(self) -> None:
        """Dispatch server messages until the session ends.

        ``session.receive()`` stops after each ``turn_complete``, so it is
        called again for every turn. A turn that yields nothing means the
        socket closed.
        """
        try:
            while True:
                received = 0
                async for message in self.session.receive():
                    received += 1
                    if message.go_away is not None:
                        logger.warning(f"Server will close the session soon (time_left={message.go_away.time_left})")
                    for event in translate_server_message(message):
                        self.on_event(event)
                if received == 0:
                    break
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not self.closing:
                logger.error(f"Live session receive failed: {e}")
                self.on_event(SessionError(message=str(e), exception=e))
            return

        if not self.closing:
            logger.info("Live session closed by server")
            self.on_event(SessionClosed(reason="server closed the session"))

    async def send_audio(self, blob: PcmBlob) -> None:
        await self.session.send_realtime_input(
            audio=types.Blob(data=blob.raw_bytes(), mime_type=blob.mime_type),
        )

    async def close(self) -> None:
        if self.closing:
            return
        self.closing = True

        task, self._receive_task = self._receive_task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await task

        await self._ctxmgr.__aexit__(None, None, None)
        logger.info("Live session closed")


class GeminiLiveBackend(LiveBackend):
    """Opens audio-in/audio-out sessions on the Gemini Live API."""

    def __init__(self, client: genai.Client, model: str):
        self.client = client
        self.model = model

    def build_config(self) -> types.LiveConnectConfig:
        """Audio replies with transcription enabled in both directions."""
        return types.LiveConnectConfig(
            response_modalities=[types.Modality.AUDIO],
            input_audio_transcription=types.AudioTranscriptionConfig(),
            output_audio_transcription=types.AudioTranscriptionConfig(),
        )

    async def connect(self, on_event: EventHandler) -> GeminiLiveConnection:
        logger.info(f"Opening Gemini Live session with model {self.model}")
        ctxmgr = self.client.aio.live.connect(model=self.model, config=self.build_config())
        try:
            session = await ctxmgr.__aenter__()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise LiveConnectionError(f"Failed to open live session: {e}") from e

        connection = GeminiLiveConnection(ctxmgr, session, on_event)
        on_event(SessionOpened())
        connection.start_receiving()
        logger.info("Gemini Live session opened")
        return connection
