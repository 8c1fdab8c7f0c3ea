"""Pytest configuration and fixtures for Nyaya Live tests."""

import asyncio
import logging
import tempfile
import time
from typing import List, Optional
from unittest.mock import Mock, patch

import numpy as np
import pytest
from pubsub import pub

from nyayalive.audio.output import AudioOutput, PlaybackSource
from nyayalive.audio.playback import PlaybackPipeline
from nyayalive.live.backend import LiveBackend, LiveConnection
from nyayalive.live.conversation import ConversationLog
from nyayalive.live.session import LiveSessionController
from nyayalive.live.transcript import TranscriptAssembler
from nyayalive.models.events import SessionOpened
from nyayalive.models.session import SessionState


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with no hardware or network")
    config.addinivalue_line("markers", "integration: multi-component scenarios on fakes")


@pytest.fixture(autouse=True)
def reset_pubsub():
    """Drop listeners left behind by a test."""
    yield
    pub.unsubAll()


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Silent float32 audio, one 4096-sample frame per read
        mock_stream.read.return_value = np.zeros(4096, dtype=np.float32).tobytes()
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


def pcm_chunk(n_samples: int, value: int = 1000) -> bytes:
    """Model-audio chunk of constant pcm16le samples."""
    return np.full(n_samples, value, dtype='<i2').tobytes()


class FakeOutput(AudioOutput):
    """Output device whose clock is set by the test."""

    def __init__(self, sample_rate: int = 24000):
        super().__init__(sample_rate)
        self.now = 0.0
        self.scheduled: List[PlaybackSource] = []
        self.opened = False
        self.closed = False
        self.fail_schedule = False

    @property
    def current_time(self) -> float:
        return self.now

    def open(self) -> None:
        self.opened = True

    def schedule(self, samples, start_time, on_ended=None) -> PlaybackSource:
        if self.fail_schedule:
            raise RuntimeError("device lost")
        source = PlaybackSource(samples, start_time, self.sample_rate, on_ended)
        self.scheduled.append(source)
        return source

    def close(self) -> None:
        self.closed = True


class FakeConnection(LiveConnection):
    """Records outbound audio."""

    def __init__(self):
        self.sent = []
        self.close_calls = 0
        self.send_error: Optional[Exception] = None

    async def send_audio(self, blob) -> None:
        if self.send_error:
            raise self.send_error
        self.sent.append(blob)

    async def close(self) -> None:
        self.close_calls += 1


class FakeBackend(LiveBackend):
    """Opens a :class:`FakeConnection`, optionally after a gate or with an error."""

    def __init__(self, error: Optional[Exception] = None, hold_open: bool = False):
        self.error = error
        self.hold_open = hold_open
        self.connection = FakeConnection()
        self.on_event = None
        self.connect_calls = 0
        self.connect_cancelled = False

    async def connect(self, on_event) -> FakeConnection:
        self.connect_calls += 1
        self.on_event = on_event
        if self.hold_open:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.connect_cancelled = True
                raise
        if self.error:
            raise self.error
        on_event(SessionOpened())
        return self.connection


class FakeCapture:
    """Stands in for AudioCapture; frames are injected by the test."""

    def __init__(self, open_error: Optional[Exception] = None, stop_delay: float = 0.0):
        self.open_error = open_error
        self.stop_delay = stop_delay
        self.stream_open = False
        self.is_recording = False
        self.released = False
        self.calls = []

    def open_stream(self):
        self.calls.append('open_stream')
        if self.open_error:
            raise self.open_error
        self.stream_open = True

    def start_recording(self):
        self.calls.append('start_recording')
        self.is_recording = True

    def stop_recording(self):
        self.calls.append('stop_recording')
        if self.stop_delay:
            # Joining a real reader thread blocks
            time.sleep(self.stop_delay)
        self.is_recording = False

    def release(self):
        self.calls.append('release')
        self.stream_open = False
        self.released = True


async def settle(rounds: int = 10) -> None:
    """Let pending callbacks and tasks on the running loop run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def fake_output():
    return FakeOutput()


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def fake_capture():
    return FakeCapture()


@pytest.fixture
def conversation():
    return ConversationLog()


@pytest.fixture
def make_controller(fake_output, fake_capture, fake_backend, conversation):
    """Build a controller on fakes; keyword overrides replace any collaborator."""
    def build(**overrides) -> LiveSessionController:
        backend = overrides.pop('backend', fake_backend)
        capture = overrides.pop('capture', fake_capture)
        output = overrides.pop('output', fake_output)
        conv = overrides.pop('conversation', conversation)
        assembler = overrides.pop('assembler', TranscriptAssembler(conv))
        return LiveSessionController(
            backend,
            capture,
            PlaybackPipeline(output),
            conv,
            assembler=assembler,
            **overrides,
        )
    return build


@pytest.fixture
def backend_factory():
    """Build a FakeBackend with a connect error or a connect that never finishes."""
    return FakeBackend


@pytest.fixture
def capture_factory():
    return FakeCapture


@pytest.fixture(name="settle")
def settle_fixture():
    return settle


@pytest.fixture(name="pcm_chunk")
def pcm_chunk_fixture():
    return pcm_chunk


async def wait_closed(controller, timeout: float = 2.0) -> None:
    """Wait for a stop the controller scheduled on its own."""
    async def poll():
        while controller.state != SessionState.CLOSED:
            await asyncio.sleep(0.01)
    await asyncio.wait_for(poll(), timeout)


@pytest.fixture(name="wait_closed")
def wait_closed_fixture():
    return wait_closed
