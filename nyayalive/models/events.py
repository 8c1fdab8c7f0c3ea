"""Events emitted by a remote live session.

A backend translates whatever its SDK delivers into these dataclasses and
hands them, in arrival order, to a single handler function.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class SessionOpened:
    """The remote session finished its handshake."""


@dataclass(frozen=True)
class AudioChunkReceived:
    """Model audio: pcm16le mono bytes at the output sample rate."""
    data: bytes


@dataclass(frozen=True)
class InputTranscriptDelta:
    """Speech-to-text fragment of what the user said."""
    text: str
    final: bool = False


@dataclass(frozen=True)
class OutputTranscriptDelta:
    """Text fragment of what the model is saying."""
    text: str
    final: bool = False


@dataclass(frozen=True)
class Interrupted:
    """The model's reply was cut off by new user speech."""


@dataclass(frozen=True)
class TurnComplete:
    """The model finished its reply."""


@dataclass(frozen=True)
class SessionError:
    """The remote session reported an error mid-stream."""
    message: str
    exception: Optional[BaseException] = None


@dataclass(frozen=True)
class SessionClosed:
    """The remote session closed."""
    reason: str = ""


LiveEvent = Union[
    SessionOpened,
    AudioChunkReceived,
    InputTranscriptDelta,
    OutputTranscriptDelta,
    Interrupted,
    TurnComplete,
    SessionError,
    SessionClosed,
]
