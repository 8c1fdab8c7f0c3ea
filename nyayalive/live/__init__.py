"""Live voice session: remote backend, transcripts and the session controller."""

from .backend import LiveBackend, LiveConnection, GeminiLiveBackend, translate_server_message
from .conversation import ConversationLog
from .publisher import (
    TranscriptPublisher,
    MessagePublisher,
    INPUT_TRANSCRIPT_TOPIC,
    OUTPUT_TRANSCRIPT_TOPIC,
    MESSAGE_TOPIC,
)
from .session import LiveSessionController
from .transcript import TranscriptBuffer, TranscriptAssembler

__all__ = [
    "LiveBackend",
    "LiveConnection",
    "GeminiLiveBackend",
    "translate_server_message",
    "ConversationLog",
    "TranscriptPublisher",
    "MessagePublisher",
    "INPUT_TRANSCRIPT_TOPIC",
    "OUTPUT_TRANSCRIPT_TOPIC",
    "MESSAGE_TOPIC",
    "LiveSessionController",
    "TranscriptBuffer",
    "TranscriptAssembler",
]
