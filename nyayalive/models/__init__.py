"""Data models for the Nyaya Live application."""

from .audio import CaptureStats, PlaybackStats, AudioFrame, PcmBlob
from .messages import Role, ConversationMessage
from .session import SessionState, SessionInfo
from .events import (
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
from .analysis import (
    Priority,
    Case,
    PredictionResult,
    DocumentAnalysisResult,
    ArgumentAnalysis,
    FingerprintResult,
)

__all__ = [
    "CaptureStats",
    "PlaybackStats",
    "AudioFrame",
    "PcmBlob",
    "Role",
    "ConversationMessage",
    "SessionState",
    "SessionInfo",
    # Live session events
    "LiveEvent",
    "SessionOpened",
    "AudioChunkReceived",
    "InputTranscriptDelta",
    "OutputTranscriptDelta",
    "Interrupted",
    "TurnComplete",
    "SessionError",
    "SessionClosed",
    # Gemini analysis models
    "Priority",
    "Case",
    "PredictionResult",
    "DocumentAnalysisResult",
    "ArgumentAnalysis",
    "FingerprintResult",
]
