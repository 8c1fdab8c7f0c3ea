"""Session-related data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class SessionState(Enum):
    """Lifecycle of one live voice conversation."""
    IDLE = "idle"
    OPENING = "opening"
    ACTIVE = "active"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class SessionInfo:
    """Summary of a live voice session."""
    session_id: str
    start_time: datetime
    state: SessionState
    frames_captured: int = 0
    frames_sent: int = 0
    frames_dropped: int = 0
    audio_chunks_received: int = 0
    end_time: Optional[datetime] = None

    @property
    def duration_seconds(self) -> float:
        end = self.end_time or datetime.now()
        return (end - self.start_time).total_seconds()
