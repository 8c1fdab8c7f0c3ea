"""Conversation message models."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class Role(Enum):
    """Author of a conversation message."""
    USER = "user"
    MODEL = "model"
    SYSTEM = "system"


@dataclass(frozen=True)
class ConversationMessage:
    """A single entry of the visible chat log."""
    role: Role
    content: str
    sources: Optional[List[str]] = None

    def to_dict(self) -> dict:
        data = {"role": self.role.value, "content": self.content}
        if self.sources:
            data["sources"] = list(self.sources)
        return data
