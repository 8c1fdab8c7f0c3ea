"""Append-only conversation log shared by the chat and the live session."""

import logging
from typing import Iterable, List, Optional

from ..models.messages import ConversationMessage, Role
from .publisher import MessagePublisher

logger = logging.getLogger(__name__)


class ConversationLog:
    """The visible chat history.

    Messages are only ever appended. Every append is published so views can
    render it.
    """

    def __init__(self,
                 messages: Optional[Iterable[ConversationMessage]] = None,
                 publisher: Optional[MessagePublisher] = None):
        self._messages: List[ConversationMessage] = list(messages or [])
        self.publisher = publisher

    def append(self, role: Role, content: str, sources: Optional[List[str]] = None) -> ConversationMessage:
        message = ConversationMessage(role=role, content=content, sources=sources)
        self._messages.append(message)
        logger.debug(f"Appended {role.value} message #{len(self._messages)}")
        if self.publisher:
            self.publisher.publish_message(message)
        return message

    def add_user(self, content: str) -> ConversationMessage:
        return self.append(Role.USER, content)

    def add_model(self, content: str, sources: Optional[List[str]] = None) -> ConversationMessage:
        return self.append(Role.MODEL, content, sources)

    def add_system(self, content: str) -> ConversationMessage:
        return self.append(Role.SYSTEM, content)

    @property
    def messages(self) -> List[ConversationMessage]:
        return list(self._messages)

    @property
    def last(self) -> Optional[ConversationMessage]:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(list(self._messages))
