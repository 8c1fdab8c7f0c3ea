"""Typed chat turns sharing the conversation log with the live session."""

import logging
from typing import List, Optional

from google.genai import types

from .. import notices
from ..live.conversation import ConversationLog
from ..models.messages import ConversationMessage, Role
from .gemini_service import GeminiService
from .moderation import ContentModerator

logger = logging.getLogger(__name__)


class ChatAssistant:
    """Sends typed messages to the model and records both sides in the log."""

    def __init__(self,
                 service: GeminiService,
                 conversation: ConversationLog,
                 moderator: Optional[ContentModerator] = None):
        self.service = service
        self.conversation = conversation
        self.moderator = moderator or ContentModerator()

    async def send(self,
                   text: str,
                   documents: Optional[List[types.Part]] = None) -> Optional[ConversationMessage]:
        """Handle one typed message.

        Blank input is ignored. Blocked input gets a system reply and never
        reaches the model.

        Returns:
            The reply appended to the log, or None for blank input
        """
        text = text.strip()
        if not text:
            return None

        if not self.moderator.check(text):
            return self.conversation.add_system(notices.MODERATION_BLOCKED)

        history = self.conversation.messages
        self.conversation.add_user(text)

        reply = await self.service.chat(text, history, documents)
        if reply.role == Role.SYSTEM:
            logger.error("Chat request failed after retries")
            return self.conversation.add_system(reply.content)
        return self.conversation.add_model(reply.content, reply.sources)
