"""Non-streaming Gemini services for Nyaya Live."""

from .client import create_client
from .recovery import with_error_recovery
from .moderation import ContentModerator
from .gemini_service import GeminiService, language_name
from .chat_service import ChatAssistant

__all__ = [
    "create_client",
    "with_error_recovery",
    "ContentModerator",
    "GeminiService",
    "language_name",
    "ChatAssistant",
]
