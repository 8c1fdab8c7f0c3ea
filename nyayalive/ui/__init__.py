"""Terminal views for Nyaya Live."""

from .conversation_view import ConversationView

__all__ = ["ConversationView"]
