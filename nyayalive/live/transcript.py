"""Incremental transcript assembly for both directions of a live session.

Provides:
- TranscriptBuffer: stable/volatile pair with a single finalize transition
- TranscriptAssembler: routes input and output deltas and commits finished
  turns to the conversation log
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..models.messages import ConversationMessage
from .conversation import ConversationLog
from .publisher import TranscriptPublisher

logger = logging.getLogger(__name__)

SEPARATOR = " "


@dataclass
class TranscriptBuffer:
    """Committed (``stable``) and in-flight (``volatile``) text for one direction.

    ``stable`` only grows, and only by absorbing ``volatile`` at a finalize.
    ``volatile`` is replaced wholesale or cleared.
    """
    stable: str = ""
    volatile: str = ""

    def add_delta(self, text: str, final: bool) -> str:
        """Apply one delta and return the text to preview."""
        self.volatile = self.volatile + text
        if not final:
            return self.stable + self.volatile
        self.stable = self.stable + self.volatile + SEPARATOR
        self.volatile = ""
        return self.stable

    @property
    def text(self) -> str:
        return self.stable + self.volatile

    def take(self) -> str:
        """Return everything accumulated, trimmed, and empty the buffer."""
        text = self.text.strip()
        self.clear()
        return text

    def clear(self) -> None:
        self.stable = ""
        self.volatile = ""

    def __bool__(self) -> bool:
        return bool(self.text.strip())


class TranscriptAssembler:
    """Merges transcript deltas and commits turns to the conversation log.

    Input (user) text is published live as a preview, the equivalent of the
    chat input field. Output (model) text accumulates silently and becomes a
    single model message at turn complete or session stop; an interruption
    discards it because the matching audio was never heard.
    """

    def __init__(self,
                 conversation: ConversationLog,
                 input_publisher: Optional[TranscriptPublisher] = None,
                 output_publisher: Optional[TranscriptPublisher] = None,
                 commit_user_transcript: bool = False):
        self.conversation = conversation
        self.input_publisher = input_publisher
        self.output_publisher = output_publisher
        self.commit_user_transcript = commit_user_transcript
        self.input = TranscriptBuffer()
        self.output = TranscriptBuffer()

    @property
    def input_text(self) -> str:
        """Current input preview."""
        return self.input.text

    def on_input_delta(self, text: str, final: bool) -> str:
        preview = self.input.add_delta(text, final)
        if self.input_publisher:
            self.input_publisher.publish_preview(preview, final)
        return preview

    def on_output_delta(self, text: str, final: bool) -> str:
        preview = self.output.add_delta(text, final)
        if self.output_publisher:
            self.output_publisher.publish_preview(preview, final)
        return preview

    def commit_turn(self) -> Optional[ConversationMessage]:
        """Commit the finished turn; returns the model message if there was one."""
        if self.commit_user_transcript and self.input:
            self.conversation.add_user(self.input.take())
            if self.input_publisher:
                self.input_publisher.publish_preview("", True)

        if not self.output:
            self.output.clear()
            return None
        content = self.output.take()
        logger.info(f"Committing model turn: {content[:60]!r}")
        return self.conversation.add_model(content)

    def discard_output(self) -> None:
        if self.output:
            logger.debug(f"Discarding interrupted output transcript: {self.output.text[:60]!r}")
        self.output.clear()

    def reset(self) -> None:
        self.input.clear()
        self.output.clear()
