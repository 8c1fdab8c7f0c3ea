"""Publishers for live session updates using pubsub.pub."""

import logging
from pubsub import pub

from ..models.messages import ConversationMessage

logger = logging.getLogger(__name__)

INPUT_TRANSCRIPT_TOPIC = "transcript.input"
OUTPUT_TRANSCRIPT_TOPIC = "transcript.output"
MESSAGE_TOPIC = "conversation.message"


class TranscriptPublisher:
    """Publishes live transcript previews for one direction."""

    def __init__(self, topic: str):
        """Initialize transcript publisher.

        Args:
            topic: Pub/sub topic name for preview text
        """
        self.topic = topic
        logger.info(f"TranscriptPublisher initialized with topic: {topic}")

    def publish_preview(self, text: str, final: bool) -> None:
        """Publish the current preview text.

        Args:
            text: Full preview text (stable plus in-flight)
            final: True when the preview just settled
        """
        pub.sendMessage(self.topic, text=text, final=final)


class MessagePublisher:
    """Publishes messages appended to the conversation log."""

    def __init__(self, topic: str = MESSAGE_TOPIC):
        self.topic = topic
        logger.info(f"MessagePublisher initialized with topic: {topic}")

    def publish_message(self, message: ConversationMessage) -> None:
        pub.sendMessage(self.topic, message=message)
        logger.debug(f"Published {message.role.value} message ({len(message.content)} chars)")
