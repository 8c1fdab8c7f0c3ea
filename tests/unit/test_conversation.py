"""Unit tests for the conversation log and its publishers."""

from unittest.mock import Mock

import pytest
from pubsub import pub

from nyayalive.live.conversation import ConversationLog
from nyayalive.live.publisher import (
    MessagePublisher,
    TranscriptPublisher,
    MESSAGE_TOPIC,
    INPUT_TRANSCRIPT_TOPIC,
)
from nyayalive.models.messages import ConversationMessage, Role


@pytest.mark.unit
class TestConversationLog:

    def test_messages_are_appended_in_order(self):
        log = ConversationLog()
        log.add_user("Hi")
        log.add_model("Hello", sources=["https://indiankanoon.org"])
        log.add_system("Error")

        assert [m.role for m in log] == [Role.USER, Role.MODEL, Role.SYSTEM]
        assert log.last.content == "Error"
        assert log.messages[1].sources == ["https://indiankanoon.org"]

    def test_messages_returns_a_copy(self):
        log = ConversationLog()
        log.add_user("Hi")
        log.messages.clear()
        assert len(log) == 1

    def test_initial_messages(self):
        seed = [ConversationMessage(role=Role.MODEL, content="Namaste")]
        log = ConversationLog(seed)
        assert log.last.content == "Namaste"

    def test_empty_log(self):
        log = ConversationLog()
        assert log.last is None
        assert len(log) == 0

    def test_appends_are_published(self):
        publisher = Mock()
        log = ConversationLog(publisher=publisher)
        message = log.add_model("Hello")
        publisher.publish_message.assert_called_once_with(message)

    def test_to_dict(self):
        message = ConversationMessage(role=Role.MODEL, content="x", sources=["a"])
        assert message.to_dict() == {"role": "model", "content": "x", "sources": ["a"]}
        assert ConversationMessage(role=Role.USER, content="y").to_dict() == {"role": "user", "content": "y"}


@pytest.mark.unit
class TestPublishers:

    def test_message_publisher_sends_on_topic(self):
        received = []

        def listener(message):
            received.append(message)

        pub.subscribe(listener, MESSAGE_TOPIC)
        ConversationLog(publisher=MessagePublisher()).add_user("Hi")

        assert len(received) == 1
        assert received[0].content == "Hi"

    def test_transcript_publisher_sends_text_and_final(self):
        received = []

        def listener(text, final):
            received.append((text, final))

        pub.subscribe(listener, INPUT_TRANSCRIPT_TOPIC)
        TranscriptPublisher(INPUT_TRANSCRIPT_TOPIC).publish_preview("What is", False)

        assert received == [("What is", False)]
