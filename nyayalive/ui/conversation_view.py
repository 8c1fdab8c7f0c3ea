"""Rich terminal rendering of the live conversation."""

import logging
from typing import Optional

from pubsub import pub
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..live.publisher import INPUT_TRANSCRIPT_TOPIC, MESSAGE_TOPIC
from ..models.messages import ConversationMessage, Role

logger = logging.getLogger(__name__)

ROLE_STYLES = {
    Role.USER: ("You", "cyan"),
    Role.MODEL: ("Nyayabot", "green"),
    Role.SYSTEM: ("System", "bold red"),
}


class ConversationView:
    """Prints conversation messages and settled input transcripts."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.input_preview = ""
        self.subscribed = False

    def subscribe(self) -> None:
        pub.subscribe(self.on_message, MESSAGE_TOPIC)
        pub.subscribe(self.on_input_preview, INPUT_TRANSCRIPT_TOPIC)
        self.subscribed = True

    def unsubscribe(self) -> None:
        if not self.subscribed:
            return
        pub.unsubscribe(self.on_message, MESSAGE_TOPIC)
        pub.unsubscribe(self.on_input_preview, INPUT_TRANSCRIPT_TOPIC)
        self.subscribed = False

    def on_input_preview(self, text: str, final: bool) -> None:
        self.input_preview = text
        if final and text.strip():
            self.console.print(Text(f"🎙️  {text.strip()}", style="dim cyan"))

    def on_message(self, message: ConversationMessage) -> None:
        title, style = ROLE_STYLES[message.role]
        body = Text(message.content)
        if message.sources:
            body.append("\n\nSources:\n", style="bold")
            for uri in message.sources:
                body.append(f"  • {uri}\n", style="blue underline")
        self.console.print(Panel(body, title=title, title_align="left", border_style=style))

    def show_banner(self, model: str) -> None:
        self.console.print("⚖️  Nyaya Live voice session", style="bold green")
        self.console.print(f"Model: {model}. Speak to the assistant, Ctrl+C to stop.", style="yellow")

    def show_chat_banner(self, model: str) -> None:
        self.console.print("⚖️  Nyaya Live chat", style="bold green")
        self.console.print(f"Model: {model}. Type a question, 'exit' to quit.", style="yellow")
