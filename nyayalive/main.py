"""Main application entry point for Nyaya Live."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from nyayalive.audio.capture import AudioCapture
from nyayalive.audio.output import PyAudioOutput
from nyayalive.audio.playback import PlaybackPipeline
from nyayalive.exceptions import PermissionDenied
from nyayalive.live.backend import GeminiLiveBackend
from nyayalive.live.conversation import ConversationLog
from nyayalive.live.publisher import (
    TranscriptPublisher,
    MessagePublisher,
    INPUT_TRANSCRIPT_TOPIC,
    OUTPUT_TRANSCRIPT_TOPIC,
)
from nyayalive.live.session import LiveSessionController
from nyayalive.live.transcript import TranscriptAssembler
from nyayalive.services.chat_service import ChatAssistant
from nyayalive.services.client import create_client
from nyayalive.services.gemini_service import GeminiService
from nyayalive.ui.conversation_view import ConversationView

from . import __version__
from .config import NyayaLiveConfig

logger = logging.getLogger(__name__)


class Server:

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        # Load configuration
        self.config = NyayaLiveConfig(config_path)
        # Set up logging (command line overrides config)
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))
        self.controller: Optional[LiveSessionController] = None

    def init(self):
        logger.info("Initializing services...")

        input_rate = self.config.get('audio.input_sample_rate', 16000)
        output_rate = self.config.get('audio.output_sample_rate', 24000)
        chunk_size = self.config.get('audio.chunk_size', 4096)
        channels = self.config.get('audio.channels', 1)
        device_rate = self.config.get('audio.device_sample_rate')
        logger.info(f"Audio settings: in {input_rate}Hz ({device_rate or input_rate}Hz device), "
                    f"out {output_rate}Hz, {chunk_size} samples/frame")

        self.view = ConversationView()
        self.view.subscribe()
        self.conversation = ConversationLog(publisher=MessagePublisher())
        self.assembler = TranscriptAssembler(
            self.conversation,
            input_publisher=TranscriptPublisher(INPUT_TRANSCRIPT_TOPIC),
            output_publisher=TranscriptPublisher(OUTPUT_TRANSCRIPT_TOPIC),
            commit_user_transcript=self.config.get('live.commit_user_transcript', False),
        )

        client = create_client(self.config)
        self.live_model = self.config.get('gemini.live_model')
        backend = GeminiLiveBackend(client, self.live_model)

        # Typed chat shares the conversation log with the voice session
        self.chat_assistant = ChatAssistant(GeminiService.from_config(client, self.config), self.conversation)

        capture = AudioCapture(
            callback=self._on_frame,
            sample_rate=input_rate,
            chunk_size=chunk_size,
            channels=channels,
            device_sample_rate=device_rate,
        )
        playback = PlaybackPipeline(PyAudioOutput(sample_rate=output_rate))

        self.controller = LiveSessionController(
            backend,
            capture,
            playback,
            self.conversation,
            assembler=self.assembler,
            response_timeout=self.config.get('live.response_timeout_seconds', 0),
        )

    def _on_frame(self, frame) -> None:
        if self.controller:
            self.controller.on_captured_frame(frame)

    async def run(self, duration: Optional[int]) -> None:
        self.view.show_banner(self.live_model)
        try:
            await self.controller.start()
        except PermissionDenied:
            return

        try:
            if duration:
                await asyncio.sleep(duration)
            else:
                while self.controller.is_active:
                    await asyncio.sleep(0.5)
        finally:
            await self.cleanup()

    async def run_chat(self) -> None:
        """Typed conversation on stdin until EOF or 'exit'."""
        self.view.show_chat_banner(self.config.get('gemini.text_model'))
        try:
            while True:
                try:
                    line = await asyncio.to_thread(input, "> ")
                except EOFError:
                    break
                if line.strip().lower() in ("exit", "quit"):
                    break
                await self.chat_assistant.send(line)
        finally:
            await self.cleanup()

    async def cleanup(self):
        if self.controller:
            await self.controller.stop()
        self.view.unsubscribe()


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'logs/nyayalive.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    ))
    handlers.append(file_handler)

    # Console handler - warnings only, the conversation view owns stdout
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("Nyaya Live starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def main() -> None:
    """Main entry point for Nyaya Live."""
    parser = argparse.ArgumentParser(
        description="Nyaya Live - real-time voice conversation with the Nyaya legal assistant",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in defaults)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, else INFO)"
    )

    parser.add_argument(
        "--duration",
        type=int,
        help="Stop the session automatically after this many seconds"
    )

    parser.add_argument(
        "--chat",
        action="store_true",
        help="Type messages instead of starting a voice session"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Nyaya Live v{__version__}"
    )

    args = parser.parse_args()

    server = Server(args.config, args.log_level)
    try:
        server.init()
        if args.chat:
            asyncio.run(server.run_chat())
        else:
            asyncio.run(server.run(args.duration))
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
