"""Main application entry point for Voice Notes."""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import VoiceNotesConfig

logger = logging.getLogger(__name__)


def setup_logging(config: VoiceNotesConfig, level: Optional[str] = None) -> None:
    """Set up logging configuration from YAML config."""
    level = level or config.get('logging.level', 'INFO')
    log_file_path = config.get('logging.file_path', 'data/logs/voicenotes.log')
    console_output = config.get('logging.console_output', True)

    Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    ))
    handlers.append(file_handler)

    # Console handler - warnings only, the UI owns the terminal
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("Voice Notes starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Voice Notes - record, transcribe and edit voice notes",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, INFO)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Voice Notes v{__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the transcription proxy")
    serve.add_argument("--host", type=str, help="Bind address (overrides config)")
    serve.add_argument("--port", type=int, help="Port (overrides config)")

    record = subparsers.add_parser("record", help="Interactive recording and note browser")
    record.add_argument("--server-url", type=str, help="Transcription proxy URL (overrides config)")

    auto = subparsers.add_parser("auto", help="Record for a fixed time and print the note")
    auto.add_argument("--server-url", type=str, help="Transcription proxy URL (overrides config)")
    auto.add_argument(
        "--duration",
        type=int,
        default=10,
        help="Duration in seconds to record (default: 10)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for Voice Notes."""
    args = build_parser().parse_args(argv)

    config = VoiceNotesConfig(args.config)
    setup_logging(config, args.log_level)

    for option, key in (("host", "server.host"), ("port", "server.port"), ("server_url", "client.server_url")):
        value = getattr(args, option, None)
        if value is not None:
            config.set(key, value)

    try:
        if args.command == "serve":
            from .server import run_server
            run_server(config)
        elif args.command == "record":
            from .services.controller import create_controller
            from .ui.voice_notes_screen import VoiceNotesScreen
            controller = create_controller(config)
            try:
                VoiceNotesScreen(controller, config).run()
            finally:
                controller.shutdown()
        elif args.command == "auto":
            from .auto_mode import run_auto_mode
            if run_auto_mode(config, args.duration) is None:
                sys.exit(1)
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Error: {e}")
        logger.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
