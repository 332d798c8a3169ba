import logging
from pathlib import Path

import pytest

from voicenotes.main import build_parser, setup_logging


@pytest.mark.unit
class TestArgumentParsing:

    def test_auto_defaults(self):
        """Test default arguments of the auto command."""
        args = build_parser().parse_args(["auto"])
        assert args.command == "auto"
        assert args.duration == 10
        assert args.config is None

    def test_global_options(self):
        """Test global options combine with subcommand options."""
        args = build_parser().parse_args(
            ["--config", "voicenotes.yaml", "--log-level", "DEBUG", "serve", "--port", "9000"])

        assert args.config == "voicenotes.yaml"
        assert args.log_level == "DEBUG"
        assert args.command == "serve"
        assert args.port == 9000

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_version(self, capsys):
        """Test --version output."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--version"])
        assert "Voice Notes v" in capsys.readouterr().out


@pytest.mark.unit
def test_setup_logging_writes_log_file(test_config):
    """Test logging setup writes to the configured log file."""
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level
    try:
        setup_logging(test_config, "DEBUG")
        logging.getLogger("voicenotes.test").info("hello from test")
        for handler in root_logger.handlers:
            handler.flush()

        log_file = Path(test_config.get('logging.file_path'))
        assert log_file.exists()
        assert "hello from test" in log_file.read_text()
        # console_output is off in the test config
        assert len(root_logger.handlers) == 1
    finally:
        for handler in root_logger.handlers:
            handler.close()
        root_logger.handlers[:] = saved_handlers
        root_logger.setLevel(saved_level)
