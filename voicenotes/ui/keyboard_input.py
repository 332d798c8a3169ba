"""Single-key input for the terminal UI."""

import sys
import threading
import time
from contextlib import contextmanager
from typing import Optional, Callable
import logging

logger = logging.getLogger(__name__)


class KeyboardInputHandler:
    """Reads single keypresses on a background thread.

    On Unix the terminal is put in cbreak mode while the handler runs. The
    callback runs on the input thread and can read a full line inside
    ``line_input()``.
    """

    def __init__(self, callback: Callable[[str], bool]):
        """Initialize keyboard handler.

        Args:
            callback: Takes a key and returns True to continue, False to quit
        """
        self.callback = callback
        self.running = False
        self.thread: Optional[threading.Thread] = None
        self._saved_settings = None

    def start(self) -> None:
        if self.running:
            return

        self.running = True
        self.thread = threading.Thread(target=self._input_loop, daemon=True)
        self.thread.name = "KeyboardInputThread"
        self.thread.start()
        logger.info("Keyboard input handler started")

    def stop(self) -> None:
        self.running = False
        if self.thread and self.thread is not threading.current_thread():
            self.thread.join(timeout=1.0)
        logger.info("Keyboard input handler stopped")

    def _input_loop(self) -> None:
        self._enter_cbreak()
        try:
            while self.running:
                key = self._get_key()
                if key:
                    logger.debug(f"Key detected: {key!r}")
                    if not self.callback(key):
                        break
                time.sleep(0.05)
        finally:
            self._restore_terminal()
            self.running = False
            logger.info("Keyboard input loop ended")

    @contextmanager
    def line_input(self):
        """Temporarily restore normal line editing."""
        self._restore_terminal()
        try:
            yield
        finally:
            self._enter_cbreak()

    def _enter_cbreak(self) -> None:
        if sys.platform == "win32" or not sys.stdin.isatty():
            return
        import termios
        import tty
        self._saved_settings = termios.tcgetattr(sys.stdin)
        tty.setcbreak(sys.stdin.fileno())

    def _restore_terminal(self) -> None:
        if self._saved_settings is None:
            return
        import termios
        termios.tcsetattr(sys.stdin, termios.TCSADRAIN, self._saved_settings)
        self._saved_settings = None

    def _get_key(self) -> Optional[str]:
        if sys.platform == "win32":
            import msvcrt
            if msvcrt.kbhit():
                return msvcrt.getwch().lower()
            return None

        import select
        if not select.select([sys.stdin], [], [], 0.1)[0]:
            return None
        key = sys.stdin.read(1)
        if not key:
            # EOF on stdin
            self.running = False
            return None
        return key.lower()
