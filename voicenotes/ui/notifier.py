"""Transient toast notifications."""

import time
import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ToastNotifier:
    """Holds the most recent message until it expires."""

    def __init__(self, duration_seconds: float = 3.0, clock: Callable[[], float] = time.monotonic):
        self.duration_seconds = duration_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._message: Optional[str] = None
        self._expires_at = 0.0

    def show(self, message: str) -> None:
        with self._lock:
            self._message = message
            self._expires_at = self._clock() + self.duration_seconds
        logger.info(f"Toast: {message}")

    @property
    def message(self) -> Optional[str]:
        """Current message, or None once it has expired."""
        with self._lock:
            if self._message is not None and self._clock() >= self._expires_at:
                self._message = None
            return self._message
