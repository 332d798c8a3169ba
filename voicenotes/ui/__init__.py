"""Terminal user interface."""

from .notifier import ToastNotifier
from .typewriter import TypewriterFeed

__all__ = ["ToastNotifier", "TypewriterFeed"]
