"""Data models for notes."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Note:
    """A finalized voice note.

    Notes are immutable; edits produce a replacement with the same ``id``.
    """
    id: int            # Milliseconds since epoch at creation, strictly increasing
    title: str
    content: str
    timestamp: str     # Display string of the creation time
    url: Optional[str] = None  # Source the note was captured through
