"""Persistence contract for note saves."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict

from ..models.notes import Note

logger = logging.getLogger(__name__)


class NoteRepository(ABC):
    """Where edited notes are saved to."""

    @abstractmethod
    async def save(self, note: Note) -> Note:
        """Persist the complete note.

        Returns:
            The note as stored

        Raises:
            SaveFailureError: If the note could not be saved; nothing is stored
        """


class InMemoryNoteRepository(NoteRepository):
    """Keeps saved notes in a dict after a fixed latency."""

    def __init__(self, save_delay_seconds: float = 0.5):
        self.save_delay_seconds = save_delay_seconds
        self.saved: Dict[int, Note] = {}

    async def save(self, note: Note) -> Note:
        await asyncio.sleep(self.save_delay_seconds)
        self.saved[note.id] = note
        logger.debug(f"Saved note {note.id}")
        return note
