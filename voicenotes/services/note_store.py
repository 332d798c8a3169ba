"""In-memory ordered collection of finalized notes."""

import time
import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterator, List, Optional

from ..models.notes import Note

logger = logging.getLogger(__name__)

LEFT = "left"
RIGHT = "right"


class NoteStore:
    """Owns the note collection, newest first.

    Ids are creation times in milliseconds, bumped when two notes are created
    within the same millisecond, so they are unique and strictly increasing.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._notes: List[Note] = []
        self._last_id = 0

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(list(self._notes))

    def __contains__(self, note_id: object) -> bool:
        return any(note.id == note_id for note in self._notes)

    @property
    def notes(self) -> List[Note]:
        """Snapshot of the notes, newest first."""
        return list(self._notes)

    def create(self, content: str, url: Optional[str] = None, title: Optional[str] = None) -> Note:
        """Add a note for a finalized transcript."""
        now = self._clock()
        note_id = max(int(now * 1000), self._last_id + 1)
        self._last_id = note_id

        note = Note(
            id=note_id,
            title=title if title is not None else f"Note {len(self._notes) + 1}",
            content=content,
            timestamp=datetime.fromtimestamp(now).strftime("%c"),
            url=url,
        )
        self._notes.insert(0, note)
        logger.info(f"Created note {note.id} ({len(content)} chars)")
        return note

    def get(self, note_id: int) -> Optional[Note]:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    def index_of(self, note_id: int) -> int:
        for index, note in enumerate(self._notes):
            if note.id == note_id:
                return index
        raise KeyError(note_id)

    def update(self, note_id: int, title: str, content: str) -> Note:
        """Replace the title and content of one note.

        Raises:
            KeyError: If the note does not exist
        """
        index = self.index_of(note_id)
        updated = replace(self._notes[index], title=title, content=content)
        self._notes[index] = updated
        logger.info(f"Updated note {note_id}")
        return updated

    def delete(self, note_id: int) -> bool:
        """Remove a note. Returns False if it was not present."""
        try:
            index = self.index_of(note_id)
        except KeyError:
            return False
        del self._notes[index]
        logger.info(f"Deleted note {note_id}")
        return True

    def neighbour(self, note_id: int, direction: str) -> Note:
        """Note before (``left``) or after (``right``) ``note_id``, wrapping at both ends.

        Raises:
            KeyError: If the note does not exist
            ValueError: If direction is not 'left' or 'right'
        """
        if direction not in (LEFT, RIGHT):
            raise ValueError(f"Unknown direction: {direction}")

        index = self.index_of(note_id)
        step = -1 if direction == LEFT else 1
        return self._notes[(index + step) % len(self._notes)]
