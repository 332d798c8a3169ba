"""Services layer for Voice Notes application logic."""

from .note_store import NoteStore
from .repository import NoteRepository, InMemoryNoteRepository
from .controller import VoiceNotesController, create_controller

__all__ = [
    "NoteStore",
    "NoteRepository",
    "InMemoryNoteRepository",
    "VoiceNotesController",
    "create_controller",
]
