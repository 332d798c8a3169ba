"""Data models for the Voice Notes application."""

from .notes import Note
from .session import RecordingSession
from .audio import AudioStats
from .transcription import TranscriptionResult
from .ui import AppState
from .api import TranscriptPayload, ErrorPayload

__all__ = [
    "Note",
    "RecordingSession",
    "AudioStats",
    "TranscriptionResult",
    "AppState",
    "TranscriptPayload",
    "ErrorPayload",
]
