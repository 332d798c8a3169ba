"""Event models consumed by the application controller.

Background workers (audio capture, uploads, saves) never touch application
state; they publish one of these events and the controller applies it.
"""

import time
from dataclasses import dataclass, field
from typing import Optional

from .notes import Note


@dataclass
class AudioChunkEvent:
    """Audio captured since the previous emission of the same session."""
    session_id: int
    sequence_number: int
    audio_data: bytes  # 16-bit PCM
    sample_rate: int = 16000
    channels: int = 1
    timestamp: float = field(default_factory=time.time)
    final: bool = False  # True for the tail emitted when recording stops
    peak_level: float = 0.0


@dataclass
class RecordingStarted:
    session_id: int


@dataclass
class RecordingFailed:
    session_id: int
    error: Exception


@dataclass
class RecordingStopped:
    session_id: int
    audio_bytes: int = 0


@dataclass
class ChunkTranscribed:
    session_id: int
    sequence_number: int
    text: str


@dataclass
class ChunkFailed:
    session_id: int
    sequence_number: int
    error: Exception


@dataclass
class FinalTranscriptReady:
    session_id: int
    text: str


@dataclass
class FinalTranscriptFailed:
    session_id: int
    error: Exception


@dataclass
class OpenNote:
    note_id: int


@dataclass
class CloseNote:
    pass


@dataclass
class NavigateNotes:
    direction: str  # "left" or "right"


@dataclass
class EditNote:
    title: Optional[str] = None
    content: Optional[str] = None


@dataclass
class DeleteNote:
    pass


@dataclass
class SaveRequested:
    pass


@dataclass
class NoteSaved:
    note: Note


@dataclass
class NoteSaveFailed:
    note_id: int
    error: Exception
