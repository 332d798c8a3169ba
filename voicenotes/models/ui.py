"""Application state rendered by the terminal UI."""

from dataclasses import dataclass
from typing import Optional

from .session import RecordingSession


@dataclass
class AppState:
    """Everything the controller owns apart from the note collection."""
    session: Optional[RecordingSession] = None
    selected_note_id: Optional[int] = None
    edited_title: str = ""
    edited_content: str = ""
    is_saving: bool = False
    pending_finalizations: int = 0
    last_error: Optional[Exception] = None

    @property
    def is_recording(self) -> bool:
        return self.session is not None and self.session.is_recording

    @property
    def running_transcript(self) -> str:
        return self.session.running_transcript if self.session else ""
