"""Recording session model."""

from dataclasses import dataclass, field
from typing import List


@dataclass
class RecordingSession:
    """State of one recording, discarded when the next one starts."""
    session_id: int
    is_recording: bool = True
    audio_chunks: List[bytes] = field(default_factory=list)
    running_transcript: str = ""
    last_chunk_text: str = ""
    failed_chunks: int = 0

    def append_chunk_text(self, text: str) -> bool:
        """Fold one chunk transcript into the running transcript.

        Empty text and text identical to the previous chunk are ignored.

        Returns:
            True if the running transcript changed
        """
        text = text.strip()
        if not text or text == self.last_chunk_text:
            return False

        self.last_chunk_text = text
        if self.running_transcript:
            self.running_transcript = f"{self.running_transcript} {text}"
        else:
            self.running_transcript = text
        return True
