"""Abstract base class for upstream transcription backends."""

from abc import ABC, abstractmethod
from typing import Optional
import logging

from ..models.transcription import TranscriptionResult

logger = logging.getLogger(__name__)


class AbstractTranscriptionBackend(ABC):
    """Speech-to-text service the transcription proxy forwards audio to."""

    def __init__(self, language: str):
        """Initialize backend with a fixed language hint."""
        self.language = language

    @abstractmethod
    async def transcribe(self, audio: bytes, filename: str = "blob",
                         content_type: Optional[str] = None) -> TranscriptionResult:
        """Transcribe one audio payload in isolation.

        Args:
            audio: Encoded audio exactly as received from the caller
            filename: Filename declared by the caller
            content_type: Media type declared by the caller

        Returns:
            TranscriptionResult with the recognized text

        Raises:
            UpstreamFailureError: If the service rejects the request or cannot be reached
        """

    def initialize(self) -> bool:
        """Verify configuration. Returns False if requests are expected to fail."""
        return True

    async def cleanup(self) -> None:
        """Release backend resources."""
