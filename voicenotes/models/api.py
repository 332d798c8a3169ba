"""Wire models and routes shared by the transcription proxy and its client."""

from pydantic import BaseModel

AUDIO_FIELD = "audio"
REALTIME_PATH = "/api/transcribe-realtime"
FINAL_PATH = "/api/transcribe"

NO_AUDIO_MESSAGE = "No audio file provided"
TRANSCRIPTION_FAILED_MESSAGE = "Transcription failed"


class TranscriptPayload(BaseModel):
    """Successful transcription response body."""
    transcript: str


class ErrorPayload(BaseModel):
    """Error response body."""
    error: str
