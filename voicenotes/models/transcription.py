"""Transcription-related data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class TranscriptionResult:
    """Result of a transcription operation."""
    text: str
    processing_time: float
    timestamp: datetime
    service: str
    language: str
