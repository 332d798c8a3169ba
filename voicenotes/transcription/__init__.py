"""Transcription module for Voice Notes."""

from .base import AbstractTranscriptionBackend
from .openai_backend import OpenAITranscriptionBackend, TRANSCRIPTION_MODEL, TRANSCRIPTION_LANGUAGE
from .client import TranscriptionClient
from .publisher import TranscriptionPublisher, REALTIME_TOPIC, FINAL_TOPIC
from .uploader import ChunkUploader, UploadTask

__all__ = [
    "AbstractTranscriptionBackend",
    "OpenAITranscriptionBackend",
    "TRANSCRIPTION_MODEL",
    "TRANSCRIPTION_LANGUAGE",
    "TranscriptionClient",
    "TranscriptionPublisher",
    "REALTIME_TOPIC",
    "FINAL_TOPIC",
    "ChunkUploader",
    "UploadTask",
]
