"""Pytest configuration and fixtures for Voice Notes tests."""

import time
import uuid
import asyncio
import logging
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional
from unittest.mock import Mock, patch

import pytest
import numpy as np
import yaml

from voicenotes.config import VoiceNotesConfig
from voicenotes.exceptions import UpstreamFailureError
from voicenotes.models.transcription import TranscriptionResult
from voicenotes.transcription.base import AbstractTranscriptionBackend


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network or audio hardware")
    config.addinivalue_line("markers", "integration: tests that run the proxy on a local port")


class FakeTranscriptionBackend(AbstractTranscriptionBackend):
    """Returns scripted transcripts and records every request."""

    def __init__(self, transcripts: Optional[List[str]] = None, default: str = "hello",
                 fail: bool = False):
        super().__init__("tr")
        self.transcripts = list(transcripts or [])
        self.default = default
        self.fail = fail
        self.requests: List[Dict] = []

    async def transcribe(self, audio: bytes, filename: str = "blob",
                         content_type: Optional[str] = None) -> TranscriptionResult:
        self.requests.append({"audio": audio, "filename": filename, "content_type": content_type})
        if self.fail:
            raise UpstreamFailureError("OpenAI API error: 401 - invalid key")
        text = self.transcripts.pop(0) if self.transcripts else self.default
        return TranscriptionResult(text=text, processing_time=0.0, timestamp=datetime.now(),
                                   service="fake", language=self.language)


class FakeTranscriptionClient:
    """Stands in for TranscriptionClient inside the uploader."""

    def __init__(self, chunk_texts: Optional[List] = None, final_text: str = "full transcript",
                 final_error: Optional[Exception] = None, delay: float = 0.0):
        self.chunk_texts = list(chunk_texts or [])
        self.final_text = final_text
        self.final_error = final_error
        self.delay = delay
        self.chunks: List[bytes] = []
        self.sessions: List[bytes] = []

    async def transcribe_chunk(self, audio: bytes) -> str:
        self.chunks.append(audio)
        await asyncio.sleep(self.delay)
        text = self.chunk_texts.pop(0) if self.chunk_texts else "chunk"
        if isinstance(text, Exception):
            raise text
        return text

    async def transcribe_session(self, audio: bytes) -> str:
        self.sessions.append(audio)
        await asyncio.sleep(self.delay)
        if self.final_error is not None:
            raise self.final_error
        return self.final_text


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # Generate 1024 samples of 16-bit audio (sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate  # ~0.064 seconds
    freq = 440  # A4 note

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    # Convert to 16-bit integers
    audio_data = (wave_data * 32767).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        def read(frames, exception_on_overflow=True):
            # Pace reads like a real device would
            time.sleep(0.01)
            return b'\x00' * (frames * 2)

        # Configure mock stream
        mock_stream.read.side_effect = read
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_sample_size.return_value = 2

        # Configure mock PyAudio class
        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def fake_backend():
    return FakeTranscriptionBackend()


@pytest.fixture
def topics():
    """Pub/sub topic names private to one test."""
    prefix = f"t{uuid.uuid4().hex}"
    return {
        "audio": f"{prefix}.audio.chunk",
        "realtime": f"{prefix}.transcription.realtime",
        "final": f"{prefix}.transcription.final",
    }


@pytest.fixture
def test_config(temp_data_dir):
    """Configuration file with fast timings, logging into the temp dir."""
    config_path = Path(temp_data_dir) / "voicenotes.yaml"
    with open(config_path, 'w') as f:
        yaml.safe_dump({
            "audio": {"chunk_interval_seconds": 0.1},
            "notes": {"save_delay_seconds": 0.0},
            "ui": {"toast_seconds": 3.0},
            "logging": {"file_path": "logs/test.log", "console_output": False},
        }, f)
    return VoiceNotesConfig(str(config_path))
