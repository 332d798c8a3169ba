"""Microphone capture controller with periodic chunk emission."""

import time
import logging
from enum import Enum
from threading import Thread, Event, Lock
from typing import Optional, List, Callable
from datetime import datetime

import numpy as np
import pyaudio

from ..exceptions import MediaAccessDeniedError, InvalidStateError
from ..models.audio import AudioStats
from ..models.events import AudioChunkEvent

logger = logging.getLogger(__name__)


class CaptureState(Enum):
    """Recording lifecycle states."""
    IDLE = "idle"
    RECORDING = "recording"


def peak_level(audio_chunk: bytes) -> float:
    """Peak amplitude of 16-bit PCM as a fraction of full scale."""
    if not audio_chunk:
        return 0.0
    samples = np.frombuffer(audio_chunk, dtype=np.int16)
    if samples.size == 0:
        return 0.0
    return float(np.abs(samples.astype(np.int32)).max()) / 32768.0


class CaptureController:
    """Owns the microphone stream for one recording at a time.

    While recording, the audio read since the previous emission is handed to
    ``callback`` every ``chunk_interval_seconds``. Every frame is also kept so
    that ``stop()`` can return the complete session audio.
    """

    def __init__(
        self,
        callback: Callable[[AudioChunkEvent], None],
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
        chunk_interval_seconds: float = 1.0,
        format: int = pyaudio.paInt16,
    ):
        """Initialize capture controller.

        Args:
            callback: Receives each emitted AudioChunkEvent (on the capture thread)
            sample_rate: Audio sample rate (16kHz for Whisper compatibility)
            chunk_size: Frames per stream read
            channels: Number of audio channels (1 for mono)
            chunk_interval_seconds: How often incremental chunks are emitted
            format: Audio format (16-bit signed int)
        """
        self.audio_event_callback = callback
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.chunk_interval_seconds = chunk_interval_seconds
        self.format = format

        self.state = CaptureState.IDLE
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self._buffer_lock = Lock()

        # Per-session state, reset by start()
        self.session_id: Optional[int] = None
        self.start_time: Optional[datetime] = None
        self.session_frames: List[bytes] = []
        self.pending_frames: List[bytes] = []
        self.total_frames = 0
        self.chunks_emitted = 0
        self.peak_level = 0.0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    @property
    def is_recording(self) -> bool:
        return self.state is CaptureState.RECORDING

    def start(self, session_id: int) -> None:
        """Acquire the microphone and begin recording.

        Raises:
            InvalidStateError: If already recording
            MediaAccessDeniedError: If the microphone cannot be opened; the
                controller stays idle
        """
        if self.is_recording:
            raise InvalidStateError("Recording already in progress")

        logger.info(f"Starting audio recording for session {session_id}")
        self.stream = self._open_audio_stream()

        self.session_id = session_id
        self.start_time = datetime.now()
        self.session_frames = []
        self.pending_frames = []
        self.total_frames = 0
        self.chunks_emitted = 0
        self.peak_level = 0.0
        self.stop_event.clear()

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.state = CaptureState.RECORDING
        self.recording_thread.start()

    def stop(self) -> bytes:
        """Stop recording, release the microphone and return the session audio.

        Returns:
            Concatenated 16-bit PCM of the whole session

        Raises:
            InvalidStateError: If not recording
        """
        if not self.is_recording:
            raise InvalidStateError("No recording in progress")

        logger.info("Stopping audio recording")
        self.stop_event.set()

        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        self.state = CaptureState.IDLE
        with self._buffer_lock:
            audio = b"".join(self.session_frames)
        logger.info(f"Recording stopped. Frames: {self.total_frames}, "
                    f"chunks emitted: {self.chunks_emitted}, bytes: {len(audio)}")
        return audio

    def _open_audio_stream(self):
        try:
            self.pyaudio_instance = pyaudio.PyAudio()
            stream = self.pyaudio_instance.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
            )
        except (OSError, ValueError) as e:
            logger.error(f"Error accessing microphone: {e}")
            self._release_audio()
            raise MediaAccessDeniedError(f"Microphone unavailable: {e}") from e

        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        return stream

    def _release_audio(self) -> None:
        if self.stream is not None:
            try:
                self.stream.stop_stream()
                self.stream.close()
            except OSError as e:
                logger.warning(f"Error closing audio stream: {e}")
            self.stream = None
        if self.pyaudio_instance is not None:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None

    def _read_frame(self) -> bytes:
        audio_chunk = self.stream.read(self.chunk_size, exception_on_overflow=False)
        self.total_frames += 1
        self.peak_level = peak_level(audio_chunk)
        with self._buffer_lock:
            self.session_frames.append(audio_chunk)
            self.pending_frames.append(audio_chunk)
        return audio_chunk

    def _emit_chunk(self, final: bool) -> None:
        with self._buffer_lock:
            audio_data = b"".join(self.pending_frames)
            self.pending_frames = []

        # The final marker goes out even when nothing was read since the last interval
        if not audio_data and not final:
            return

        self.chunks_emitted += 1
        self.audio_event_callback(AudioChunkEvent(
            session_id=self.session_id,
            sequence_number=self.chunks_emitted,
            audio_data=audio_data,
            sample_rate=self.sample_rate,
            channels=self.channels,
            timestamp=time.time(),
            final=final,
            peak_level=self.peak_level,
        ))

    def _record_continuously(self) -> None:
        """Internal method: recording loop in background thread."""
        last_emit = time.monotonic()
        try:
            while not self.stop_event.is_set():
                self._read_frame()
                if time.monotonic() - last_emit >= self.chunk_interval_seconds:
                    self._emit_chunk(final=False)
                    last_emit = time.monotonic()
        except OSError as e:
            logger.error(f"Audio stream failed mid-recording: {e}")
        finally:
            # Whatever was read since the last interval goes out as the tail,
            # so every session ends with exactly one final chunk
            self._emit_chunk(final=True)
            self._release_audio()

    def get_recording_stats(self) -> AudioStats:
        """Get current recording statistics."""
        duration = 0.0
        if self.start_time:
            duration = (datetime.now() - self.start_time).total_seconds()

        return AudioStats(
            is_recording=self.is_recording,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            total_frames=self.total_frames,
            chunks_emitted=self.chunks_emitted,
            peak_level=self.peak_level,
        )
