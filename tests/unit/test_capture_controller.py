"""Unit tests for CaptureController."""

import time
import threading
from unittest.mock import Mock

import pytest
import numpy as np

from voicenotes.audio.capture import CaptureController, CaptureState, peak_level
from voicenotes.exceptions import MediaAccessDeniedError, InvalidStateError


class ChunkCollector:
    """Thread-safe sink for emitted chunk events."""

    def __init__(self):
        self.events = []
        self._lock = threading.Lock()

    def __call__(self, event):
        with self._lock:
            self.events.append(event)


@pytest.mark.unit
class TestCaptureController:
    """Test cases for CaptureController class."""

    def test_initialization(self):
        """Test CaptureController initialization with default parameters."""
        capture = CaptureController(callback=Mock())

        assert capture.sample_rate == 16000
        assert capture.chunk_size == 1024
        assert capture.channels == 1
        assert capture.chunk_interval_seconds == 1.0
        assert capture.state is CaptureState.IDLE
        assert capture.is_recording is False

    def test_start_opens_stream(self, mock_pyaudio):
        """Test starting opens a 16-bit mono input stream."""
        capture = CaptureController(callback=Mock(), chunk_interval_seconds=0.05)
        capture.start(session_id=1)
        try:
            assert capture.is_recording is True
            assert capture.session_id == 1
            assert capture.recording_thread.daemon is True
            mock_pyaudio['instance'].open.assert_called_once()
            kwargs = mock_pyaudio['instance'].open.call_args.kwargs
            assert kwargs['input'] is True
            assert kwargs['rate'] == 16000
        finally:
            capture.stop()

    def test_start_while_recording_raises(self, mock_pyaudio):
        """Test starting twice raises InvalidStateError."""
        capture = CaptureController(callback=Mock())
        capture.start(session_id=1)
        try:
            with pytest.raises(InvalidStateError):
                capture.start(session_id=2)
        finally:
            capture.stop()

    def test_stop_while_idle_raises(self):
        """Test stopping while idle raises InvalidStateError."""
        with pytest.raises(InvalidStateError):
            CaptureController(callback=Mock()).stop()

    def test_microphone_denied_stays_idle(self, mock_pyaudio):
        """Test a microphone open failure raises MediaAccessDeniedError."""
        mock_pyaudio['instance'].open.side_effect = OSError("[Errno -9996] Invalid input device")
        capture = CaptureController(callback=Mock())

        with pytest.raises(MediaAccessDeniedError):
            capture.start(session_id=1)

        assert capture.state is CaptureState.IDLE
        assert capture.recording_thread is None
        mock_pyaudio['instance'].terminate.assert_called_once()

    def test_emits_chunks_and_returns_full_audio(self, mock_pyaudio):
        """Test chunk emission and the full session audio returned by stop()."""
        collector = ChunkCollector()
        capture = CaptureController(callback=collector, chunk_size=256,
                                    chunk_interval_seconds=0.05)

        capture.start(session_id=7)
        time.sleep(0.3)
        audio = capture.stop()

        assert capture.is_recording is False
        assert len(collector.events) >= 2
        assert all(event.session_id == 7 for event in collector.events)
        assert [event.sequence_number for event in collector.events] == \
            list(range(1, len(collector.events) + 1))
        assert collector.events[-1].final is True
        assert not any(event.final for event in collector.events[:-1])

        # Chunks are disjoint slices of the session audio
        assert b"".join(event.audio_data for event in collector.events) == audio
        assert len(audio) == capture.total_frames * 256 * 2

    def test_final_marker_sent_when_tail_is_empty(self, mock_pyaudio):
        """Test a session still ends with one final chunk when every read was already emitted."""
        collector = ChunkCollector()
        capture = CaptureController(callback=collector, chunk_size=256,
                                    chunk_interval_seconds=0.0)

        capture.start(session_id=3)
        time.sleep(0.1)
        audio = capture.stop()

        finals = [event for event in collector.events if event.final]
        assert len(finals) == 1
        assert collector.events[-1] is finals[0]
        assert finals[0].audio_data == b""
        assert b"".join(event.audio_data for event in collector.events) == audio

    def test_stop_releases_microphone(self, mock_pyaudio):
        """Test stopping closes the stream and terminates PyAudio."""
        capture = CaptureController(callback=Mock(), chunk_interval_seconds=0.05)
        capture.start(session_id=1)
        time.sleep(0.05)
        capture.stop()

        mock_pyaudio['stream'].stop_stream.assert_called_once()
        mock_pyaudio['stream'].close.assert_called_once()
        mock_pyaudio['instance'].terminate.assert_called_once()
        assert capture.stream is None

    def test_restart_resets_session_buffers(self, mock_pyaudio):
        """Test a second session starts with fresh buffers."""
        collector = ChunkCollector()
        capture = CaptureController(callback=collector, chunk_interval_seconds=0.05)

        capture.start(session_id=1)
        time.sleep(0.1)
        first = capture.stop()

        capture.start(session_id=2)
        time.sleep(0.05)
        second = capture.stop()

        assert first and second
        assert capture.chunks_emitted == len([e for e in collector.events if e.session_id == 2])
        assert collector.events[-1].session_id == 2

    def test_get_recording_stats(self, mock_pyaudio):
        """Test recording statistics."""
        capture = CaptureController(callback=Mock(), chunk_interval_seconds=0.05)
        capture.start(session_id=1)
        time.sleep(0.1)
        stats = capture.get_recording_stats()
        capture.stop()

        assert stats.is_recording is True
        assert stats.duration_seconds > 0
        assert stats.sample_rate == 16000
        assert stats.total_frames > 0


@pytest.mark.unit
class TestPeakLevel:

    def test_silence(self):
        assert peak_level(b"\x00" * 512) == 0.0

    def test_empty(self):
        assert peak_level(b"") == 0.0

    def test_sine(self, sample_audio_chunk):
        level = peak_level(sample_audio_chunk)
        assert 0.9 < level <= 1.0

    def test_full_scale_negative(self):
        samples = np.array([0, -32768, 100], dtype=np.int16)
        assert peak_level(samples.tobytes()) == 1.0
