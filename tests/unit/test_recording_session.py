"""Unit tests for running transcript assembly."""

import pytest

from voicenotes.models.session import RecordingSession


@pytest.mark.unit
class TestRecordingSession:

    def test_chunks_joined_with_space(self):
        """Test chunk texts are joined with single spaces."""
        session = RecordingSession(session_id=1)
        session.append_chunk_text("merhaba")
        session.append_chunk_text("dünya")

        assert session.running_transcript == "merhaba dünya"

    def test_consecutive_duplicate_suppressed(self):
        """Test a repeated chunk text is appended once."""
        session = RecordingSession(session_id=1)

        assert session.append_chunk_text("hello") is True
        assert session.append_chunk_text("hello") is False
        assert session.running_transcript == "hello"

    def test_duplicate_allowed_after_different_text(self):
        """Test repeated text is kept when not consecutive."""
        session = RecordingSession(session_id=1)
        for text in ("hello", "world", "hello"):
            session.append_chunk_text(text)

        assert session.running_transcript == "hello world hello"

    def test_whitespace_and_empty_ignored(self):
        """Test blank chunk texts are ignored."""
        session = RecordingSession(session_id=1)

        assert session.append_chunk_text("   ") is False
        assert session.append_chunk_text("") is False
        session.append_chunk_text("  hi ")
        assert session.running_transcript == "hi"
        assert session.append_chunk_text("hi\n") is False
