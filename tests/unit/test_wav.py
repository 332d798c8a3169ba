import io
import wave

import pytest

from voicenotes.audio.wav import pcm_to_wav


@pytest.mark.unit
def test_pcm_wrapped_with_header(sample_audio_chunk):
    """Test raw PCM is wrapped in a valid WAV container."""
    data = pcm_to_wav(sample_audio_chunk, sample_rate=16000, channels=1)

    assert data[:4] == b"RIFF"
    assert data[8:12] == b"WAVE"
    with wave.open(io.BytesIO(data), 'rb') as wf:
        assert wf.getframerate() == 16000
        assert wf.getnchannels() == 1
        assert wf.getsampwidth() == 2
        assert wf.readframes(wf.getnframes()) == sample_audio_chunk


@pytest.mark.unit
def test_stereo_frame_count():
    """Test frame count for two-channel audio."""
    data = pcm_to_wav(b"\x00" * 400, sample_rate=44100, channels=2)

    with wave.open(io.BytesIO(data), 'rb') as wf:
        assert wf.getnframes() == 100
        assert wf.getframerate() == 44100
