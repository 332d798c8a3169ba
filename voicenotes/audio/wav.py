"""WAV framing for raw PCM captured from the microphone."""

import io
import wave

WAV_CONTENT_TYPE = "audio/wav"


def pcm_to_wav(pcm_data: bytes, sample_rate: int = 16000, channels: int = 1,
               sample_width: int = 2) -> bytes:
    """Wrap raw PCM bytes in a WAV container.

    Args:
        pcm_data: Interleaved PCM samples
        sample_rate: Sample rate in Hz
        channels: Number of channels
        sample_width: Bytes per sample (2 for 16-bit)

    Returns:
        WAV file contents
    """
    buffer = io.BytesIO()
    with wave.open(buffer, 'wb') as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm_data)
    return buffer.getvalue()
