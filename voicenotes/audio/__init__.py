"""Audio capture and framing."""

from .capture import CaptureController, CaptureState
from .audio_pub import AudioPublisher, AUDIO_CHUNK_TOPIC
from .wav import pcm_to_wav, WAV_CONTENT_TYPE

__all__ = [
    'CaptureController',
    'CaptureState',
    'AudioPublisher',
    'AUDIO_CHUNK_TOPIC',
    'pcm_to_wav',
    'WAV_CONTENT_TYPE',
]
