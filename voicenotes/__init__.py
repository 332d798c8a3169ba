"""Voice Notes - microphone capture, proxied transcription and in-memory notes."""

__version__ = "0.1.0"
