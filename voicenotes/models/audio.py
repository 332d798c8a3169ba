"""Audio-related data models."""

from dataclasses import dataclass


@dataclass
class AudioStats:
    """Audio recording statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    chunk_size: int
    total_frames: int
    chunks_emitted: int
    peak_level: float = 0.0  # 0.0 to 1.0, of the most recent frame
