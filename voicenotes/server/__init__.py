"""HTTP transcription proxy."""

from .app import create_app, run_server, handle_transcribe, BACKEND_KEY

__all__ = ["create_app", "run_server", "handle_transcribe", "BACKEND_KEY"]
