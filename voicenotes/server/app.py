"""Transcription proxy: forwards one audio upload to the upstream service."""

import logging
from typing import Optional

from aiohttp import web

from ..config import VoiceNotesConfig
from ..models.api import (
    AUDIO_FIELD,
    REALTIME_PATH,
    FINAL_PATH,
    NO_AUDIO_MESSAGE,
    TRANSCRIPTION_FAILED_MESSAGE,
    TranscriptPayload,
    ErrorPayload,
)
from ..transcription.base import AbstractTranscriptionBackend
from ..transcription.openai_backend import OpenAITranscriptionBackend

logger = logging.getLogger(__name__)

BACKEND_KEY = web.AppKey("backend", AbstractTranscriptionBackend)


async def handle_transcribe(request: web.Request) -> web.Response:
    """Transcribe the ``audio`` form field.

    Every request is independent; nothing about earlier chunks is kept.
    """
    try:
        data = await request.post()
    except ValueError as e:
        logger.warning(f"{request.path}: unreadable form body: {e}")
        return web.json_response(ErrorPayload(error=NO_AUDIO_MESSAGE).model_dump(), status=400)

    audio = data.get(AUDIO_FIELD)

    if not isinstance(audio, web.FileField):
        logger.warning(f"{request.path}: request without '{AUDIO_FIELD}' file field")
        return web.json_response(ErrorPayload(error=NO_AUDIO_MESSAGE).model_dump(), status=400)

    payload = audio.file.read()
    backend = request.app[BACKEND_KEY]

    try:
        result = await backend.transcribe(payload, filename=audio.filename,
                                          content_type=audio.content_type)
    except Exception as e:
        logger.error(f"OpenAI API Error: {e}", exc_info=True)
        return web.json_response(ErrorPayload(error=TRANSCRIPTION_FAILED_MESSAGE).model_dump(), status=500)

    logger.info(f"{request.path}: transcribed {len(payload)} bytes in {result.processing_time:.2f}s")
    return web.json_response(TranscriptPayload(transcript=result.text).model_dump())


async def _cleanup_backend(app: web.Application) -> None:
    await app[BACKEND_KEY].cleanup()


def create_app(config: VoiceNotesConfig,
               backend: Optional[AbstractTranscriptionBackend] = None) -> web.Application:
    """Build the proxy application.

    Args:
        config: Application configuration
        backend: Upstream backend; defaults to OpenAI with the key from the environment
    """
    if backend is None:
        backend = OpenAITranscriptionBackend(
            api_key=config.get_openai_api_key(),
            base_url=config.get('openai.base_url'),
        )
    backend.initialize()

    app = web.Application(client_max_size=config.get('server.client_max_size'))
    app[BACKEND_KEY] = backend
    app.router.add_post(REALTIME_PATH, handle_transcribe)
    app.router.add_post(FINAL_PATH, handle_transcribe)
    app.on_cleanup.append(_cleanup_backend)
    return app


def run_server(config: VoiceNotesConfig) -> None:
    """Serve the proxy until interrupted."""
    host = config.get('server.host')
    port = config.get('server.port')
    logger.info(f"Starting transcription proxy on http://{host}:{port}")
    web.run_app(create_app(config), host=host, port=port)
