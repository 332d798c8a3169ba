"""OpenAI Whisper transcription backend."""

import time
import asyncio
import logging
import aiohttp
from datetime import datetime
from typing import Optional

from .base import AbstractTranscriptionBackend
from ..exceptions import UpstreamFailureError
from ..models.transcription import TranscriptionResult

logger = logging.getLogger(__name__)

TRANSCRIPTION_MODEL = "whisper-1"
TRANSCRIPTION_LANGUAGE = "tr"
DEFAULT_BASE_URL = "https://api.openai.com/v1"


class OpenAITranscriptionBackend(AbstractTranscriptionBackend):
    """Sends audio to OpenAI's /audio/transcriptions endpoint."""

    def __init__(self, api_key: Optional[str], base_url: str = DEFAULT_BASE_URL):
        """Initialize OpenAI backend.

        Args:
            api_key: OpenAI API key; requests are sent unauthenticated (and
                     rejected upstream) when missing
            base_url: API base URL
        """
        super().__init__(TRANSCRIPTION_LANGUAGE)
        self.api_key = api_key
        self.model = TRANSCRIPTION_MODEL
        self.url = f"{base_url.rstrip('/')}/audio/transcriptions"
        self.service_name = "OpenAI Whisper"

        logger.info(f"OpenAITranscriptionBackend initialized with model: {self.model}")

    def initialize(self) -> bool:
        if not self.api_key:
            logger.warning("No OpenAI API key configured; upstream will reject transcription requests")
            return False
        return True

    async def transcribe(self, audio: bytes, filename: str = "blob",
                         content_type: Optional[str] = None) -> TranscriptionResult:
        start_time = time.time()

        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        form = aiohttp.FormData()
        form.add_field("file", audio,
                       filename=filename or "blob",
                       content_type=content_type or "application/octet-stream")
        form.add_field("model", self.model)
        form.add_field("language", self.language)

        logger.debug(f"Sending {len(audio)} bytes ({content_type}, {filename}) to {self.url}")
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self.url, headers=headers, data=form) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise UpstreamFailureError(f"OpenAI API error: {response.status} - {error_text}")

                    payload = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise UpstreamFailureError(f"OpenAI API request failed: {e}") from e

        if not isinstance(payload, dict) or not isinstance(payload.get("text"), str):
            raise UpstreamFailureError(f"OpenAI API returned an unexpected payload: {payload!r}")

        processing_time = time.time() - start_time
        logger.debug(f"Transcribed {len(audio)} bytes in {processing_time:.3f}s")
        return TranscriptionResult(
            text=payload["text"],
            processing_time=processing_time,
            timestamp=datetime.now(),
            service=self.service_name,
            language=self.language,
        )
