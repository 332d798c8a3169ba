"""Client for the transcription proxy endpoints."""

import asyncio
import logging
import aiohttp
from pydantic import ValidationError

from ..audio.wav import WAV_CONTENT_TYPE
from ..exceptions import InvalidInputError, UpstreamFailureError
from ..models.api import AUDIO_FIELD, REALTIME_PATH, FINAL_PATH, TranscriptPayload

logger = logging.getLogger(__name__)


class TranscriptionClient:
    """Posts audio to the transcription proxy and returns the transcript."""

    def __init__(self, server_url: str):
        """Initialize client.

        Args:
            server_url: Base URL of the proxy (e.g. http://127.0.0.1:8080)
        """
        self.server_url = server_url.rstrip('/')
        self.realtime_url = f"{self.server_url}{REALTIME_PATH}"
        self.final_url = f"{self.server_url}{FINAL_PATH}"

    async def transcribe_chunk(self, audio: bytes, filename: str = "chunk.wav",
                               content_type: str = WAV_CONTENT_TYPE) -> str:
        """Transcribe an incremental chunk for the realtime preview."""
        return await self._post(self.realtime_url, audio, filename, content_type)

    async def transcribe_session(self, audio: bytes, filename: str = "recording.wav",
                                 content_type: str = WAV_CONTENT_TYPE) -> str:
        """Transcribe the complete audio of a finished recording."""
        return await self._post(self.final_url, audio, filename, content_type)

    async def _post(self, url: str, audio: bytes, filename: str, content_type: str) -> str:
        form = aiohttp.FormData()
        form.add_field(AUDIO_FIELD, audio, filename=filename, content_type=content_type)

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(url, data=form) as response:
                    if response.status == 400:
                        raise InvalidInputError(f"Transcription rejected: {await response.text()}")
                    if response.status != 200:
                        raise UpstreamFailureError(
                            f"Transcription failed: {response.status} - {await response.text()}")
                    body = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise UpstreamFailureError(f"Could not reach transcription proxy at {url}: {e}") from e

        try:
            return TranscriptPayload.model_validate(body).transcript
        except ValidationError as e:
            raise UpstreamFailureError(f"Malformed transcription response: {e}") from e
