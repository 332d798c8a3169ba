"""Tests for OpenAITranscriptionBackend against a fake OpenAI endpoint."""

import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from voicenotes.exceptions import UpstreamFailureError
from voicenotes.transcription.openai_backend import (
    OpenAITranscriptionBackend,
    TRANSCRIPTION_MODEL,
    TRANSCRIPTION_LANGUAGE,
)


class FakeOpenAI:
    """Records multipart requests to /v1/audio/transcriptions."""

    def __init__(self, status: int = 200, body=None):
        self.status = status
        self.body = body if body is not None else {"text": "merhaba"}
        self.requests = []

    async def handle(self, request: web.Request) -> web.Response:
        form = await request.post()
        upload = form["file"]
        self.requests.append({
            "authorization": request.headers.get("Authorization"),
            "model": form["model"],
            "language": form["language"],
            "filename": upload.filename,
            "content_type": upload.content_type,
            "audio": upload.file.read(),
        })
        return web.json_response(self.body, status=self.status)

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/v1/audio/transcriptions", self.handle)
        return app


def transcribe(fake: FakeOpenAI, api_key="sk-test", **kwargs):
    async def run():
        async with TestServer(fake.app()) as server:
            backend = OpenAITranscriptionBackend(api_key, base_url=str(server.make_url("/v1")))
            return await backend.transcribe(b"audio-bytes", **kwargs)
    return asyncio.run(run())


@pytest.mark.unit
class TestOpenAITranscriptionBackend:

    def test_fixed_model_and_language(self):
        """Test requests carry the configured model and language."""
        fake = FakeOpenAI()
        result = transcribe(fake, filename="chunk.wav", content_type="audio/wav")

        assert result.text == "merhaba"
        assert result.language == "tr"
        request = fake.requests[0]
        assert request["model"] == TRANSCRIPTION_MODEL == "whisper-1"
        assert request["language"] == TRANSCRIPTION_LANGUAGE == "tr"
        assert request["authorization"] == "Bearer sk-test"
        assert request["filename"] == "chunk.wav"
        assert request["content_type"] == "audio/wav"
        assert request["audio"] == b"audio-bytes"

    def test_upstream_error_status(self):
        """Test a non-200 upstream status raises UpstreamFailureError."""
        fake = FakeOpenAI(status=401, body={"error": {"message": "Incorrect API key"}})

        with pytest.raises(UpstreamFailureError, match="401"):
            transcribe(fake)

    def test_missing_key_sends_no_auth_and_fails_upstream(self):
        """Test a missing API key is reported as an upstream failure."""
        fake = FakeOpenAI(status=401, body={"error": {"message": "Missing bearer"}})

        with pytest.raises(UpstreamFailureError):
            transcribe(fake, api_key=None)

        assert fake.requests[0]["authorization"] is None

    def test_unexpected_payload(self):
        """Test a response without text is treated as a failure."""
        fake = FakeOpenAI(body={"transcript": "wrong shape"})

        with pytest.raises(UpstreamFailureError, match="unexpected payload"):
            transcribe(fake)

    def test_initialize_reports_missing_key(self):
        """Test initialize() returns False without an API key."""
        assert OpenAITranscriptionBackend("sk-test").initialize() is True
        assert OpenAITranscriptionBackend(None).initialize() is False

    def test_url_built_from_base(self):
        backend = OpenAITranscriptionBackend("k", base_url="https://example.test/v1/")
        assert backend.url == "https://example.test/v1/audio/transcriptions"
