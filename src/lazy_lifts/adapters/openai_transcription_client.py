"""OpenAI audio transcription client."""

import logging
from dataclasses import dataclass

from openai import AsyncOpenAI, OpenAIError

from lazy_lifts.domain.errors import EstimationError
from lazy_lifts.services.transcription import TranscriptionClient

_logger = logging.getLogger(__name__)


@dataclass
class OpenAITranscriptionClient(TranscriptionClient):
    """Speech-to-text backed by the OpenAI audio API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAITranscriptionClient":
        """Create an OpenAI transcription client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def transcribe(
        self, *, model: str, audio_bytes: bytes, filename: str
    ) -> str:
        """Return the transcript text for an audio clip."""
        try:
            transcription = await self.client.audio.transcriptions.create(
                model=model, file=(filename, audio_bytes)
            )
        except OpenAIError as exc:
            _logger.exception("Transcription request failed", extra={"model": model})
            raise EstimationError("Failed to transcribe audio") from exc
        return transcription.text
