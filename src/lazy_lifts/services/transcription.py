"""Speech-to-text for voice meal logging."""

import logging
from dataclasses import dataclass
from typing import Protocol

from lazy_lifts.domain.errors import EstimationError
from lazy_lifts.domain.nutrition import TranscriptionResult

_logger = logging.getLogger(__name__)


class TranscriptionClient(Protocol):
    """Interface for a speech-to-text provider."""

    async def transcribe(
        self, *, model: str, audio_bytes: bytes, filename: str
    ) -> str:
        """Return the transcript of an audio clip."""


@dataclass
class TranscriptionService:
    """Wraps a provider behind the {text, error} result contract."""

    client: TranscriptionClient
    model: str

    async def transcribe(
        self, audio_bytes: bytes, filename: str
    ) -> TranscriptionResult:
        """Transcribe audio; failures come back as a result with an error."""
        if not audio_bytes:
            return TranscriptionResult(text="", error="No audio recorded")
        try:
            text = await self.client.transcribe(
                model=self.model, audio_bytes=audio_bytes, filename=filename
            )
        except EstimationError as exc:
            _logger.exception("Transcription failed", extra={"audio_file": filename})
            return TranscriptionResult(text="", error=str(exc))
        text = text.strip()
        if not text:
            return TranscriptionResult(text="", error="No speech detected")
        return TranscriptionResult(text=text)
