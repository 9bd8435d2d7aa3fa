"""Tests for OpenAI-backed adapters."""

import asyncio
import json

import httpx
import pytest
from openai import APIConnectionError

from lazy_lifts.adapters.openai_nutrition_client import OpenAINutritionClient
from lazy_lifts.adapters.openai_transcription_client import (
    OpenAITranscriptionClient,
)
from lazy_lifts.domain.errors import EstimationError
from lazy_lifts.services.nutrition import NUTRITION_SCHEMA


class _FakeResponses:
    def __init__(self, output_text: str = "", error: Exception | None = None) -> None:
        self.output_text = output_text
        self.error = error
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        if self.error is not None:
            raise self.error
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeTranscriptions:
    def __init__(self) -> None:
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Transcription", (), {"text": "a bowl of soup"})()


class _FakeOpenAI:
    def __init__(self, responses: _FakeResponses | None = None) -> None:
        self.responses = responses or _FakeResponses()
        self.audio = type("Audio", (), {"transcriptions": _FakeTranscriptions()})()


def _extract(  # type: ignore[no-untyped-def]
    client: OpenAINutritionClient, image_data_url: str | None = None
):
    return asyncio.run(
        client.extract(
            model="gpt-4o",
            store=False,
            instructions="Be precise",
            prompt="Analyze",
            schema=NUTRITION_SCHEMA,
            image_data_url=image_data_url,
        )
    )


def test_openai_nutrition_client_parses_output() -> None:
    payload = {
        "description": "Soup",
        "calories": 200,
        "protein": 8,
        "carbs": 20,
        "fat": 9,
    }
    responses = _FakeResponses(output_text=json.dumps(payload))
    client = OpenAINutritionClient(client=_FakeOpenAI(responses))

    result = _extract(client, "data:image/jpeg;base64,ZmFrZQ==")

    assert result == payload
    request = responses.last_payload
    assert request["text"]["format"]["strict"] is True
    assert request["instructions"] == "Be precise"
    content = request["input"][0]["content"]
    assert content[1] == {
        "type": "input_image",
        "image_url": "data:image/jpeg;base64,ZmFrZQ==",
    }


def test_openai_nutrition_client_text_only_request() -> None:
    responses = _FakeResponses(output_text="{}")
    client = OpenAINutritionClient(client=_FakeOpenAI(responses))

    _extract(client)

    assert len(responses.last_payload["input"][0]["content"]) == 1


@pytest.mark.parametrize("output_text", ["", "not json", "[1, 2]"])
def test_openai_nutrition_client_rejects_bad_output(output_text: str) -> None:
    client = OpenAINutritionClient(
        client=_FakeOpenAI(_FakeResponses(output_text=output_text))
    )

    with pytest.raises(EstimationError):
        _extract(client)


def test_openai_nutrition_client_wraps_api_errors() -> None:
    error = APIConnectionError(request=httpx.Request("POST", "https://api.openai.com"))
    client = OpenAINutritionClient(client=_FakeOpenAI(_FakeResponses(error=error)))

    with pytest.raises(EstimationError):
        _extract(client)


def test_openai_transcription_client_returns_text() -> None:
    fake = _FakeOpenAI()
    client = OpenAITranscriptionClient(client=fake)

    text = asyncio.run(
        client.transcribe(model="whisper-1", audio_bytes=b"audio", filename="a.webm")
    )

    assert text == "a bowl of soup"
    assert fake.audio.transcriptions.last_payload["file"] == ("a.webm", b"audio")
