"""OpenAI Responses API client for nutrition estimation."""

import json
import logging
from dataclasses import dataclass

from openai import AsyncOpenAI, OpenAIError

from lazy_lifts.domain.errors import EstimationError
from lazy_lifts.services.nutrition import NutritionClient

_logger = logging.getLogger(__name__)


@dataclass
class OpenAINutritionClient(NutritionClient):
    """Nutrition client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAINutritionClient":
        """Create an OpenAI nutrition client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        store: bool,
        instructions: str | None,
        prompt: str,
        schema: dict[str, object],
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        """Call OpenAI Responses API with structured outputs."""
        content: list[dict[str, object]] = [{"type": "input_text", "text": prompt}]
        if image_data_url:
            content.append({"type": "input_image", "image_url": image_data_url})
        request_payload: dict[str, object] = {
            "model": model,
            "input": [{"role": "user", "content": content}],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "nutrition_estimate",
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if instructions:
            request_payload["instructions"] = instructions

        try:
            response = await self.client.responses.create(**request_payload)
        except OpenAIError as exc:
            _logger.exception("OpenAI request failed", extra={"model": model})
            raise EstimationError("Failed to analyze food") from exc
        output_text = response.output_text
        if not output_text:
            raise EstimationError("OpenAI returned an empty response")
        try:
            payload = json.loads(output_text)
        except json.JSONDecodeError as exc:
            raise EstimationError("OpenAI returned malformed JSON") from exc
        if not isinstance(payload, dict):
            raise EstimationError("OpenAI returned a non-object response")
        return payload
