"""Nutrition estimation backed by an LLM."""

import base64
import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError as SchemaError

from lazy_lifts.domain.errors import EstimationError
from lazy_lifts.domain.nutrition import NutritionEstimate

_logger = logging.getLogger(__name__)

NUTRITION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "description": {"anyOf": [{"type": "string"}, {"type": "null"}]},
        "calories": {"type": "number", "minimum": 0},
        "protein": {"type": "number", "minimum": 0},
        "carbs": {"type": "number", "minimum": 0},
        "fat": {"type": "number", "minimum": 0},
    },
    "required": ["description", "calories", "protein", "carbs", "fat"],
    "additionalProperties": False,
}

TEXT_INSTRUCTIONS = (
    "You are a nutrition expert that analyzes food descriptions and provides "
    "calorie and macronutrient estimates. Always respond with valid JSON."
)

PHOTO_PROMPT = (
    "Analyze this food image and provide nutritional information: a brief "
    "description of the food items visible, estimated total calories, and "
    "grams of protein, carbohydrates and fat. If you cannot identify food in "
    "the image, return calories, protein, carbs, and fat as 0 and description "
    'as "No food detected in image". Be as accurate as possible with portion '
    "sizes and nutritional estimates."
)


class NutritionClient(Protocol):
    """Interface for LLM structured extraction."""

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
        """Return structured JSON produced by the model."""


@dataclass
class NutritionService:
    """Service that prepares estimation prompts and validates results."""

    client: NutritionClient
    text_model: str
    vision_model: str
    store: bool = False

    async def estimate_text(self, description: str) -> NutritionEstimate:
        """Estimate calories and macros for a free-text meal description."""
        _logger.info("Analyzing food description", extra={"chars": len(description)})
        prompt = (
            "Analyze the following food description and provide estimated "
            "calories and macronutrients.\n"
            f'Description: "{description}"\n'
            "Provide total calories and grams of protein, carbohydrates and fat. "
            "Set description to a short name for the meal."
        )
        raw = await self.client.extract(
            model=self.text_model,
            store=self.store,
            instructions=TEXT_INSTRUCTIONS,
            prompt=prompt,
            schema=NUTRITION_SCHEMA,
        )
        return _validate(raw)

    async def estimate_image(self, image_bytes: bytes) -> NutritionEstimate:
        """Estimate calories and macros from a food photo."""
        _logger.info("Analyzing food photo", extra={"bytes": len(image_bytes)})
        raw = await self.client.extract(
            model=self.vision_model,
            store=self.store,
            instructions=None,
            prompt=PHOTO_PROMPT,
            schema=NUTRITION_SCHEMA,
            image_data_url=_to_data_url(image_bytes),
        )
        return _validate(raw)


def _validate(raw: dict[str, object]) -> NutritionEstimate:
    try:
        return NutritionEstimate.model_validate(raw)
    except SchemaError as exc:
        raise EstimationError("Malformed nutrition estimate") from exc


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
