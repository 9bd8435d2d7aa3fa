"""Models for nutrition estimation and transcription results."""

from dataclasses import dataclass

from pydantic import BaseModel, Field


class NutritionEstimate(BaseModel):
    """Structured output of the estimation model."""

    description: str | None = None
    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)


@dataclass(frozen=True)
class TranscriptionResult:
    """Transcript text, or the reason transcription failed."""

    text: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.text)
