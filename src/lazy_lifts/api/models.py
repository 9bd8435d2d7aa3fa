"""Pydantic models for HTTP request payloads."""

from datetime import datetime

from pydantic import BaseModel, Field


class SelectSessionRequest(BaseModel):
    """Selection of a program cell to view."""

    week: int
    day: str


class MealRequest(BaseModel):
    """Manual meal entry, or an edit when id matches an existing meal."""

    description: str
    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    id: str | None = None
    timestamp: datetime | None = None


class EstimateRequest(BaseModel):
    """Free-text meal description for estimation."""

    description: str
    meal_id: str | None = None


class WeightRequest(BaseModel):
    """Body-weight measurement."""

    weight: float
