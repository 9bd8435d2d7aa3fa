"""Domain models for meal logging."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class MealEntry:
    """A logged meal with its macros."""

    id: str
    timestamp: datetime
    description: str
    calories: float
    protein: float
    carbs: float
    fat: float


@dataclass(frozen=True)
class MealDraft:
    """Input for creating or editing a meal.

    ``id`` selects the entry to edit; ``timestamp`` left as None keeps the
    original time on edit and uses the current time on create.
    """

    description: str
    calories: float
    protein: float
    carbs: float
    fat: float
    id: str | None = None
    timestamp: datetime | None = None


@dataclass(frozen=True)
class DailyTotal:
    """Meals of one calendar day with rounded macro totals."""

    date: date
    entries: list[MealEntry]
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fat: float


@dataclass(frozen=True)
class YearGroup:
    """Daily totals of one calendar year, most recent day first."""

    year: int
    days: list[DailyTotal]


@dataclass(frozen=True)
class WeeklyDay:
    """Trend point for a single day of the trailing week."""

    date: date
    calories: float
    protein: float
    carbs: float
    fat: float
    is_today: bool
