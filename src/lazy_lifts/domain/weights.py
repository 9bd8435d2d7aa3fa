"""Domain models for body-weight tracking."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class WeightEntry:
    """A body-weight measurement."""

    id: str
    weight: float
    date: datetime
