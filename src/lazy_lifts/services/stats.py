"""Day, year and trailing-week rollups of meal entries."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo

from lazy_lifts.domain.meals import DailyTotal, MealEntry, WeeklyDay, YearGroup
from lazy_lifts.services.meals import MealRepository

TREND_DAYS = 7


@dataclass
class StatsService:
    """Service for computing meal rollups in the owner's timezone."""

    repository: MealRepository
    timezone_name: str = "UTC"

    def get_grouped(self, owner_id: str) -> list[YearGroup]:
        """Return all meals grouped by year and day."""
        return group_by_day_and_year(
            self.repository.list_meals(owner_id), self.timezone_name
        )

    def get_week(
        self, owner_id: str, reference_date: date | None = None
    ) -> list[WeeklyDay]:
        """Return the trailing 7 days ending at reference_date (default today)."""
        today = reference_date or datetime.now(tz=ZoneInfo(self.timezone_name)).date()
        return weekly_totals(
            self.repository.list_meals(owner_id), today, self.timezone_name
        )


def group_by_day_and_year(
    entries: Iterable[MealEntry], timezone_name: str = "UTC"
) -> list[YearGroup]:
    """Group meals by local calendar year and day, most recent first."""
    tz = ZoneInfo(timezone_name)
    by_day: dict[date, list[MealEntry]] = {}
    for entry in entries:
        by_day.setdefault(_local_time(entry.timestamp, tz).date(), []).append(entry)

    by_year: dict[int, list[DailyTotal]] = {}
    for day in sorted(by_day, reverse=True):
        by_year.setdefault(day.year, []).append(_daily_total(day, by_day[day], tz))
    return [
        YearGroup(year=year, days=by_year[year])
        for year in sorted(by_year, reverse=True)
    ]


def weekly_totals(
    entries: Iterable[MealEntry], reference_date: date, timezone_name: str = "UTC"
) -> list[WeeklyDay]:
    """Return exactly 7 daily totals ending at reference_date, oldest first."""
    tz = ZoneInfo(timezone_name)
    by_day: dict[date, list[MealEntry]] = {}
    for entry in entries:
        by_day.setdefault(_local_time(entry.timestamp, tz).date(), []).append(entry)

    week = []
    for offset in range(TREND_DAYS - 1, -1, -1):
        day = reference_date - timedelta(days=offset)
        meals = by_day.get(day, [])
        week.append(
            WeeklyDay(
                date=day,
                calories=_rounded_sum(meal.calories for meal in meals),
                protein=_rounded_sum(meal.protein for meal in meals),
                carbs=_rounded_sum(meal.carbs for meal in meals),
                fat=_rounded_sum(meal.fat for meal in meals),
                is_today=day == reference_date,
            )
        )
    return week


def _daily_total(day: date, meals: list[MealEntry], tz: tzinfo) -> DailyTotal:
    ordered = sorted(
        meals,
        key=lambda meal: (_local_time(meal.timestamp, tz), meal.id),
        reverse=True,
    )
    return DailyTotal(
        date=day,
        entries=ordered,
        total_calories=_rounded_sum(meal.calories for meal in ordered),
        total_protein=_rounded_sum(meal.protein for meal in ordered),
        total_carbs=_rounded_sum(meal.carbs for meal in ordered),
        total_fat=_rounded_sum(meal.fat for meal in ordered),
    )


def _rounded_sum(values: Iterable[float]) -> float:
    """Sum raw values, then round the total to one decimal."""
    return round(sum(values, 0.0), 1)


def _local_time(timestamp: datetime, tz: tzinfo) -> datetime:
    """Convert to wall-clock time; naive values already are."""
    if timestamp.tzinfo is None:
        return timestamp
    return timestamp.astimezone(tz).replace(tzinfo=None)
