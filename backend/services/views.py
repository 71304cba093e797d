"""Shaping of logged entries for the food and workout pages."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from utils.datetime_utils import start_of_day_utc, utcnow

RECENT_WORKOUT_DAYS = 7


@dataclass
class FoodDay:
    date: str
    items: list[Any]

    @property
    def total_calories(self) -> float:
        return sum(item.calories or 0 for item in self.items)


def group_foods_by_date(foods: list[Any]) -> list[FoodDay]:
    """Group by exact date string, newest day first, newest entry first within a day."""
    grouped: dict[str, list[Any]] = {}
    for food in foods:
        grouped.setdefault(food.date, []).append(food)
    return [
        FoodDay(date=d, items=sorted(grouped[d], key=lambda f: f.id, reverse=True))
        for d in sorted(grouped, reverse=True)
    ]


def recent_workouts(workouts: list[Any], now: datetime | None = None, days: int = RECENT_WORKOUT_DAYS) -> list[Any]:
    """Workouts whose day (taken as UTC midnight) is at most ``days`` old, newest first."""
    cutoff = (now or utcnow()) - timedelta(days=days)
    recent = []
    for workout in workouts:
        started = start_of_day_utc(workout.date)
        if started is not None and started >= cutoff:
            recent.append((started, workout))
    recent.sort(key=lambda pair: pair[0], reverse=True)
    return [w for _started, w in recent]


def format_amount(value: float | None) -> str:
    """Render 95.0 as ``95`` and 12.5 as ``12.5``."""
    number = float(value or 0)
    return str(int(number)) if number.is_integer() else f"{number:g}"
