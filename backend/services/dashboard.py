"""Last-N-days summary of calories eaten and workout minutes."""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from db.models import Food, User, Workout
from utils.datetime_utils import last_n_dates


@dataclass
class DashboardSummary:
    dates: list[str]
    calories: list[dict[str, Any]] = field(default_factory=list)
    workouts: list[dict[str, Any]] = field(default_factory=list)

    @property
    def total_calories(self) -> float:
        return sum(point["calories"] for point in self.calories)

    @property
    def total_minutes(self) -> float:
        return sum(point["minutes"] for point in self.workouts)


def _amount(value: Any) -> float:
    try:
        amount = float(value or 0)
    except (TypeError, ValueError):
        return 0.0
    return amount if amount == amount else 0.0  # NaN


def _field(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def daily_totals(records: Iterable[Any], dates: list[str], amount_field: str) -> dict[str, float]:
    """Sum ``amount_field`` per day for the given days; days without records stay at 0."""
    totals = {d: 0.0 for d in dates}
    for record in records:
        day = _field(record, "date")
        if day in totals:
            totals[day] += _amount(_field(record, amount_field))
    return totals


def build_summary(
    foods: Iterable[Any],
    workouts: Iterable[Any],
    *,
    days: int = 7,
    now: datetime | None = None,
) -> DashboardSummary:
    dates = last_n_dates(days, now)
    calories = daily_totals(foods, dates, "calories")
    minutes = daily_totals(workouts, dates, "duration")
    return DashboardSummary(
        dates=dates,
        calories=[{"date": d, "calories": calories[d]} for d in dates],
        workouts=[{"date": d, "minutes": minutes[d]} for d in dates],
    )


def summary_for_user(db: Session, user: User, *, days: int = 7, now: datetime | None = None) -> DashboardSummary:
    dates = last_n_dates(days, now)
    foods = db.query(Food).filter(Food.user_id == user.id, Food.date >= dates[0], Food.date <= dates[-1]).all()
    workouts = (
        db.query(Workout)
        .filter(Workout.user_id == user.id, Workout.date >= dates[0], Workout.date <= dates[-1])
        .all()
    )
    return build_summary(foods, workouts, days=days, now=now)
