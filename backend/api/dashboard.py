from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth.utils import SessionInfo, require_session, resolve_user
from config import settings
from db.database import get_db
from services.dashboard import summary_for_user
from utils.errors import persistence_guard

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class CaloriesPoint(BaseModel):
    date: str
    calories: float


class MinutesPoint(BaseModel):
    date: str
    minutes: float


class DashboardResponse(BaseModel):
    dates: list[str]
    calories: list[CaloriesPoint]
    workouts: list[MinutesPoint]
    total_calories: float = Field(serialization_alias="totalCalories")
    total_minutes: float = Field(serialization_alias="totalMinutes")


@router.get("", response_model=DashboardResponse)
def get_dashboard(session: SessionInfo = Depends(require_session), db: Session = Depends(get_db)):
    with persistence_guard(db, "Failed to load dashboard"):
        user = resolve_user(db, session.email)
        summary = summary_for_user(db, user, days=settings.DASHBOARD_WINDOW_DAYS)
    return DashboardResponse(
        dates=summary.dates,
        calories=summary.calories,
        workouts=summary.workouts,
        total_calories=summary.total_calories,
        total_minutes=summary.total_minutes,
    )
