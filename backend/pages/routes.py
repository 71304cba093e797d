import logging
import math
from pathlib import Path

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlalchemy.orm import Session

from api.food import FoodCreate
from api.workouts import WorkoutCreate
from auth.utils import SessionInfo, resolve_user, session_from_request
from config import settings
from db.database import get_db
from db.models import Food, User, Workout
from services.dashboard import build_summary, summary_for_user
from services.entries import create_entry, delete_owned_entry, list_entries
from services.views import format_amount, group_foods_by_date, recent_workouts
from utils.charts import bar_chart, line_chart
from utils.datetime_utils import today_utc
from utils.errors import AppError, persistence_guard

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"], include_in_schema=False)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
templates.env.filters["amount"] = format_amount

NAV_LINKS = [
    {"href": "/", "label": "Home"},
    {"href": "/workouts", "label": "Workouts"},
    {"href": "/food", "label": "Food"},
]


def _render(request: Request, name: str, session: SessionInfo | None, **context):
    context.update(
        {
            "app_name": settings.APP_NAME,
            "nav_links": NAV_LINKS,
            "active_path": request.url.path,
            "session": session,
        }
    )
    return templates.TemplateResponse(request, name, context)


def _to_signin() -> RedirectResponse:
    return RedirectResponse(settings.SIGNIN_PATH, status_code=status.HTTP_302_FOUND)


def _back_to(path: str) -> RedirectResponse:
    return RedirectResponse(path, status_code=status.HTTP_303_SEE_OTHER)


def _page_user(request: Request, db: Session) -> tuple[SessionInfo, User] | None:
    session = session_from_request(request)
    if session is None:
        return None
    try:
        return session, resolve_user(db, session.email)
    except AppError:
        return None


def _form_number(value: str) -> float:
    try:
        number = float((value or "").strip() or 0)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def _load_entries(db: Session, model, user: User, failure_message: str) -> list:
    try:
        with persistence_guard(db, failure_message):
            return list_entries(db, model, user)
    except AppError as e:
        logger.warning(f"{model.__name__} list unavailable for user {user.id}: {e}")
        return []


# --- Home / dashboard ---

@router.get("/")
def home(request: Request, db: Session = Depends(get_db)):
    found = _page_user(request, db)
    days = settings.DASHBOARD_WINDOW_DAYS
    if found is None:
        summary = build_summary([], [], days=days)
    else:
        summary = summary_for_user(db, found[1], days=days)
    return _render(
        request,
        "dashboard.html",
        found[0] if found else session_from_request(request),
        summary=summary,
        days=days,
        calories_chart=bar_chart(summary.calories, "calories"),
        minutes_chart=line_chart(summary.workouts, "minutes"),
    )


# --- Food ---

@router.get("/food")
def food_page(request: Request, db: Session = Depends(get_db)):
    found = _page_user(request, db)
    if found is None:
        return _to_signin()
    session, user = found
    foods = _load_entries(db, Food, user, "Failed to fetch foods")
    return _render(
        request,
        "food.html",
        session,
        food_days=group_foods_by_date(foods),
        today=today_utc().isoformat(),
    )


@router.post("/food")
def food_page_create(
    request: Request,
    date: str = Form(""),
    name: str = Form(""),
    calories: str = Form(""),
    db: Session = Depends(get_db),
):
    found = _page_user(request, db)
    if found is None:
        return _to_signin()
    try:
        data = FoodCreate(
            date=date.strip() or today_utc().isoformat(),
            name=name.strip() or "Food",
            calories=_form_number(calories),
        )
        with persistence_guard(db, "Failed to create food entry"):
            create_entry(db, Food, found[1], data.model_dump())
    except (ValidationError, AppError) as e:
        logger.warning(f"Food entry not created: {e}")
    return _back_to("/food")


@router.post("/food/{food_id}/delete")
def food_page_delete(food_id: int, request: Request, db: Session = Depends(get_db)):
    found = _page_user(request, db)
    if found is None:
        return _to_signin()
    try:
        with persistence_guard(db, "Failed to delete food entry"):
            delete_owned_entry(db, Food, food_id, found[0].email)
    except AppError as e:
        logger.warning(f"Food entry {food_id} not deleted: {e}")
    return _back_to("/food")


# --- Workouts ---

@router.get("/workouts")
def workouts_page(request: Request, db: Session = Depends(get_db)):
    found = _page_user(request, db)
    if found is None:
        return _to_signin()
    session, user = found
    workouts = _load_entries(db, Workout, user, "Failed to fetch workouts")
    return _render(
        request,
        "workouts.html",
        session,
        workouts=recent_workouts(workouts),
        today=today_utc().isoformat(),
    )


@router.post("/workouts")
def workouts_page_create(
    request: Request,
    date: str = Form(""),
    title: str = Form(""),
    duration: str = Form(""),
    notes: str = Form(""),
    db: Session = Depends(get_db),
):
    found = _page_user(request, db)
    if found is None:
        return _to_signin()
    try:
        data = WorkoutCreate(
            date=date.strip() or today_utc().isoformat(),
            title=title.strip() or "Workout",
            duration=_form_number(duration),
            notes=notes,
        )
        with persistence_guard(db, "Failed to create workout"):
            create_entry(db, Workout, found[1], data.model_dump())
    except (ValidationError, AppError) as e:
        logger.warning(f"Workout not created: {e}")
    return _back_to("/workouts")


@router.post("/workouts/{workout_id}/delete")
def workouts_page_delete(workout_id: int, request: Request, db: Session = Depends(get_db)):
    found = _page_user(request, db)
    if found is None:
        return _to_signin()
    try:
        with persistence_guard(db, "Failed to delete workout"):
            delete_owned_entry(db, Workout, workout_id, found[0].email)
    except AppError as e:
        logger.warning(f"Workout {workout_id} not deleted: {e}")
    return _back_to("/workouts")


# --- Sign-in ---

@router.get("/auth/signin")
def signin_page(request: Request, error: str | None = None):
    return _render(
        request,
        "signin.html",
        session_from_request(request),
        google_enabled=settings.google_oauth_enabled,
        signin_url="/api/auth/signin/google?callbackUrl=/",
        error=error,
    )
