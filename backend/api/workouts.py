from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import Field, field_validator
from sqlalchemy.orm import Session

from api.common import DeleteResponse, EntryCreate, EntryResponse, require_text
from auth.utils import SessionInfo, require_session, resolve_user
from db.database import get_db
from db.models import Workout
from services.entries import create_entry, delete_owned_entry, list_entries
from utils.errors import persistence_guard

router = APIRouter(prefix="/workouts", tags=["workouts"])


# --- Pydantic Schemas ---

class WorkoutCreate(EntryCreate):
    title: str
    duration: float = Field(ge=0, allow_inf_nan=False)  # minutes
    notes: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        return require_text(value)

    @field_validator("notes")
    @classmethod
    def _blank_notes_to_none(cls, value: Optional[str]) -> Optional[str]:
        return (value or "").strip() or None


class WorkoutResponse(EntryResponse):
    title: str
    duration: float
    notes: Optional[str] = None


# --- Routes ---

@router.get("", response_model=list[WorkoutResponse])
def list_workouts(session: SessionInfo = Depends(require_session), db: Session = Depends(get_db)):
    with persistence_guard(db, "Failed to fetch workouts"):
        user = resolve_user(db, session.email)
        return list_entries(db, Workout, user)


@router.post("", response_model=WorkoutResponse, status_code=status.HTTP_201_CREATED)
def create_workout(
    data: WorkoutCreate,
    session: SessionInfo = Depends(require_session),
    db: Session = Depends(get_db),
):
    with persistence_guard(db, "Failed to create workout"):
        user = resolve_user(db, session.email)
        return create_entry(db, Workout, user, data.model_dump())


@router.delete("/{workout_id}", response_model=DeleteResponse)
def delete_workout(workout_id: int, session: SessionInfo = Depends(require_session), db: Session = Depends(get_db)):
    with persistence_guard(db, "Failed to delete workout"):
        delete_owned_entry(db, Workout, workout_id, session.email)
    return DeleteResponse()
