from fastapi import APIRouter, Depends, status
from pydantic import Field, field_validator
from sqlalchemy.orm import Session

from api.common import DeleteResponse, EntryCreate, EntryResponse, require_text
from auth.utils import SessionInfo, require_session, resolve_user
from db.database import get_db
from db.models import Food
from services.entries import create_entry, delete_owned_entry, list_entries
from utils.errors import persistence_guard

router = APIRouter(prefix="/food", tags=["food"])


# --- Pydantic Schemas ---

class FoodCreate(EntryCreate):
    name: str
    calories: float = Field(ge=0, allow_inf_nan=False)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        return require_text(value)


class FoodResponse(EntryResponse):
    name: str
    calories: float


# --- Routes ---

@router.get("", response_model=list[FoodResponse])
def list_foods(session: SessionInfo = Depends(require_session), db: Session = Depends(get_db)):
    with persistence_guard(db, "Failed to fetch foods"):
        user = resolve_user(db, session.email)
        return list_entries(db, Food, user)


@router.post("", response_model=FoodResponse, status_code=status.HTTP_201_CREATED)
def create_food(
    data: FoodCreate,
    session: SessionInfo = Depends(require_session),
    db: Session = Depends(get_db),
):
    with persistence_guard(db, "Failed to create food entry"):
        user = resolve_user(db, session.email)
        return create_entry(db, Food, user, data.model_dump())


@router.delete("/{food_id}", response_model=DeleteResponse)
def delete_food(food_id: int, session: SessionInfo = Depends(require_session), db: Session = Depends(get_db)):
    with persistence_guard(db, "Failed to delete food entry"):
        delete_owned_entry(db, Food, food_id, session.email)
    return DeleteResponse()
