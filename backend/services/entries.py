"""Food and workout persistence shared by the REST routers and the pages."""
from __future__ import annotations

from typing import Any, TypeVar

from sqlalchemy.orm import Session, joinedload

from auth.utils import normalize_email
from db.models import Food, User, Workout
from utils.errors import Forbidden, NotFound

Entry = TypeVar("Entry", Food, Workout)

NOT_FOUND_MESSAGES = {
    Food: "Food entry not found",
    Workout: "Workout not found",
}

# Ids are stored as signed 64-bit integers
SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1


def list_entries(db: Session, model: type[Entry], user: User) -> list[Entry]:
    return (
        db.query(model)
        .filter(model.user_id == user.id)
        .order_by(model.date.desc(), model.id.desc())
        .all()
    )


def create_entry(db: Session, model: type[Entry], user: User, fields: dict[str, Any]) -> Entry:
    row = model(user_id=user.id, **fields)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def load_owned_entry(db: Session, model: type[Entry], entry_id: int, email: str) -> Entry:
    """Fetch a row and check it belongs to ``email``.

    Missing rows raise ``NotFound``; rows owned by someone else raise
    ``Forbidden`` so the two cases stay distinguishable.
    """
    if not SQLITE_INT_MIN <= entry_id <= SQLITE_INT_MAX:
        raise NotFound(NOT_FOUND_MESSAGES[model])
    row = (
        db.query(model)
        .options(joinedload(model.user))
        .filter(model.id == entry_id)
        .first()
    )
    if row is None:
        raise NotFound(NOT_FOUND_MESSAGES[model])
    if row.user is None or row.user.email != normalize_email(email):
        raise Forbidden("Unauthorized")
    return row


def delete_owned_entry(db: Session, model: type[Entry], entry_id: int, email: str) -> None:
    row = load_owned_entry(db, model, entry_id, email)
    db.delete(row)
    db.commit()
