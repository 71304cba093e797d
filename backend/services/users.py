from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from auth.utils import normalize_email
from db.models import User

logger = logging.getLogger(__name__)


def upsert_user(db: Session, email: str, name: str | None = None) -> User:
    """Return the user row for ``email``, creating it on first sign-in."""
    normalized = normalize_email(email)
    user = db.query(User).filter(User.email == normalized).first()
    if user is None:
        user = User(email=normalized, name=name)
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"Created user {user.id} for {normalized}")
        return user
    if name and name != user.name:
        user.name = name
        db.commit()
    return user
