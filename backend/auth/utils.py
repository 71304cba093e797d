from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Request, Response
from sqlalchemy.orm import Session

from config import settings
from db.models import User
from utils.errors import NotFound, Unauthorized


@dataclass(frozen=True)
class SessionInfo:
    email: str
    name: str | None
    expires: datetime


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def create_session_token(email: str, name: str | None = None, expiry_hours_override: int | None = None) -> str:
    expiry_hours = int(expiry_hours_override) if expiry_hours_override is not None else settings.SESSION_EXPIRY_HOURS
    payload = {
        "sub": normalize_email(email),
        "name": name,
        "exp": datetime.now(timezone.utc) + timedelta(hours=expiry_hours),
        "iat": datetime.now(timezone.utc),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_session_token(token: str) -> SessionInfo | None:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None
    email = normalize_email(str(payload.get("sub") or ""))
    if not email:
        return None
    return SessionInfo(
        email=email,
        name=payload.get("name"),
        expires=datetime.fromtimestamp(int(payload.get("exp", 0)), tz=timezone.utc),
    )


def _cookie_name() -> str:
    return (settings.AUTH_COOKIE_NAME or "").strip() or "fittrack_session"


def session_from_request(request: Request) -> SessionInfo | None:
    token = request.cookies.get(_cookie_name())
    if not token:
        return None
    return decode_session_token(token)


def set_session_cookie(response: Response, token: str, *, max_age_seconds: int) -> None:
    samesite = (settings.AUTH_COOKIE_SAMESITE or "lax").strip().lower()
    if samesite not in {"strict", "lax", "none"}:
        samesite = "lax"
    response.set_cookie(
        key=_cookie_name(),
        value=token,
        httponly=bool(settings.AUTH_COOKIE_HTTPONLY),
        secure=bool(settings.AUTH_COOKIE_SECURE),
        samesite=samesite,  # type: ignore[arg-type]
        domain=settings.AUTH_COOKIE_DOMAIN,
        path=settings.AUTH_COOKIE_PATH or "/",
        max_age=max(int(max_age_seconds), 1),
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=_cookie_name(),
        domain=settings.AUTH_COOKIE_DOMAIN,
        path=settings.AUTH_COOKIE_PATH or "/",
    )


def require_session(request: Request) -> SessionInfo:
    session = session_from_request(request)
    if session is None:
        raise Unauthorized()
    request.state.user_email = session.email
    return session


def resolve_user(db: Session, email: str) -> User:
    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if not user:
        raise NotFound("User not found")
    return user
