import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from auth.models import ProviderResponse, SessionResponse, SessionUser
from auth.oauth import (
    OAuthError,
    build_authorization_url,
    callback_url,
    decode_state_cookie,
    encode_state_cookie,
    exchange_code_for_profile,
    new_state,
    safe_redirect_target,
)
from auth.utils import (
    clear_session_cookie,
    create_session_token,
    session_from_request,
    set_session_cookie,
)
from config import settings
from db.database import get_db
from services.users import upsert_user
from utils.errors import ServiceUnavailable, ValidationFailed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _signin_error_redirect(error: str) -> RedirectResponse:
    return RedirectResponse(
        f"{settings.SIGNIN_PATH}?{urlencode({'error': error})}",
        status_code=status.HTTP_302_FOUND,
    )


def _clear_state_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.OAUTH_STATE_COOKIE_NAME, path="/")


@router.get("/providers", response_model=dict[str, ProviderResponse])
def providers():
    return {
        "google": ProviderResponse(
            id="google",
            name="Google",
            enabled=settings.google_oauth_enabled,
            signin_url="/api/auth/signin/google",
        )
    }


@router.get("/signin/google")
def signin_google(request: Request, callbackUrl: str | None = None):
    if not settings.google_oauth_enabled:
        raise ServiceUnavailable("Google sign-in is not configured")
    state = new_state()
    redirect_to = safe_redirect_target(callbackUrl)
    url = build_authorization_url(state=state, redirect_uri=callback_url(str(request.base_url)))
    response = RedirectResponse(url, status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        key=settings.OAUTH_STATE_COOKIE_NAME,
        value=encode_state_cookie(state, redirect_to),
        httponly=True,
        secure=bool(settings.AUTH_COOKIE_SECURE),
        samesite="lax",
        path="/",
        max_age=max(int(settings.OAUTH_STATE_TTL_SECONDS), 1),
    )
    return response


@router.get("/callback/google")
def callback_google(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    db: Session = Depends(get_db),
):
    if not settings.google_oauth_enabled:
        raise ServiceUnavailable("Google sign-in is not configured")
    if error:
        logger.warning(f"Google OAuth returned an error: {error}")
        return _signin_error_redirect("OAuthCallback")

    stored = decode_state_cookie(request.cookies.get(settings.OAUTH_STATE_COOKIE_NAME))
    if not stored or not state or stored.get("state") != state:
        raise ValidationFailed("Invalid OAuth state")
    if not code:
        raise ValidationFailed("Missing authorization code")

    try:
        profile = exchange_code_for_profile(code, redirect_uri=callback_url(str(request.base_url)))
    except OAuthError as e:
        logger.warning(f"Google OAuth exchange failed: {e}")
        response = _signin_error_redirect("OAuthCallback")
        _clear_state_cookie(response)
        return response
    if not profile.email_verified:
        raise ValidationFailed("Google account email is not verified")

    user = upsert_user(db, profile.email, profile.name)
    logger.info(f"User {user.id} signed in")
    token = create_session_token(user.email, user.name)
    response = RedirectResponse(
        safe_redirect_target(stored.get("redirect_to")),
        status_code=status.HTTP_302_FOUND,
    )
    set_session_cookie(response, token, max_age_seconds=max(int(settings.SESSION_EXPIRY_HOURS), 1) * 3600)
    _clear_state_cookie(response)
    return response


@router.get("/session", response_model=SessionResponse, response_model_exclude_none=True)
def current_session(request: Request):
    session = session_from_request(request)
    if session is None:
        return SessionResponse()
    return SessionResponse(
        user=SessionUser(email=session.email, name=session.name),
        expires=session.expires.isoformat(),
    )


@router.post("/signout")
def signout(response: Response):
    clear_session_cookie(response)
    return {"success": True}


@router.get("/signout")
def signout_redirect():
    response = RedirectResponse("/", status_code=status.HTTP_302_FOUND)
    clear_session_cookie(response)
    return response
