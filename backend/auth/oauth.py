"""Google OAuth 2.0 authorization-code flow.

The browser is sent to Google with a random ``state``; the state and the
post-sign-in target travel in a short-lived signed cookie and are checked when
Google redirects back to the callback.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode

import httpx
import jwt

from config import settings

logger = logging.getLogger(__name__)

GOOGLE_SCOPES = "openid email profile"
CALLBACK_PATH = "/api/auth/callback/google"


class OAuthError(Exception):
    """Raised when the provider exchange or profile lookup fails."""


@dataclass(frozen=True)
class OAuthProfile:
    email: str
    name: str | None
    email_verified: bool


def warn_if_disabled() -> None:
    if not settings.google_oauth_enabled:
        logger.warning(
            "Missing GOOGLE_ID or GOOGLE_SECRET environment variables. "
            "Google sign-in is disabled until both are set."
        )


def safe_redirect_target(target: str | None) -> str:
    """Only same-site relative paths are allowed as post-sign-in targets."""
    default = settings.SIGNIN_DEFAULT_REDIRECT or "/"
    value = (target or "").strip()
    if not value.startswith("/") or value.startswith("//") or "\\" in value:
        return default
    return value


def callback_url(base_url: str) -> str:
    base = (settings.PUBLIC_BASE_URL or base_url or "").rstrip("/")
    return f"{base}{CALLBACK_PATH}"


def new_state() -> str:
    return secrets.token_urlsafe(24)


def encode_state_cookie(state: str, redirect_to: str) -> str:
    payload = {
        "state": state,
        "redirect_to": redirect_to,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=settings.OAUTH_STATE_TTL_SECONDS),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_state_cookie(token: str | None) -> dict | None:
    if not token:
        return None
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None


def build_authorization_url(*, state: str, redirect_uri: str) -> str:
    params = {
        "client_id": settings.GOOGLE_ID or "",
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": GOOGLE_SCOPES,
        "state": state,
        "access_type": "online",
        "prompt": "select_account",
    }
    return f"{settings.GOOGLE_AUTHORIZE_URL}?{urlencode(params)}"


def exchange_code_for_profile(code: str, *, redirect_uri: str) -> OAuthProfile:
    """Trade an authorization code for tokens, then read the userinfo profile."""
    timeout_s = max(int(settings.OAUTH_TIMEOUT_SECONDS), 1)
    try:
        with httpx.Client(timeout=timeout_s) as client:
            token_resp = client.post(
                settings.GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": settings.GOOGLE_ID or "",
                    "client_secret": settings.GOOGLE_SECRET or "",
                    "redirect_uri": redirect_uri,
                    "grant_type": "authorization_code",
                },
                headers={"Accept": "application/json"},
            )
            token_resp.raise_for_status()
            access_token = str(token_resp.json().get("access_token") or "")
            if not access_token:
                raise OAuthError("Token response did not include an access token")

            info_resp = client.get(
                settings.GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            info_resp.raise_for_status()
            data = info_resp.json()
    except httpx.HTTPError as exc:
        raise OAuthError(f"Google OAuth request failed: {exc}") from exc

    email = str(data.get("email") or "").strip()
    if not email:
        raise OAuthError("Google profile did not include an email address")
    return OAuthProfile(
        email=email,
        name=(str(data.get("name") or "").strip() or None),
        email_verified=bool(data.get("email_verified", False)),
    )
