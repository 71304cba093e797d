from fastapi import Request, status
from fastapi.responses import RedirectResponse

from auth.utils import session_from_request
from config import settings


def is_protected_path(path: str, prefixes: list[str] | None = None) -> bool:
    """Match ``/food`` and ``/food/...`` but not ``/foodie`` or anything under ``/api``."""
    if path.startswith("/api/"):
        return False
    for prefix in prefixes if prefixes is not None else settings.PROTECTED_PATH_PREFIXES:
        prefix = prefix.rstrip("/")
        if prefix and (path == prefix or path.startswith(prefix + "/")):
            return True
    return False


async def route_guard_middleware(request: Request, call_next):
    if is_protected_path(request.url.path) and session_from_request(request) is None:
        return RedirectResponse(settings.SIGNIN_PATH, status_code=status.HTTP_302_FOUND)
    return await call_next(request)
