from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Missing required fields"
SESSION_API_PREFIXES = ("/api/food", "/api/workouts", "/api/dashboard")


class AppError(Exception):
    """Base for errors rendered to clients as ``{"error": message}``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Unauthorized"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = MISSING_FIELDS_MESSAGE


class ServiceUnavailable(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service unavailable"


class InternalError(AppError):
    pass


@contextmanager
def persistence_guard(db: Session, failure_message: str) -> Iterator[None]:
    """Translate unexpected failures inside the block into ``InternalError``.

    ``AppError`` subclasses pass through untouched so not-found and ownership
    failures keep their status codes.
    """
    try:
        yield
    except AppError:
        raise
    except Exception as exc:
        db.rollback()
        logger.exception(f"{failure_message}: {exc}")
        raise InternalError(failure_message) from exc


def validation_error_message(errors: list[dict]) -> str:
    if any(err.get("type") == "json_invalid" for err in errors):
        return "Invalid JSON body"
    if any(err.get("type") in {"missing", "blank"} for err in errors):
        return MISSING_FIELDS_MESSAGE
    fields: list[str] = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "path", "query")]
        name = ".".join(loc) or "body"
        if name not in fields:
            fields.append(name)
    return f"Invalid fields: {', '.join(fields)}"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def _requires_session(path: str) -> bool:
    return any(path == prefix or path.startswith(prefix + "/") for prefix in SESSION_API_PREFIXES)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Request bodies are validated before dependencies run; a missing session still wins.
    if _requires_session(request.url.path):
        from auth.utils import session_from_request

        if session_from_request(request) is None:
            return await app_error_handler(request, Unauthorized())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": validation_error_message(list(exc.errors()))},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
