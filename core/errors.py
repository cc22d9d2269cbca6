"""Application errors and their HTTP mapping."""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.requests import Request

from core.logging import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


class AppError(Exception):
    code = "app_error"
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code

    @property
    def headers(self) -> Optional[dict]:
        return None


class ValidationError(AppError, ValueError):
    code = "validation_error"
    status_code = 400
    message = "Invalid input"


class NotFoundError(AppError, LookupError):
    code = "not_found"
    status_code = 404
    message = "Not found"


class HabitNotFoundError(NotFoundError):
    message = "Habit not found"


class UserNotFoundError(NotFoundError):
    message = "User not found"


class ConflictError(AppError):
    code = "conflict"
    status_code = 400
    message = "Conflict"


class DuplicateCheckInError(ConflictError):
    code = "already_checked_in"
    message = "Already checked in today"


class EmailAlreadyRegisteredError(ConflictError):
    code = "email_taken"
    message = "Email already registered"


class ForbiddenError(AppError):
    code = "forbidden"
    status_code = 403
    message = "Forbidden"


class AuthError(AppError):
    """Unauthenticated. `code` tells the caller whether a refresh is worth trying."""
    code = "unauthenticated"
    status_code = 401
    message = "Could not validate credentials"

    @property
    def headers(self) -> Optional[dict]:
        return {"WWW-Authenticate": "Bearer"}


class InvalidCredentialsError(AuthError):
    code = "invalid_credentials"
    message = "Invalid email or password"


class InvalidTokenError(AuthError):
    code = "invalid_token"
    message = "Invalid token"


class TokenExpiredError(AuthError):
    code = "token_expired"
    message = "Token expired"


class RefreshTokenError(AuthError):
    MESSAGES = {
        "not_found": "Refresh token not found",
        "expired": "Refresh token expired",
    }

    def __init__(self, reason: str):
        super().__init__(self.MESSAGES.get(reason, "Invalid refresh token"), code=f"refresh_token_{reason}")
        self.reason = reason


def _error_payload(code: str, message: str) -> dict:
    return {
        "error": {"code": code, "message": message},
        "detail": message,
    }


async def app_error_handler(request: Request, exc: AppError):
    log_level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(
        log_level,
        "app.error",
        extra={"path": request.url.path, "error_code": exc.code, "status": exc.status_code},
    )
    return JSONResponse(status_code=exc.status_code, content=_error_payload(exc.code, exc.message), headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid input"))
    payload = _error_payload(ValidationError.code, message)
    payload["errors"] = [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]
    return JSONResponse(status_code=400, content=payload)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
