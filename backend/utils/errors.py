import logging
import traceback
from enum import Enum

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException

from config.env import ENV

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    INTERNAL = "internal"


# Conflicts are reported as 400, there is no distinct 409 in this API
ERROR_STATUS = {
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 400,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.INTERNAL: 500,
}


class AppError(Exception):
    kind = ErrorKind.INTERNAL

    def __init__(self, message: str, kind: ErrorKind | None = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    @property
    def status_code(self) -> int:
        return ERROR_STATUS[self.kind]


class BadRequest(AppError):
    kind = ErrorKind.BAD_REQUEST


class Unauthorized(AppError):
    kind = ErrorKind.UNAUTHORIZED


class Forbidden(AppError):
    kind = ErrorKind.FORBIDDEN


class NotFound(AppError):
    kind = ErrorKind.NOT_FOUND


class Conflict(AppError):
    kind = ErrorKind.CONFLICT


class RateLimited(AppError):
    kind = ErrorKind.RATE_LIMITED


# =====================================================
# BOUNDARY
# =====================================================

def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message, **extra},
    )


def duplicate_key_field(exc: DuplicateKeyError) -> str:
    details = exc.details or {}
    key_value = details.get("keyValue") or details.get("keyPattern") or {}
    if key_value:
        return next(iter(key_value))
    return "field"


async def app_error_handler(request: Request, exc: AppError):
    return error_response(exc.status_code, exc.message)


def _is_missing(error: dict) -> bool:
    if error.get("type") == "missing":
        return True
    # empty strings on required text fields count as missing
    return error.get("type") == "string_too_short" and (error.get("ctx") or {}).get("min_length") == 1


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(_is_missing(e) for e in errors):
        message = "Please provide all required fields"
    elif errors:
        message = errors[0].get("msg", "Invalid data provided")
    else:
        message = "Invalid data provided"
    return error_response(400, message)


async def http_error_handler(request: Request, exc: HTTPException):
    return error_response(exc.status_code, str(exc.detail))


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    field = duplicate_key_field(exc)
    return error_response(400, f"A record with this {field} already exists")


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("UNHANDLED_ERROR path=%s", request.url.path)

    if ENV == "development":
        return error_response(
            500,
            "Server Error",
            stack="".join(traceback.format_exception(exc)),
        )
    return error_response(500, "Server Error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
