"""
Exception handlers rendering the failure envelope ``{success: false, message, errors}``.
"""

import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from projecthub.core.exceptions import AppError
from projecthub.core.logging import get_logger
from projecthub.core.settings import settings
from projecthub.schemas.envelope import ApiErrorResponse

logger = get_logger(__name__)


def _error_response(status_code: int, message: str, errors: list | None = None, stack: str | None = None):
    body = ApiErrorResponse(message=message, errors=errors or [], stack=stack)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("server_error", error=exc.message, error_type=type(exc).__name__)
    return _error_response(exc.status_code, exc.message, exc.errors)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    message = errors[0]["message"] if len(errors) == 1 else "Request validation failed"
    return _error_response(status.HTTP_400_BAD_REQUEST, message, errors)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(exc.status_code, str(exc.detail))


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return _error_response(status.HTTP_429_TOO_MANY_REQUESTS, f"Rate limit exceeded. {exc.detail}")


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled_exception", error_type=type(exc).__name__)
    stack = "".join(traceback.format_exception(exc)) if settings.is_development else None
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", stack=stack)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
