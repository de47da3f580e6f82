"""Global exception handlers producing a consistent JSON error envelope.

Every error response has the shape ``{"message": str, "errors": object | null}``.
Unexpected exceptions are logged and reported as an opaque 500; diagnostic
detail is only added when the ``DEBUG`` setting is on.
"""

import traceback
from collections import defaultdict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from libs.common.config import get_settings
from libs.common.errors import AppError
from libs.common.logging import get_logger

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "An error occurred while processing your request."


def _request_validation_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = defaultdict(list)
    for error in exc.errors():
        # Drop the "body"/"query"/"path" prefix FastAPI puts in front of the field.
        loc = [str(part) for part in error.get("loc", ())[1:]] or ["request"]
        errors[".".join(loc)].append(error.get("msg", "Invalid value."))
    return dict(errors)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Application error: %s", exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "message": "The given data was invalid.",
            "errors": _request_validation_errors(exc),
        },
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail) or GENERIC_ERROR_MESSAGE, "errors": None},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)

    content: dict = {"message": GENERIC_ERROR_MESSAGE, "errors": None}
    if get_settings().DEBUG:
        content["message"] = str(exc) or GENERIC_ERROR_MESSAGE
        content["errors"] = {
            "exception": type(exc).__name__,
            "trace": traceback.format_exception(exc)[-5:],
        }
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def add_exception_handlers(app: FastAPI) -> None:
    """Register the JSON error handlers on an app."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
