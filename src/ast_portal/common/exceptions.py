"""Exception handlers that turn every failure into a Problem Details response."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import ApiError
from .logging import log_context
from .problem_details import (
    ProblemDetails,
    ProblemDetailsErrorItem,
    error_items_from_pydantic,
    status_error_type,
    status_title,
)

logger = logging.getLogger("ast_portal.errors")
PROBLEM_MEDIA_TYPE = "application/problem+json"
INTERNAL_ERROR_DETAIL = "Internal server error"


def problem_response(
    request: Request,
    *,
    status_code: int,
    detail: str | None,
    error_type: str | None = None,
    title: str | None = None,
    errors: list[ProblemDetailsErrorItem] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    problem = ProblemDetails(
        type=error_type or status_error_type(status_code),
        title=title or status_title(status_code),
        status=status_code,
        detail=detail,
        instance=request.url.path,
        request_id=getattr(request.state, "correlation_id", None),
        errors=errors,
    )
    return JSONResponse(
        status_code=status_code,
        content=problem.model_dump(by_alias=True, exclude_none=True),
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers,
    )


def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    # Upstream and config failures are surfaced to the user, so log what they saw.
    if exc.status_code >= 500:
        logger.error(
            "api_error",
            extra=log_context(
                path=request.url.path,
                error_type=exc.error_type,
                detail=exc.detail,
            ),
        )
    return problem_response(
        request,
        status_code=exc.status_code,
        detail=exc.detail,
        error_type=exc.error_type,
        title=exc.title,
        errors=exc.errors,
        headers=exc.headers,
    )


def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "http_exception",
            extra=log_context(path=request.url.path, status_code=exc.status_code),
        )
        detail = INTERNAL_ERROR_DETAIL
    else:
        detail = exc.detail if isinstance(exc.detail, str) else None
    return problem_response(
        request,
        status_code=exc.status_code,
        detail=detail,
        headers=getattr(exc, "headers", None),
    )


def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return problem_response(
        request,
        status_code=422,
        detail="Invalid request",
        errors=error_items_from_pydantic(exc.errors()),
    )


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Opaque 500 for the client; the stack trace goes to the log."""
    logger.exception(
        "unhandled_exception",
        extra=log_context(
            path=request.url.path,
            method=request.method,
            exception_type=type(exc).__name__,
        ),
    )
    return problem_response(
        request,
        status_code=500,
        detail=INTERNAL_ERROR_DETAIL,
        error_type="internal_error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem_response",
    "register_exception_handlers",
]
