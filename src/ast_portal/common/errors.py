"""Error kinds raised by portal services.

Each kind is an :class:`ApiError` carrying its own status, Problem Details
``type`` and title, so the global handler can render it without a lookup.
"""

from __future__ import annotations

from typing import ClassVar

from fastapi import status

from .problem_details import ProblemDetailsErrorItem


class ApiError(RuntimeError):
    """Base for every error the portal turns into a Problem Details response."""

    status_code: ClassVar[int] = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type: ClassVar[str] = "internal_error"
    title: ClassVar[str] = "Internal server error"

    def __init__(
        self,
        detail: str,
        *,
        errors: list[ProblemDetailsErrorItem] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.errors = errors
        self.headers = headers


class InvalidRequestError(ApiError):
    """A required field is missing, empty or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "bad_request"
    title = "Bad request"


class AuthError(ApiError):
    """Bad credentials, or a missing, expired or malformed session token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_type = "unauthorized"
    title = "Unauthorized"

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(detail)


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "not_found"
    title = "Not found"


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    error_type = "conflict"
    title = "Conflict"


class SpreadsheetParseError(ApiError):
    """The uploaded workbook is unreadable or lacks a required sheet."""

    status_code = 422
    error_type = "validation_error"
    title = "Unreadable spreadsheet"

    def __init__(self, detail: str, *, sheet: str | None = None) -> None:
        super().__init__(
            detail,
            errors=[ProblemDetailsErrorItem(path="file", message=detail, code="spreadsheet_invalid")],
        )
        self.sheet = sheet


class ConfigError(ApiError):
    """Required configuration is missing. Fatal at startup."""

    error_type = "config_error"
    title = "Configuration error"

    def __init__(self, detail: str, *, missing: list[str] | None = None) -> None:
        super().__init__(detail)
        self.missing = list(missing or [])


class UpstreamError(ApiError):
    """The blob store or the job API failed or answered with garbage."""

    error_type = "upstream_error"
    title = "Upstream service error"

    def __init__(self, detail: str, *, upstream_status: int | None = None) -> None:
        super().__init__(detail)
        self.upstream_status = upstream_status


__all__ = [
    "ApiError",
    "AuthError",
    "ConfigError",
    "ConflictError",
    "InvalidRequestError",
    "NotFoundError",
    "SpreadsheetParseError",
    "UpstreamError",
]
