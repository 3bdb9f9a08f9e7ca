"""Problem Details payloads returned by every failing portal request."""

from __future__ import annotations

from collections.abc import Iterable
from http import HTTPStatus
from typing import Any

from pydantic import Field

from .schema import BaseSchema

# Request sections FastAPI puts at the front of a validation ``loc``.
_LOC_SECTIONS = frozenset({"body", "query", "path", "header", "cookie"})


class ProblemDetailsErrorItem(BaseSchema):
    """One field-level problem, e.g. ``{"path": "file", "message": ...}``."""

    path: str | None = None
    message: str
    code: str | None = None


class ProblemDetails(BaseSchema):
    type: str
    title: str
    status: int
    detail: str | None = None
    instance: str
    request_id: str | None = Field(default=None, alias="requestId")
    errors: list[ProblemDetailsErrorItem] | None = None


def status_error_type(status_code: int) -> str:
    """``404`` -> ``not_found``; used for errors the portal did not raise itself."""

    if status_code == 422:
        return "validation_error"
    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        return "error"
    return phrase.lower().replace(" ", "_").replace("-", "_")


def status_title(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def error_items_from_pydantic(errors: Iterable[dict[str, Any]]) -> list[ProblemDetailsErrorItem]:
    items: list[ProblemDetailsErrorItem] = []
    for entry in errors:
        loc = [str(part) for part in entry.get("loc") or () if part not in _LOC_SECTIONS]
        code = entry.get("type")
        items.append(
            ProblemDetailsErrorItem(
                path=".".join(loc) or None,
                message=str(entry.get("msg") or "Invalid value"),
                code=str(code) if code else None,
            )
        )
    return items


__all__ = [
    "ProblemDetails",
    "ProblemDetailsErrorItem",
    "error_items_from_pydantic",
    "status_error_type",
    "status_title",
]
