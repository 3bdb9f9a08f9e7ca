"""Base model for request and response bodies."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Accepts field names or their camelCase aliases; dumps aliases, skipping ``None``."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True, extra="forbid")

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:  # type: ignore[override]
        kwargs.setdefault("by_alias", True)
        kwargs.setdefault("exclude_none", True)
        return super().model_dump(**kwargs)


__all__ = ["BaseSchema"]
