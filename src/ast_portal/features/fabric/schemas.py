"""Job submission payloads."""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field

from ast_portal.common.schema import BaseSchema


class RunNotebookRequest(BaseSchema):
    model_config = ConfigDict(extra="ignore")

    params: dict[str, Any] = Field(default_factory=dict)
