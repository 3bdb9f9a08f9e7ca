"""Run listing payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from ast_portal.common.schema import BaseSchema


class RunOut(BaseSchema):
    run_id: str = Field(alias="runID")
    run_name: str | None = Field(default=None, alias="runName")
    client: str | None = None
    blob_name: str | None = Field(default=None, alias="blobName")
    location: str
    job_instance_id: str = Field(alias="jobInstanceId")
    job_workspace_id: str = Field(alias="jobWorkspaceId")
    parameters: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(alias="createdAt")


class RunListResponse(BaseSchema):
    items: list[RunOut]
    count: int


__all__ = ["RunListResponse", "RunOut"]
