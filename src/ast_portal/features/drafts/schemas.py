"""Run draft payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import ConfigDict, Field

from ast_portal.common.schema import BaseSchema
from ast_portal.features.spreadsheets.schemas import SpreadsheetSummary


class RunDraft(BaseSchema):
    """Everything needed to submit a run, held between creation and confirmation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(alias="runID")
    run_name: str = Field(alias="runName")
    client: str = ""
    description: str = ""
    file_name: str = Field(alias="fileName")
    file_size: int = Field(alias="fileSize", ge=0)
    file_type: str = Field(alias="fileType")
    file_as_base64: str = Field(alias="fileAsBase64")
    summary: SpreadsheetSummary = Field(alias="excelData")
    created_at: datetime = Field(alias="createdAt")


class RunDraftView(BaseSchema):
    """What the review page shows: the draft without its file content."""

    id: str = Field(alias="runID")
    run_name: str = Field(alias="runName")
    client: str = ""
    description: str = ""
    file_name: str = Field(alias="fileName")
    file_size: int = Field(alias="fileSize")
    file_type: str = Field(alias="fileType")
    summary: SpreadsheetSummary = Field(alias="excelData")
    total_count: int = Field(alias="totalCount")
    created_at: datetime = Field(alias="createdAt")
    expires_at: datetime = Field(alias="expiresAt")

    @classmethod
    def from_draft(cls, draft: RunDraft, *, expires_at: datetime) -> "RunDraftView":
        return cls(
            id=draft.id,
            run_name=draft.run_name,
            client=draft.client,
            description=draft.description,
            file_name=draft.file_name,
            file_size=draft.file_size,
            file_type=draft.file_type,
            summary=draft.summary,
            total_count=draft.summary.total_count,
            created_at=draft.created_at,
            expires_at=expires_at,
        )


__all__ = ["RunDraft", "RunDraftView"]
