"""Request and response payloads for blob uploads."""

from __future__ import annotations

from pydantic import ConfigDict, Field

from ast_portal.common.schema import BaseSchema


class BlobUploadRequest(BaseSchema):
    """Upload body; extra keys (the rest of a serialized draft) are ignored."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=False)

    file_as_base64: str = Field(min_length=1, alias="fileAsBase64")
    file_name: str = Field(min_length=1, alias="fileName")
    file_type: str = Field(min_length=1, alias="fileType")
    run_id: str = Field(min_length=1, alias="runID")


class BlobUploadResponse(BaseSchema):
    message: str
    blob_name: str = Field(alias="blobName")
    url: str
    etag: str | None = None
