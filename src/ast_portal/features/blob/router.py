"""HTTP interface for direct file uploads to blob storage."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, status
from pydantic import ValidationError

from ast_portal.common.errors import InvalidRequestError
from ast_portal.common.problem_details import error_items_from_pydantic
from ast_portal.dependencies import get_upload_dispatcher

from .schemas import BlobUploadRequest, BlobUploadResponse
from .service import UploadDispatcher

router = APIRouter(prefix="/blob", tags=["blob"])


@router.post(
    "/upload-file",
    response_model=BlobUploadResponse,
    response_model_exclude_none=False,
    status_code=status.HTTP_200_OK,
    summary="Upload a base64-encoded file for a run",
)
async def upload_file(
    payload: Annotated[dict[str, Any], Body()],
    dispatcher: Annotated[UploadDispatcher, Depends(get_upload_dispatcher)],
) -> BlobUploadResponse:
    try:
        request = BlobUploadRequest.model_validate(payload)
    except ValidationError as exc:
        raise InvalidRequestError(
            "Missing required fields: fileAsBase64, fileName, fileType and runID",
            errors=error_items_from_pydantic(exc.errors()),
        ) from exc

    stored = await dispatcher.upload(request)
    return BlobUploadResponse(
        message="File uploaded successfully",
        blob_name=stored.blob_name,
        url=stored.url,
        etag=stored.etag,
    )


__all__ = ["router"]
