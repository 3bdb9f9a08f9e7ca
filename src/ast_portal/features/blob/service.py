"""Send a run's input file to blob storage."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import TYPE_CHECKING

import anyio.to_thread

from ast_portal.common.errors import InvalidRequestError, UpstreamError
from ast_portal.common.logging import log_context
from ast_portal.infra.storage import AzureBlobStorage, StorageError, StoredBlob

from .schemas import BlobUploadRequest

if TYPE_CHECKING:
    from ast_portal.features.drafts.schemas import RunDraft

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "bin"
INPUT_FILE_STEM = "input-file"


def blob_name_for(file_name: str, run_id: str) -> str:
    """``<run_id>/input-file.<ext>``; ``bin`` when the name carries no extension."""

    _, dot, extension = file_name.rpartition(".")
    if not dot or not extension:
        extension = DEFAULT_EXTENSION
    return f"{run_id}/{INPUT_FILE_STEM}.{extension}"


def encode_file_content(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_file_content(encoded: str) -> bytes:
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidRequestError("fileAsBase64 is not valid base64 content") from exc


class UploadDispatcher:
    """One upload attempt per call; the blob path is fixed by run id and extension."""

    def __init__(self, *, storage: AzureBlobStorage) -> None:
        self._storage = storage

    async def upload(self, request: BlobUploadRequest) -> StoredBlob:
        blob_name = blob_name_for(request.file_name, request.run_id)
        data = decode_file_content(request.file_as_base64)

        logger.info(
            "blob.upload.start",
            extra=log_context(
                run_id=request.run_id,
                blob_name=blob_name,
                byte_size=len(data),
                content_type=request.file_type,
            ),
        )
        try:
            stored = await anyio.to_thread.run_sync(
                lambda: self._storage.write(blob_name, data, content_type=request.file_type)
            )
        except StorageError as exc:
            logger.error(
                "blob.upload.failed",
                extra=log_context(run_id=request.run_id, blob_name=blob_name, error=str(exc)),
            )
            raise UpstreamError(str(exc)) from exc

        logger.info(
            "blob.upload.success",
            extra=log_context(run_id=request.run_id, blob_name=blob_name, etag=stored.etag),
        )
        return stored

    async def upload_draft(self, draft: RunDraft) -> StoredBlob:
        return await self.upload(
            BlobUploadRequest(
                file_as_base64=draft.file_as_base64,
                file_name=draft.file_name,
                file_type=draft.file_type,
                run_id=draft.id,
            )
        )


__all__ = [
    "UploadDispatcher",
    "blob_name_for",
    "decode_file_content",
    "encode_file_content",
]
