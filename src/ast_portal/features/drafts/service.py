"""Turn a form submission into a draft, and a confirmed draft into a run."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import PurePath

from fastapi import UploadFile

from ast_portal.common.errors import InvalidRequestError, NotFoundError
from ast_portal.common.logging import log_context
from ast_portal.common.time import utc_now
from ast_portal.features.blob.service import UploadDispatcher, encode_file_content
from ast_portal.features.fabric.client import JobSubmission
from ast_portal.features.fabric.service import JobDispatcher
from ast_portal.features.spreadsheets.ingest import read_upload
from ast_portal.infra.storage import StoredBlob

from .schemas import RunDraft
from .store import DraftStore, StoredDraft

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_CONTENT_TYPE = "application/vnd.ms-excel"
ALLOWED_CONTENT_TYPES = frozenset({XLSX_CONTENT_TYPE, XLS_CONTENT_TYPE})
EXTENSION_CONTENT_TYPES = {".xlsx": XLSX_CONTENT_TYPE, ".xls": XLS_CONTENT_TYPE}
FALLBACK_CONTENT_TYPE = "application/octet-stream"

NO_DRAFT = "No run data found. Please start over."


def resolve_content_type(file_name: str, declared: str | None) -> str:
    """Reject anything that is neither an Excel MIME type nor an .xlsx/.xls name."""

    declared = (declared or "").strip()
    extension = PurePath(file_name).suffix.lower()
    if declared not in ALLOWED_CONTENT_TYPES and extension not in EXTENSION_CONTENT_TYPES:
        raise InvalidRequestError("Please select an Excel file (.xlsx or .xls)")
    if declared and declared != FALLBACK_CONTENT_TYPE:
        return declared
    return EXTENSION_CONTENT_TYPES.get(extension, declared or FALLBACK_CONTENT_TYPE)


@dataclass(frozen=True, slots=True)
class SubmittedRun:
    draft: RunDraft
    stored: StoredBlob
    submission: JobSubmission


class RunSubmissionService:
    """Create drafts and submit confirmed ones: upload first, then start the job."""

    def __init__(
        self,
        *,
        store: DraftStore,
        uploads: UploadDispatcher,
        jobs: JobDispatcher,
    ) -> None:
        self._store = store
        self._uploads = uploads
        self._jobs = jobs

    @property
    def store(self) -> DraftStore:
        return self._store

    async def create_draft(
        self,
        *,
        run_name: str | None,
        client: str | None,
        description: str | None,
        upload: UploadFile | None,
    ) -> tuple[str, StoredDraft]:
        run_name = (run_name or "").strip()
        if not run_name:
            raise InvalidRequestError("Run name is required")
        if upload is None or not upload.filename:
            raise InvalidRequestError("Please select a file")

        file_name = upload.filename
        content_type = resolve_content_type(file_name, upload.content_type)
        data, summary = await read_upload(upload)

        draft = RunDraft(
            id=str(uuid.uuid4()),
            run_name=run_name,
            client=(client or "").strip(),
            description=(description or "").strip(),
            file_name=file_name,
            file_size=len(data),
            file_type=content_type,
            file_as_base64=encode_file_content(data),
            summary=summary,
            created_at=utc_now(),
        )
        key, entry = self._store.put(draft)
        logger.info(
            "draft.create.success",
            extra=log_context(
                run_id=draft.id,
                byte_size=draft.file_size,
                lots_count=summary.lots_count,
                patents_count=summary.patents_count,
            ),
        )
        return key, entry

    def review(self, key: str | None) -> StoredDraft:
        entry = self._store.peek(key)
        if entry is None:
            raise NotFoundError(NO_DRAFT)
        return entry

    def cancel(self, key: str | None) -> bool:
        return self._store.discard(key)

    async def confirm(self, key: str | None) -> SubmittedRun:
        """Consume the draft, upload its file, then start the notebook job.

        The draft is gone once this starts; a failure in either step leaves
        nothing to resubmit and an uploaded blob is not removed.
        """
        entry = self._store.take(key)
        if entry is None:
            raise NotFoundError(NO_DRAFT)

        draft = entry.draft
        logger.info("run.confirm.start", extra=log_context(run_id=draft.id))
        stored = await self._uploads.upload_draft(draft)
        submission = await self._jobs.submit_draft(draft, stored)
        logger.info(
            "run.confirm.success",
            extra=log_context(
                run_id=draft.id,
                blob_name=stored.blob_name,
                job_instance_id=submission.location.job_instance_id,
            ),
        )
        return SubmittedRun(draft=draft, stored=stored, submission=submission)


__all__ = [
    "NO_DRAFT",
    "RunSubmissionService",
    "SubmittedRun",
    "resolve_content_type",
]
